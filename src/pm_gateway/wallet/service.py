"""Wallet connection: address normalization and chain lookup.

No signature is verified — the wallet provider is trusted to report the
address, and the issued token only scopes reads/writes to that address.
"""

import logging
import re

from src.pm_common.errors import InvalidWalletAddressError, UnsupportedChainError
from src.pm_gateway.auth.jwt_handler import create_session_token
from src.pm_gateway.wallet.models import ChainDetails, WalletSession

logger = logging.getLogger(__name__)

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

SUPPORTED_CHAINS: dict[str, ChainDetails] = {
    "0x1": ChainDetails("Ethereum Mainnet", "https://etherscan.io"),
    "0x5": ChainDetails("Goerli Testnet", "https://goerli.etherscan.io"),
    "0x89": ChainDetails("Polygon", "https://polygonscan.com"),
    "0xa86a": ChainDetails("Avalanche", "https://snowtrace.io"),
    "0x13881": ChainDetails("Mumbai Testnet", "https://mumbai.polygonscan.com"),
    "0xa869": ChainDetails("Avalanche Fuji", "https://testnet.snowtrace.io"),
}

_UNKNOWN_CHAIN = ChainDetails("Unknown Network", "")


def normalize_address(address: str) -> str:
    """Validate and lower-case an EVM address."""
    candidate = address.strip()
    if not _ADDRESS_RE.match(candidate):
        raise InvalidWalletAddressError(address)
    return candidate.lower()


def chain_details(chain_id: str | None) -> ChainDetails:
    if chain_id is None:
        return _UNKNOWN_CHAIN
    return SUPPORTED_CHAINS.get(chain_id.lower(), _UNKNOWN_CHAIN)


def format_address(address: str) -> str:
    """0x742d35cc...f44e style short form for logs."""
    return f"{address[:6]}...{address[-4:]}"


class WalletService:
    """Stateless service — instantiate once, reuse across requests."""

    def connect(self, address: str, chain_id: str | None) -> tuple[WalletSession, str]:
        wallet_address = normalize_address(address)
        if chain_id is not None and chain_id.lower() not in SUPPORTED_CHAINS:
            raise UnsupportedChainError(chain_id)

        details = chain_details(chain_id)
        session = WalletSession(
            wallet_address=wallet_address,
            chain_id=chain_id.lower() if chain_id else None,
            chain_name=details.name,
        )
        token = create_session_token(session.wallet_address, session.chain_id)
        logger.info("Wallet connected: %s on %s", format_address(wallet_address), details.name)
        return session, token
