"""Wallet session — the explicit per-request identity of the caller.

Replaces browser local storage as the holder of "current wallet address".
Built from a verified session token by get_wallet_session and passed to
every operation that acts on behalf of a wallet.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class WalletSession:
    wallet_address: str            # lower-case 0x + 40 hex
    chain_id: str | None
    chain_name: str
    issued_at: datetime | None = None


@dataclass(frozen=True)
class ChainDetails:
    name: str
    explorer: str
