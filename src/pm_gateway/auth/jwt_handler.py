"""Wallet session token creation and verification.

HS256 (symmetric HMAC) with the shared JWT_SECRET. The token carries the
connected wallet address as "sub" and the chain id as "chain"; it is the
server-side replacement for keeping the address in browser storage.

No token revocation: once issued, a token is valid until expiry.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.pm_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"
_SESSION_EXPIRE = timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
_TOKEN_TYPE = "wallet_session"


def create_session_token(wallet_address: str, chain_id: str | None) -> str:
    """Issue a session token for a connected wallet (default: 60 min)."""
    now = datetime.now(UTC)
    payload: dict[str, object] = {
        "sub": wallet_address,
        "type": _TOKEN_TYPE,
        "iat": now,
        "exp": now + _SESSION_EXPIRE,
    }
    if chain_id is not None:
        payload["chain"] = chain_id
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=_ALGORITHM))


def decode_session_token(token: str) -> dict[str, str]:
    """Decode and validate a session token.

    Raises:
        InvalidCredentialsError: signature invalid, expired, or wrong token type.
    """
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != _TOKEN_TYPE or not payload.get("sub"):
        raise InvalidCredentialsError()
    return payload
