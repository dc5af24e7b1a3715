"""FastAPI dependency: get_wallet_session.

Usage in any wallet-scoped router:
    from src.pm_gateway.auth.dependencies import get_wallet_session

    @router.get("/protected")
    async def protected(session: WalletSession = Depends(get_wallet_session)):
        ...
"""

from datetime import UTC, datetime

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.pm_common.errors import InvalidCredentialsError
from src.pm_gateway.auth.jwt_handler import decode_session_token
from src.pm_gateway.wallet.models import WalletSession
from src.pm_gateway.wallet.service import chain_details

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/wallet/connect")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired wallet session",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_wallet_session(
    token: str = Depends(oauth2_scheme),
) -> WalletSession:
    """Validate the Bearer session token and return the caller's WalletSession.

    Raises HTTP 401 if the token is missing, invalid, or expired.
    """
    try:
        payload = decode_session_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    chain_id = payload.get("chain")
    issued = payload.get("iat")
    return WalletSession(
        wallet_address=payload["sub"],
        chain_id=chain_id,
        chain_name=chain_details(chain_id).name,
        issued_at=datetime.fromtimestamp(int(issued), UTC) if issued else None,
    )
