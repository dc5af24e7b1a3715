"""Wallet API router: connect, me.

All endpoints return ApiResponse[T]. request_id is read from
request.state (injected by RequestLogMiddleware).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from config.settings import settings
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_wallet_session
from src.pm_gateway.wallet.models import WalletSession
from src.pm_gateway.wallet.schemas import (
    ConnectWalletRequest,
    ConnectWalletResponse,
    WalletInfo,
)
from src.pm_gateway.wallet.service import WalletService, chain_details

router = APIRouter(prefix="/wallet", tags=["wallet"])
_service = WalletService()


def _wallet_info(session: WalletSession) -> WalletInfo:
    return WalletInfo(
        wallet_address=session.wallet_address,
        chain_id=session.chain_id,
        chain_name=session.chain_name,
        explorer_url=chain_details(session.chain_id).explorer,
    )


@router.post(
    "/connect",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Connect a wallet and open a session",
)
async def connect_wallet(request: Request, body: ConnectWalletRequest) -> ApiResponse:
    session, token = _service.connect(body.address, body.chain_id)
    data = ConnectWalletResponse(
        access_token=token,
        token_type="Bearer",
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        wallet=_wallet_info(session),
    )
    resp = success_response(data.model_dump(), request)
    resp.message = "Wallet connected"
    return resp


@router.get("/me", response_model=ApiResponse, summary="Current wallet session")
async def me(
    request: Request,
    session: Annotated[WalletSession, Depends(get_wallet_session)],
) -> ApiResponse:
    return success_response(_wallet_info(session).model_dump(), request)
