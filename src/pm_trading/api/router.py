"""pm_trading REST endpoint.

POST /markets/{market_id}/trades — stake on YES or NO
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_wallet_session
from src.pm_gateway.wallet.models import WalletSession
from src.pm_trading.application.schemas import PlaceTradeRequest
from src.pm_trading.application.service import TradeService, get_trade_service

router = APIRouter(prefix="/markets", tags=["trading"])


@router.post("/{market_id}/trades")
async def place_trade(
    market_id: str,
    body: PlaceTradeRequest,
    request: Request,
    session: Annotated[WalletSession, Depends(get_wallet_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[TradeService, Depends(get_trade_service)],
) -> ApiResponse:
    result = await service.place_trade(db, session, market_id, body.side, body.amount)
    return success_response(result.model_dump(mode="json"), request)
