"""Settlement and claim REST endpoints.

POST /markets/{market_id}/settle      — settle an expired market (price optional)
POST /positions/{position_id}/claim   — claim a winning position
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_wallet_session
from src.pm_gateway.wallet.models import WalletSession
from src.pm_settlement.application.schemas import SettleMarketRequest
from src.pm_settlement.application.service import (
    SettlementService,
    get_settlement_service,
)

router = APIRouter(tags=["settlement"])


@router.post("/markets/{market_id}/settle")
async def settle_market(
    market_id: str,
    request: Request,
    session: Annotated[WalletSession, Depends(get_wallet_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[SettlementService, Depends(get_settlement_service)],
    body: SettleMarketRequest | None = None,
) -> ApiResponse:
    price = body.settled_price if body is not None else None
    result = await service.settle_market(db, session, market_id, price)
    return success_response(result.model_dump(mode="json"), request)


@router.post("/positions/{position_id}/claim")
async def claim_position(
    position_id: str,
    request: Request,
    session: Annotated[WalletSession, Depends(get_wallet_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[SettlementService, Depends(get_settlement_service)],
) -> ApiResponse:
    result = await service.claim(db, session, position_id)
    return success_response(result.model_dump(mode="json"), request)
