"""pm_position REST endpoints (read side).

GET /positions                 — caller's positions, optional ?market_id=
GET /positions/{position_id}   — single position with outcome and payout
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_wallet_session
from src.pm_gateway.wallet.models import WalletSession
from src.pm_position.application.service import PositionApplicationService

router = APIRouter(prefix="/positions", tags=["positions"])
_service = PositionApplicationService()


@router.get("")
async def list_positions(
    request: Request,
    session: Annotated[WalletSession, Depends(get_wallet_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    market_id: str | None = Query(None),
) -> ApiResponse:
    result = await _service.list_positions(db, session.wallet_address, market_id)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/{position_id}")
async def get_position(
    position_id: str,
    request: Request,
    session: Annotated[WalletSession, Depends(get_wallet_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    result = await _service.get_position(db, session.wallet_address, position_id)
    return success_response(result.model_dump(mode="json"), request)
