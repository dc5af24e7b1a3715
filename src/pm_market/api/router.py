"""pm_market REST endpoints.

GET  /markets                          — list with cursor pagination
POST /markets                          — create a market
GET  /markets/{market_id}              — full detail with implied odds
GET  /markets/{market_id}/price        — latest price feed quote for the asset
GET  /markets/{market_id}/activity     — recent predictions on the market

Reads are public; creating a market requires a wallet session.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_wallet_session
from src.pm_gateway.wallet.models import WalletSession
from src.pm_market.application.schemas import CreateMarketRequest
from src.pm_market.application.service import (
    MarketApplicationService,
    get_market_service,
)

router = APIRouter(prefix="/markets", tags=["markets"])


@router.get("")
async def list_markets(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
    status_filter: str | None = Query(
        None, alias="status",
        description="Filter by status. Default: active. Use 'all' for no filter.",
    ),
    limit: int = Query(20, ge=1, le=100),
    cursor: str | None = Query(None),
) -> ApiResponse:
    result = await service.list_markets(db, status_filter, cursor, limit)
    return success_response(result.model_dump(mode="json"), request)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_market(
    body: CreateMarketRequest,
    request: Request,
    session: Annotated[WalletSession, Depends(get_wallet_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
) -> ApiResponse:
    result = await service.create_market(db, session, body)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/{market_id}")
async def get_market(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
) -> ApiResponse:
    result = await service.get_market(db, market_id)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/{market_id}/price")
async def get_price(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
) -> ApiResponse:
    result = await service.latest_price(db, market_id)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/{market_id}/activity")
async def get_activity(
    market_id: str,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[MarketApplicationService, Depends(get_market_service)],
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    result = await service.activity(db, market_id, limit)
    return success_response(result.model_dump(mode="json"), request)
