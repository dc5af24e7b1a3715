"""pm_transaction REST endpoints.

GET /transactions              — session wallet's history, cursor pagination
GET /transactions/{tx_hash}    — single transaction, live status while pending
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_wallet_session
from src.pm_gateway.wallet.models import WalletSession
from src.pm_transaction.application.service import (
    TransactionService,
    get_transaction_service,
)

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("")
async def list_transactions(
    request: Request,
    session: Annotated[WalletSession, Depends(get_wallet_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[TransactionService, Depends(get_transaction_service)],
    market_id: str | None = Query(None, description="Filter by market"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    result = await service.list_history(db, session.wallet_address, market_id, cursor, limit)
    return success_response(result.model_dump(mode="json"), request)


@router.get("/{tx_hash}")
async def get_transaction(
    tx_hash: str,
    request: Request,
    session: Annotated[WalletSession, Depends(get_wallet_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[TransactionService, Depends(get_transaction_service)],
) -> ApiResponse:
    result = await service.get_transaction(db, tx_hash)
    return success_response(result.model_dump(mode="json"), request)
