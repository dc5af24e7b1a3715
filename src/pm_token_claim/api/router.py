"""pm_token_claim REST endpoints.

POST /token-claims            — register an email and wallet for a token grant
GET  /token-claims?email=     — status of the claim registered for an email
POST /token-claims/process    — send grants for a batch of pending claims

Registration and status are public; processing requires a wallet session.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import get_db_session
from src.pm_common.response import ApiResponse, success_response
from src.pm_gateway.auth.dependencies import get_wallet_session
from src.pm_gateway.wallet.models import WalletSession
from src.pm_token_claim.application.schemas import RegisterTokenClaimRequest
from src.pm_token_claim.application.service import (
    TokenClaimService,
    get_token_claim_service,
)

router = APIRouter(prefix="/token-claims", tags=["token-claims"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def register_token_claim(
    body: RegisterTokenClaimRequest,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[TokenClaimService, Depends(get_token_claim_service)],
) -> ApiResponse:
    result = await service.register(db, body)
    return success_response(result.model_dump(mode="json"), request)


@router.get("")
async def get_token_claim(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[TokenClaimService, Depends(get_token_claim_service)],
    email: str = Query(..., max_length=254),
) -> ApiResponse:
    result = await service.get_status(db, email)
    return success_response(result.model_dump(mode="json"), request)


@router.post("/process")
async def process_token_claims(
    request: Request,
    session: Annotated[WalletSession, Depends(get_wallet_session)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    service: Annotated[TokenClaimService, Depends(get_token_claim_service)],
    limit: int | None = Query(None, ge=1, le=100),
) -> ApiResponse:
    result = await service.process_pending(db, limit)
    return success_response(result.model_dump(mode="json"), request)
