# src/pm_token_claim/application/schemas.py
"""Pydantic schemas for token claim registration and processing."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from src.pm_common.amounts import amount_to_display
from src.pm_token_claim.domain.models import TokenClaim
from src.pm_transaction.application.schemas import TransactionOut


class RegisterTokenClaimRequest(BaseModel):
    email: str = Field(..., max_length=254)
    wallet_address: str = Field(..., description="0x-prefixed 20-byte hex address")


class TokenClaimOut(BaseModel):
    id: int
    email: str
    wallet_address: str
    amount: Decimal
    amount_display: str
    status: str
    tx_hash: str | None
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_domain(cls, c: TokenClaim) -> "TokenClaimOut":
        return cls(
            id=c.id,
            email=c.email,
            wallet_address=c.wallet_address,
            amount=c.amount,
            amount_display=amount_to_display(c.amount),
            status=c.status,
            tx_hash=c.tx_hash,
            created_at=c.created_at,
            updated_at=c.updated_at,
        )


class ProcessTokenClaimsResponse(BaseModel):
    processed: int
    items: list[TokenClaimOut]
    transactions: list[TransactionOut]
