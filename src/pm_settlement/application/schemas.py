"""Pydantic schemas for settlement and claim endpoints."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from src.pm_transaction.application.schemas import TransactionOut


class SettleMarketRequest(BaseModel):
    settled_price: Decimal | None = Field(
        None, gt=0, description="Final asset price; omitted -> latest price feed quote"
    )


class SettleMarketResponse(BaseModel):
    market_id: str
    asset_name: str
    strike_price: Decimal
    settled_price: Decimal
    settled_price_display: str
    winning_side: str
    yes_pool: Decimal
    no_pool: Decimal
    settled_at: datetime | None
    transaction: TransactionOut


class ClaimResponse(BaseModel):
    position_id: str
    market_id: str
    side: str
    stake: Decimal
    payout: Decimal
    payout_display: str
    claimed_at: datetime | None
    transaction: TransactionOut
