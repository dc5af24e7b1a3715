"""Domain models for pm_market — pure dataclasses, no business logic."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.pm_common.enums import MarketStatus, Side


@dataclass
class Market:
    id: str
    asset_name: str
    description: str | None
    strike_price: Decimal
    expiry_timestamp: datetime
    status: str                      # MarketStatus value
    yes_pool: Decimal
    no_pool: Decimal
    settled_price: Decimal | None    # set iff status == settled
    settled_at: datetime | None
    creator_address: str | None
    created_at: datetime
    updated_at: datetime

    @property
    def is_settled(self) -> bool:
        return self.status == MarketStatus.SETTLED.value

    @property
    def total_pool(self) -> Decimal:
        return self.yes_pool + self.no_pool

    def pool_for(self, side: Side) -> Decimal:
        return self.yes_pool if side is Side.YES else self.no_pool

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expiry_timestamp


@dataclass
class PriceQuote:
    """Latest price for an asset as reported by the price feed."""

    asset_name: str
    price: Decimal
    timestamp: datetime
