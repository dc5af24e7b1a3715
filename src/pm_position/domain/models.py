"""Domain models for pm_position — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.pm_market.domain.models import Market


@dataclass
class Position:
    id: str
    market_id: str
    wallet_address: str
    side: str                       # Side value
    amount: Decimal                 # stake, > 0
    claimed: bool = False           # false -> true only, via claim
    payout: Decimal | None = None   # recorded at claim time
    claimed_at: datetime | None = None
    created_at: datetime | None = None


@dataclass
class PositionWithMarket:
    """Position joined with its market — the shape claim and listings need."""

    position: Position
    market: Market
