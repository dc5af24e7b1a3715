"""Pydantic schemas for pm_trading API.

amount is accepted as a plain Decimal and validated by the service so that
non-positive amounts surface as InvalidAmountError (code 4001), not as a
generic request validation failure.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from src.pm_common.amounts import amount_to_display
from src.pm_common.enums import Side
from src.pm_market.domain.models import Market
from src.pm_position.domain.models import Position
from src.pm_transaction.application.schemas import TransactionOut


class PlaceTradeRequest(BaseModel):
    side: Side
    amount: Decimal


class PlacedPosition(BaseModel):
    id: str
    market_id: str
    side: str
    amount: Decimal
    amount_display: str
    created_at: datetime | None

    @classmethod
    def from_domain(cls, p: Position) -> "PlacedPosition":
        return cls(
            id=p.id,
            market_id=p.market_id,
            side=p.side,
            amount=p.amount,
            amount_display=amount_to_display(p.amount),
            created_at=p.created_at,
        )


class PoolSnapshot(BaseModel):
    yes_pool: Decimal
    no_pool: Decimal
    total_pool: Decimal

    @classmethod
    def from_market(cls, m: Market) -> "PoolSnapshot":
        return cls(yes_pool=m.yes_pool, no_pool=m.no_pool, total_pool=m.total_pool)


class PlaceTradeResponse(BaseModel):
    position: PlacedPosition
    pools: PoolSnapshot
    transaction: TransactionOut
