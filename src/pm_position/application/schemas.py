# src/pm_position/application/schemas.py
"""Pydantic schemas for positions API."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel

from src.pm_common.amounts import amount_to_display
from src.pm_common.enums import PositionOutcome
from src.pm_position.domain.models import PositionWithMarket
from src.pm_settlement.domain.evaluator import estimate_payout, position_outcome


class PositionResponse(BaseModel):
    id: str
    market_id: str
    asset_name: str
    strike_price: Decimal
    market_status: str
    settled_price: Decimal | None
    side: str
    amount: Decimal
    amount_display: str
    outcome: str
    claimed: bool
    claimable: bool
    payout: Decimal | None
    created_at: datetime | None
    claimed_at: datetime | None

    @classmethod
    def from_domain(cls, pm: PositionWithMarket) -> "PositionResponse":
        p, m = pm.position, pm.market
        outcome = position_outcome(p, m)
        return cls(
            id=p.id,
            market_id=m.id,
            asset_name=m.asset_name,
            strike_price=m.strike_price,
            market_status=m.status,
            settled_price=m.settled_price,
            side=p.side,
            amount=p.amount,
            amount_display=amount_to_display(p.amount),
            outcome=outcome.value,
            claimed=p.claimed,
            claimable=outcome is PositionOutcome.WIN and not p.claimed,
            payout=estimate_payout(p, m),
            created_at=p.created_at,
            claimed_at=p.claimed_at,
        )


class PositionListResponse(BaseModel):
    items: list[PositionResponse]
    total: int
