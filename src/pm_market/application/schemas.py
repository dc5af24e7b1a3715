"""Pydantic schemas for pm_market API responses.

Cursor format for markets (VARCHAR PK, not sequential):
  {"ts": "<created_at ISO>", "id": "<market_id>"}
  Encoded as Base64 JSON string.

Implied odds are each pool's share of the total stake; an empty market
shows 0.5 / 0.5.
"""

import base64
import binascii
import json
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from src.pm_common.amounts import amount_to_display, implied_odds, price_to_display
from src.pm_market.domain.models import Market, PriceQuote
from src.pm_settlement.domain.evaluator import winning_side_of

# ---------------------------------------------------------------------------
# Cursor utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_market: Market) -> str:
    """Encode composite cursor from last market in page."""
    payload = {
        "ts": last_market.created_at.isoformat(),
        "id": last_market.id,
    }
    return base64.b64encode(json.dumps(payload).encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[str | None, str | None]:
    """Decode composite cursor -> (ts_iso, market_id), or (None, None) on error."""
    if cursor is None:
        return None, None
    try:
        data = json.loads(base64.b64decode(cursor.encode()).decode())
        ts, market_id = data["ts"], data["id"]
        datetime.fromisoformat(ts)
        return ts, market_id
    except (binascii.Error, UnicodeDecodeError, ValueError, KeyError, TypeError):
        return None, None


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateMarketRequest(BaseModel):
    asset_name: str = Field(..., min_length=1, max_length=32)
    strike_price: Decimal
    expiry_timestamp: datetime | None = None
    expiry_hours: int | None = Field(None, ge=1, le=24 * 365)
    description: str | None = Field(None, max_length=500)


# ---------------------------------------------------------------------------
# Market list item (lightweight)
# ---------------------------------------------------------------------------


class MarketListItem(BaseModel):
    id: str
    asset_name: str
    description: str | None
    status: str
    strike_price: Decimal
    strike_price_display: str
    expiry_timestamp: datetime
    yes_pool: Decimal
    no_pool: Decimal
    total_pool_display: str
    yes_odds: Decimal
    no_odds: Decimal
    winning_side: str | None

    @classmethod
    def from_domain(cls, m: Market) -> "MarketListItem":
        yes_odds, no_odds = implied_odds(m.yes_pool, m.no_pool)
        winner = winning_side_of(m)
        return cls(
            id=m.id,
            asset_name=m.asset_name,
            description=m.description,
            status=m.status,
            strike_price=m.strike_price,
            strike_price_display=price_to_display(m.strike_price),
            expiry_timestamp=m.expiry_timestamp,
            yes_pool=m.yes_pool,
            no_pool=m.no_pool,
            total_pool_display=amount_to_display(m.total_pool),
            yes_odds=yes_odds,
            no_odds=no_odds,
            winning_side=winner.value if winner else None,
        )


class MarketListResponse(BaseModel):
    items: list[MarketListItem]
    next_cursor: str | None
    has_more: bool


# ---------------------------------------------------------------------------
# Market detail (full fields)
# ---------------------------------------------------------------------------


class MarketDetail(MarketListItem):
    total_pool: Decimal
    settled_price: Decimal | None
    settled_price_display: str | None
    settled_at: datetime | None
    creator_address: str | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, m: Market) -> "MarketDetail":
        base = MarketListItem.from_domain(m).model_dump()
        return cls(
            **base,
            total_pool=m.total_pool,
            settled_price=m.settled_price,
            settled_price_display=(
                price_to_display(m.settled_price) if m.settled_price is not None else None
            ),
            settled_at=m.settled_at,
            creator_address=m.creator_address,
            created_at=m.created_at,
            updated_at=m.updated_at,
        )


class PriceResponse(BaseModel):
    market_id: str
    asset_name: str
    price: Decimal
    price_display: str
    timestamp: datetime
    strike_price: Decimal
    above_strike: bool

    @classmethod
    def from_quote(cls, market: Market, quote: PriceQuote) -> "PriceResponse":
        return cls(
            market_id=market.id,
            asset_name=quote.asset_name,
            price=quote.price,
            price_display=price_to_display(quote.price),
            timestamp=quote.timestamp,
            strike_price=market.strike_price,
            above_strike=quote.price > market.strike_price,
        )
