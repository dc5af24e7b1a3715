# src/pm_market/domain/repository.py
"""Repository Protocols — dependency inversion for testability.

Unit tests inject a mock that conforms to these Protocols.
Infrastructure layer provides the real implementation.

Every mutating method is a single conditional UPDATE; a None return means
the precondition in the WHERE clause did not hold (no rows changed).
"""

from datetime import datetime
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import Side
from src.pm_market.domain.models import Market, PriceQuote


class MarketRepositoryProtocol(Protocol):
    async def get_market_by_id(
        self,
        db: AsyncSession,
        market_id: str,
    ) -> Market | None: ...

    async def list_markets(
        self,
        db: AsyncSession,
        status: str | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Market]: ...

    async def create_market(
        self,
        db: AsyncSession,
        market_id: str,
        asset_name: str,
        description: str | None,
        strike_price: Decimal,
        expiry_timestamp: datetime,
        creator_address: str | None,
    ) -> Market: ...

    async def increment_pool(
        self,
        db: AsyncSession,
        market_id: str,
        side: Side,
        amount: Decimal,
        now: datetime,
    ) -> Market | None: ...

    async def settle_market(
        self,
        db: AsyncSession,
        market_id: str,
        settled_price: Decimal,
        now: datetime,
    ) -> Market | None: ...


class PriceFeedProtocol(Protocol):
    async def latest_price(
        self,
        db: AsyncSession,
        asset_name: str,
    ) -> PriceQuote | None: ...
