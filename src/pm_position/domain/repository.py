"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from datetime import datetime
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_position.domain.models import Position, PositionWithMarket


class PositionRepositoryProtocol(Protocol):
    async def insert_position(
        self,
        db: AsyncSession,
        position_id: str,
        market_id: str,
        wallet_address: str,
        side: str,
        amount: Decimal,
    ) -> Position: ...

    async def get_with_market(
        self,
        db: AsyncSession,
        position_id: str,
        wallet_address: str,
    ) -> PositionWithMarket | None: ...

    async def list_by_wallet(
        self,
        db: AsyncSession,
        wallet_address: str,
        market_id: str | None,
    ) -> list[PositionWithMarket]: ...

    async def mark_claimed(
        self,
        db: AsyncSession,
        position_id: str,
        payout: Decimal,
        now: datetime,
    ) -> Position | None: ...
