# src/pm_position/application/service.py
"""PositionApplicationService — read side of positions.

Writes happen in pm_trading (insert) and pm_settlement (claim).
"""
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.errors import PositionNotFoundError
from src.pm_position.application.schemas import PositionListResponse, PositionResponse
from src.pm_position.domain.repository import PositionRepositoryProtocol
from src.pm_position.infrastructure.persistence import PositionRepository


class PositionApplicationService:
    def __init__(self, repo: PositionRepositoryProtocol | None = None) -> None:
        self._repo: PositionRepositoryProtocol = repo or PositionRepository()

    async def list_positions(
        self, db: AsyncSession, wallet_address: str, market_id: str | None
    ) -> PositionListResponse:
        rows = await self._repo.list_by_wallet(db, wallet_address, market_id)
        items = [PositionResponse.from_domain(pm) for pm in rows]
        return PositionListResponse(items=items, total=len(items))

    async def get_position(
        self, db: AsyncSession, wallet_address: str, position_id: str
    ) -> PositionResponse:
        pm = await self._repo.get_with_market(db, position_id, wallet_address)
        if pm is None:
            raise PositionNotFoundError(position_id)
        return PositionResponse.from_domain(pm)
