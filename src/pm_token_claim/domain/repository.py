"""Repository Protocol for token claims."""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_token_claim.domain.models import TokenClaim


class TokenClaimRepositoryProtocol(Protocol):
    async def find_conflict(
        self, db: AsyncSession, email: str, wallet_address: str
    ) -> TokenClaim | None: ...

    async def insert(
        self, db: AsyncSession, email: str, wallet_address: str, amount: Decimal
    ) -> TokenClaim | None: ...

    async def get_by_email(self, db: AsyncSession, email: str) -> TokenClaim | None: ...

    async def lock_pending(self, db: AsyncSession, limit: int) -> list[TokenClaim]: ...

    async def mark_sent(
        self, db: AsyncSession, claim_id: int, tx_hash: str
    ) -> TokenClaim | None: ...

    async def mark_failed_by_tx(self, db: AsyncSession, tx_hash: str) -> bool: ...
