# src/pm_transaction/domain/repository.py
"""Protocols for the transaction pipeline.

TransactionSubmitter is the seam between the core and a chain: the simulated
implementation lives in infrastructure/simulated.py and tests supply a
deterministic fake. submit() only prepares the handle; start() is called after
the caller commits, so nothing resolves for a write that was rolled back.
A real chain client would broadcast in start() and poll its own receipts.
"""

from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import TransactionKind
from src.pm_transaction.domain.models import (
    TransactionHandle,
    TransactionPayload,
    TransactionRecord,
)


class TransactionSubmitter(Protocol):
    async def submit(
        self, kind: TransactionKind, payload: TransactionPayload
    ) -> TransactionHandle: ...

    async def start(self, handle: TransactionHandle) -> None: ...

    async def poll(self, tx_hash: str) -> TransactionHandle | None: ...


class TransactionStatusCacheProtocol(Protocol):
    async def put(self, handle: TransactionHandle) -> None: ...

    async def get(self, tx_hash: str) -> TransactionHandle | None: ...


class TransactionLogProtocol(Protocol):
    async def insert(
        self, db: AsyncSession, handle: TransactionHandle, payload: TransactionPayload
    ) -> TransactionRecord: ...

    async def mark_resolved(
        self,
        db: AsyncSession,
        tx_hash: str,
        status: str,
        error: str | None,
        resolved_at: datetime,
    ) -> bool: ...

    async def get_by_hash(
        self, db: AsyncSession, tx_hash: str
    ) -> TransactionRecord | None: ...

    async def list_by_wallet(
        self,
        db: AsyncSession,
        wallet_address: str,
        market_id: str | None,
        cursor_id: int | None,
        limit: int,
    ) -> list[TransactionRecord]: ...

    async def list_market_activity(
        self, db: AsyncSession, market_id: str, limit: int
    ) -> list[TransactionRecord]: ...
