# src/pm_transaction/application/service.py
"""TransactionService — emits pipeline transactions and serves history.

emit() is called by the trade, settlement, claim and market-creation flows
inside their DB transaction: the submitter hands back a pending handle and
the log row is written alongside the domain writes. start() runs only after
that transaction commits, so a resolution always finds its log row and a
rolled-back write never shows up as a confirmed transaction.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.pm_common.database import async_session_factory
from src.pm_common.enums import TransactionKind, TransactionStatus
from src.pm_common.errors import TransactionNotFoundError
from src.pm_common.redis_client import get_redis
from src.pm_common.retry import with_store_retry
from src.pm_token_claim.infrastructure.persistence import TokenClaimRepository
from src.pm_transaction.application.schemas import (
    MarketActivityResponse,
    TransactionListResponse,
    TransactionOut,
    cursor_decode,
    cursor_encode,
)
from src.pm_transaction.domain.models import TransactionHandle, TransactionPayload
from src.pm_transaction.domain.repository import (
    TransactionLogProtocol,
    TransactionSubmitter,
)
from src.pm_transaction.infrastructure.persistence import TransactionLogRepository
from src.pm_transaction.infrastructure.simulated import SimulatedTransactionSubmitter
from src.pm_transaction.infrastructure.status_cache import RedisTransactionStatusCache

logger = logging.getLogger(__name__)


class TransactionService:
    def __init__(
        self,
        submitter: TransactionSubmitter,
        log: TransactionLogProtocol | None = None,
    ) -> None:
        self._submitter = submitter
        self._log: TransactionLogProtocol = log or TransactionLogRepository()

    @property
    def submitter(self) -> TransactionSubmitter:
        return self._submitter

    async def emit(
        self, db: AsyncSession, kind: TransactionKind, payload: TransactionPayload
    ) -> TransactionHandle:
        handle = await self._submitter.submit(kind, payload)
        await self._log.insert(db, handle, payload)
        return handle

    async def start(self, handle: TransactionHandle) -> None:
        await self._submitter.start(handle)

    async def list_history(
        self,
        db: AsyncSession,
        wallet_address: str,
        market_id: str | None,
        cursor: str | None,
        limit: int,
    ) -> TransactionListResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        records = await self._log.list_by_wallet(
            db, wallet_address, market_id, cursor_id, limit + 1
        )
        has_more = len(records) > limit
        page = records[:limit]
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return TransactionListResponse(
            items=[TransactionOut.from_record(r) for r in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def market_activity(
        self, db: AsyncSession, market_id: str, limit: int
    ) -> MarketActivityResponse:
        records = await self._log.list_market_activity(db, market_id, limit)
        return MarketActivityResponse(
            market_id=market_id,
            items=[TransactionOut.from_record(r) for r in records],
        )

    async def get_transaction(self, db: AsyncSession, tx_hash: str) -> TransactionOut:
        """Durable row first; a pending row is refreshed from the live status cache."""
        record = await self._log.get_by_hash(db, tx_hash)
        if record is not None and record.status != "pending":
            return TransactionOut.from_record(record)

        live = await self._submitter.poll(tx_hash)
        if record is None:
            if live is None:
                raise TransactionNotFoundError(tx_hash)
            return TransactionOut.from_handle(live)

        out = TransactionOut.from_record(record)
        if live is not None:
            out.status = live.status
            out.error = live.error
            out.resolved_at = live.resolved_at
        return out


async def persist_resolution(handle: TransactionHandle) -> None:
    """on_resolved callback: copy the final status into user_transactions.

    A rejected token_grant also moves its token claim to failed, in the same
    DB transaction as the log row.
    """
    repo = TransactionLogRepository()
    grant_failed = (
        handle.kind == TransactionKind.TOKEN_GRANT.value
        and handle.status == TransactionStatus.FAILED.value
    )

    async def _write() -> bool:
        async with async_session_factory() as session:
            async with session.begin():
                updated = await repo.mark_resolved(
                    session, handle.tx_hash, handle.status, handle.error, handle.resolved_at  # type: ignore[arg-type]
                )
                if updated and grant_failed:
                    await TokenClaimRepository().mark_failed_by_tx(session, handle.tx_hash)
                return updated

    updated = await with_store_retry(_write)
    if not updated:
        logger.warning("No pending log row for %s", handle.tx_hash)


_service: TransactionService | None = None


def get_transaction_service() -> TransactionService:
    global _service  # noqa: PLW0603
    if _service is None:
        submitter = SimulatedTransactionSubmitter(
            cache=RedisTransactionStatusCache(get_redis, settings.TX_STATUS_TTL_SECONDS),
            contract_address=settings.MARKET_CONTRACT_ADDRESS,
            min_delay=settings.TX_MIN_DELAY_SECONDS,
            max_delay=settings.TX_MAX_DELAY_SECONDS,
            failure_rate=settings.TX_FAILURE_RATE,
            on_resolved=persist_resolution,
        )
        _service = TransactionService(submitter)
    return _service


async def close_transaction_service() -> None:
    global _service  # noqa: PLW0603
    if _service is not None:
        submitter = _service.submitter
        if isinstance(submitter, SimulatedTransactionSubmitter):
            await submitter.close()
        _service = None
