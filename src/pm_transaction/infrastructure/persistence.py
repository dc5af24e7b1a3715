"""TransactionLogRepository — user_transactions table.

insert() runs inside the caller's transaction so a trade or claim and its
log row commit together. mark_resolved() is called from the resolution
callback with its own session and only moves rows out of 'pending'.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import store_call
from src.pm_transaction.domain.models import (
    TransactionHandle,
    TransactionPayload,
    TransactionRecord,
)

_COLUMNS = """
    id, tx_hash, wallet_address, market_id, position_id, kind, side,
    amount, status, from_address, to_address, error, created_at, resolved_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO user_transactions
        (tx_hash, wallet_address, market_id, position_id, kind, side,
         amount, status, from_address, to_address, created_at)
    VALUES
        (:tx_hash, :wallet_address, :market_id, :position_id, :kind, :side,
         :amount, :status, :from_address, :to_address, :created_at)
    RETURNING {_COLUMNS}
""")

_MARK_RESOLVED_SQL = text("""
    UPDATE user_transactions
    SET status = :status,
        error = :error,
        resolved_at = :resolved_at
    WHERE tx_hash = :tx_hash
      AND status = 'pending'
    RETURNING id
""")

_GET_BY_HASH_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM user_transactions
    WHERE tx_hash = :tx_hash
""")

_LIST_BY_WALLET_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM user_transactions
    WHERE wallet_address = :wallet_address
      AND (CAST(:market_id AS TEXT) IS NULL OR market_id = CAST(:market_id AS TEXT))
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < CAST(:cursor_id AS BIGINT))
    ORDER BY id DESC
    LIMIT :limit
""")

_LIST_MARKET_ACTIVITY_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM user_transactions
    WHERE market_id = :market_id
      AND kind = 'predict'
    ORDER BY id DESC
    LIMIT :limit
""")


def _row_to_record(row: object) -> TransactionRecord:
    return TransactionRecord(
        id=row.id,  # type: ignore[attr-defined]
        tx_hash=row.tx_hash,  # type: ignore[attr-defined]
        wallet_address=row.wallet_address,  # type: ignore[attr-defined]
        market_id=row.market_id,  # type: ignore[attr-defined]
        position_id=row.position_id,  # type: ignore[attr-defined]
        kind=row.kind,  # type: ignore[attr-defined]
        side=row.side,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        from_address=row.from_address,  # type: ignore[attr-defined]
        to_address=row.to_address,  # type: ignore[attr-defined]
        error=row.error,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        resolved_at=row.resolved_at,  # type: ignore[attr-defined]
    )


class TransactionLogRepository:
    async def insert(
        self, db: AsyncSession, handle: TransactionHandle, payload: TransactionPayload
    ) -> TransactionRecord:
        async with store_call("insert_transaction"):
            result = await db.execute(
                _INSERT_SQL,
                {
                    "tx_hash": handle.tx_hash,
                    "wallet_address": payload.from_address,
                    "market_id": payload.market_id,
                    "position_id": payload.position_id,
                    "kind": handle.kind,
                    "side": payload.side,
                    "amount": handle.amount,
                    "status": handle.status,
                    "from_address": handle.from_address,
                    "to_address": handle.to_address,
                    "created_at": handle.timestamp,
                },
            )
        return _row_to_record(result.fetchone())

    async def mark_resolved(
        self,
        db: AsyncSession,
        tx_hash: str,
        status: str,
        error: str | None,
        resolved_at: datetime,
    ) -> bool:
        async with store_call("mark_transaction_resolved"):
            result = await db.execute(
                _MARK_RESOLVED_SQL,
                {
                    "tx_hash": tx_hash,
                    "status": status,
                    "error": error,
                    "resolved_at": resolved_at,
                },
            )
        return result.fetchone() is not None

    async def get_by_hash(
        self, db: AsyncSession, tx_hash: str
    ) -> TransactionRecord | None:
        async with store_call("get_transaction"):
            row = (await db.execute(_GET_BY_HASH_SQL, {"tx_hash": tx_hash})).fetchone()
        return _row_to_record(row) if row else None

    async def list_by_wallet(
        self,
        db: AsyncSession,
        wallet_address: str,
        market_id: str | None,
        cursor_id: int | None,
        limit: int,
    ) -> list[TransactionRecord]:
        async with store_call("list_transactions"):
            rows = (
                await db.execute(
                    _LIST_BY_WALLET_SQL,
                    {
                        "wallet_address": wallet_address,
                        "market_id": market_id,
                        "cursor_id": cursor_id,
                        "limit": limit,
                    },
                )
            ).fetchall()
        return [_row_to_record(r) for r in rows]

    async def list_market_activity(
        self, db: AsyncSession, market_id: str, limit: int
    ) -> list[TransactionRecord]:
        async with store_call("list_market_activity"):
            rows = (
                await db.execute(
                    _LIST_MARKET_ACTIVITY_SQL, {"market_id": market_id, "limit": limit}
                )
            ).fetchall()
        return [_row_to_record(r) for r in rows]
