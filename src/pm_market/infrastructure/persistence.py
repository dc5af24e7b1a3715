"""MarketRepository — concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.

Pool increments and settlement are single conditional UPDATE ... RETURNING
statements: the row lock taken by UPDATE serializes concurrent trades on the
same market, so there is no read-modify-write window. Transaction ownership
stays with the caller.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import store_call
from src.pm_common.enums import Side
from src.pm_market.domain.models import Market

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_MARKET_COLUMNS = """
    id, asset_name, description, strike_price, expiry_timestamp, status,
    yes_pool, no_pool, settled_price, settled_at, creator_address,
    created_at, updated_at
"""

_GET_MARKET_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE id = :market_id
""")

_LIST_MARKETS_SQL = text(f"""
    SELECT {_MARKET_COLUMNS}
    FROM markets
    WHERE
        (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
        AND (
            CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
            OR created_at < CAST(:cursor_ts AS TIMESTAMPTZ)
            OR (
                created_at = CAST(:cursor_ts AS TIMESTAMPTZ)
                AND id < CAST(:cursor_id AS TEXT)
            )
        )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_INSERT_MARKET_SQL = text(f"""
    INSERT INTO markets
        (id, asset_name, description, strike_price, expiry_timestamp,
         status, yes_pool, no_pool, creator_address)
    VALUES
        (:id, :asset_name, :description, :strike_price, :expiry_timestamp,
         'active', 0, 0, :creator_address)
    RETURNING {_MARKET_COLUMNS}
""")

_INCREMENT_YES_POOL_SQL = text(f"""
    UPDATE markets
    SET yes_pool = yes_pool + :amount
    WHERE id = :market_id
      AND status = 'active'
      AND expiry_timestamp > :now
    RETURNING {_MARKET_COLUMNS}
""")

_INCREMENT_NO_POOL_SQL = text(f"""
    UPDATE markets
    SET no_pool = no_pool + :amount
    WHERE id = :market_id
      AND status = 'active'
      AND expiry_timestamp > :now
    RETURNING {_MARKET_COLUMNS}
""")

_SETTLE_MARKET_SQL = text(f"""
    UPDATE markets
    SET status = 'settled',
        settled_price = :settled_price,
        settled_at = :now
    WHERE id = :market_id
      AND status = 'active'
      AND expiry_timestamp <= :now
    RETURNING {_MARKET_COLUMNS}
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_market(row: object) -> Market:
    return Market(
        id=row.id,  # type: ignore[attr-defined]
        asset_name=row.asset_name,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        strike_price=row.strike_price,  # type: ignore[attr-defined]
        expiry_timestamp=row.expiry_timestamp,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        yes_pool=row.yes_pool,  # type: ignore[attr-defined]
        no_pool=row.no_pool,  # type: ignore[attr-defined]
        settled_price=row.settled_price,  # type: ignore[attr-defined]
        settled_at=row.settled_at,  # type: ignore[attr-defined]
        creator_address=row.creator_address,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class MarketRepository:
    """Concrete repository — mutations are atomic at the SQL level."""

    async def get_market_by_id(
        self, db: AsyncSession, market_id: str
    ) -> Market | None:
        async with store_call("get_market"):
            result = await db.execute(_GET_MARKET_SQL, {"market_id": market_id})
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def list_markets(
        self,
        db: AsyncSession,
        status: str | None,
        cursor_ts: str | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Market]:
        # asyncpg requires a real datetime object for TIMESTAMPTZ parameters,
        # not an ISO string.  Parse the cursor timestamp here.
        cursor_ts_dt: datetime | None = None
        if cursor_ts is not None:
            cursor_ts_dt = datetime.fromisoformat(cursor_ts)

        async with store_call("list_markets"):
            result = await db.execute(
                _LIST_MARKETS_SQL,
                {
                    "status": status,
                    "cursor_ts": cursor_ts_dt,
                    "cursor_id": cursor_id,
                    "limit": limit,
                },
            )
        rows = result.fetchall()
        return [_row_to_market(row) for row in rows]

    async def create_market(
        self,
        db: AsyncSession,
        market_id: str,
        asset_name: str,
        description: str | None,
        strike_price: Decimal,
        expiry_timestamp: datetime,
        creator_address: str | None,
    ) -> Market:
        async with store_call("create_market"):
            result = await db.execute(
                _INSERT_MARKET_SQL,
                {
                    "id": market_id,
                    "asset_name": asset_name,
                    "description": description,
                    "strike_price": strike_price,
                    "expiry_timestamp": expiry_timestamp,
                    "creator_address": creator_address,
                },
            )
        return _row_to_market(result.fetchone())

    async def increment_pool(
        self,
        db: AsyncSession,
        market_id: str,
        side: Side,
        amount: Decimal,
        now: datetime,
    ) -> Market | None:
        """Add ``amount`` to the chosen pool if the market is still open.

        Returns None when the market is missing, settled or expired.
        """
        sql = _INCREMENT_YES_POOL_SQL if side is Side.YES else _INCREMENT_NO_POOL_SQL
        async with store_call("increment_pool"):
            result = await db.execute(
                sql, {"market_id": market_id, "amount": amount, "now": now}
            )
        row = result.fetchone()
        return _row_to_market(row) if row else None

    async def settle_market(
        self,
        db: AsyncSession,
        market_id: str,
        settled_price: Decimal,
        now: datetime,
    ) -> Market | None:
        """active -> settled, once. Returns None if the row was not active+expired."""
        async with store_call("settle_market"):
            result = await db.execute(
                _SETTLE_MARKET_SQL,
                {"market_id": market_id, "settled_price": settled_price, "now": now},
            )
        row = result.fetchone()
        return _row_to_market(row) if row else None
