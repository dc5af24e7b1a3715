# src/pm_position/infrastructure/persistence.py
"""PositionRepository — concrete implementation of PositionRepositoryProtocol.

Reads join positions with their market so claim evaluation and listings get
both rows from one consistent snapshot. mark_claimed() is a conditional
UPDATE (claimed = FALSE in the WHERE clause): of two concurrent claims on the
same position, exactly one gets a row back.
"""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import store_call
from src.pm_market.domain.models import Market
from src.pm_position.domain.models import Position, PositionWithMarket

_POSITION_COLUMNS = """
    id, market_id, wallet_address, side, amount, claimed, payout,
    claimed_at, created_at
"""

_JOINED_COLUMNS = """
    p.id, p.market_id, p.wallet_address, p.side, p.amount, p.claimed,
    p.payout, p.claimed_at, p.created_at,
    m.asset_name AS m_asset_name, m.description AS m_description,
    m.strike_price AS m_strike_price, m.expiry_timestamp AS m_expiry_timestamp,
    m.status AS m_status, m.yes_pool AS m_yes_pool, m.no_pool AS m_no_pool,
    m.settled_price AS m_settled_price, m.settled_at AS m_settled_at,
    m.creator_address AS m_creator_address,
    m.created_at AS m_created_at, m.updated_at AS m_updated_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO positions (id, market_id, wallet_address, side, amount, claimed)
    VALUES (:id, :market_id, :wallet_address, :side, :amount, FALSE)
    RETURNING {_POSITION_COLUMNS}
""")

_GET_WITH_MARKET_SQL = text(f"""
    SELECT {_JOINED_COLUMNS}
    FROM positions p
    JOIN markets m ON m.id = p.market_id
    WHERE p.id = :position_id
      AND p.wallet_address = :wallet_address
""")

_LIST_BY_WALLET_SQL = text(f"""
    SELECT {_JOINED_COLUMNS}
    FROM positions p
    JOIN markets m ON m.id = p.market_id
    WHERE p.wallet_address = :wallet_address
      AND (CAST(:market_id AS TEXT) IS NULL OR p.market_id = CAST(:market_id AS TEXT))
    ORDER BY p.created_at DESC, p.id DESC
""")

_MARK_CLAIMED_SQL = text(f"""
    UPDATE positions
    SET claimed = TRUE,
        payout = :payout,
        claimed_at = :now
    WHERE id = :position_id
      AND claimed = FALSE
    RETURNING {_POSITION_COLUMNS}
""")


def _row_to_position(row: object) -> Position:
    return Position(
        id=row.id,  # type: ignore[attr-defined]
        market_id=row.market_id,  # type: ignore[attr-defined]
        wallet_address=row.wallet_address,  # type: ignore[attr-defined]
        side=row.side,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        claimed=row.claimed,  # type: ignore[attr-defined]
        payout=row.payout,  # type: ignore[attr-defined]
        claimed_at=row.claimed_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_joined(row: object) -> PositionWithMarket:
    market = Market(
        id=row.market_id,  # type: ignore[attr-defined]
        asset_name=row.m_asset_name,  # type: ignore[attr-defined]
        description=row.m_description,  # type: ignore[attr-defined]
        strike_price=row.m_strike_price,  # type: ignore[attr-defined]
        expiry_timestamp=row.m_expiry_timestamp,  # type: ignore[attr-defined]
        status=row.m_status,  # type: ignore[attr-defined]
        yes_pool=row.m_yes_pool,  # type: ignore[attr-defined]
        no_pool=row.m_no_pool,  # type: ignore[attr-defined]
        settled_price=row.m_settled_price,  # type: ignore[attr-defined]
        settled_at=row.m_settled_at,  # type: ignore[attr-defined]
        creator_address=row.m_creator_address,  # type: ignore[attr-defined]
        created_at=row.m_created_at,  # type: ignore[attr-defined]
        updated_at=row.m_updated_at,  # type: ignore[attr-defined]
    )
    return PositionWithMarket(position=_row_to_position(row), market=market)


class PositionRepository:
    async def insert_position(
        self,
        db: AsyncSession,
        position_id: str,
        market_id: str,
        wallet_address: str,
        side: str,
        amount: Decimal,
    ) -> Position:
        async with store_call("insert_position"):
            result = await db.execute(
                _INSERT_SQL,
                {
                    "id": position_id,
                    "market_id": market_id,
                    "wallet_address": wallet_address,
                    "side": side,
                    "amount": amount,
                },
            )
        return _row_to_position(result.fetchone())

    async def get_with_market(
        self, db: AsyncSession, position_id: str, wallet_address: str
    ) -> PositionWithMarket | None:
        async with store_call("get_position"):
            row = (
                await db.execute(
                    _GET_WITH_MARKET_SQL,
                    {"position_id": position_id, "wallet_address": wallet_address},
                )
            ).fetchone()
        return _row_to_joined(row) if row else None

    async def list_by_wallet(
        self, db: AsyncSession, wallet_address: str, market_id: str | None
    ) -> list[PositionWithMarket]:
        async with store_call("list_positions"):
            rows = (
                await db.execute(
                    _LIST_BY_WALLET_SQL,
                    {"wallet_address": wallet_address, "market_id": market_id},
                )
            ).fetchall()
        return [_row_to_joined(r) for r in rows]

    async def mark_claimed(
        self, db: AsyncSession, position_id: str, payout: Decimal, now: datetime
    ) -> Position | None:
        async with store_call("mark_claimed"):
            result = await db.execute(
                _MARK_CLAIMED_SQL,
                {"position_id": position_id, "payout": payout, "now": now},
            )
        row = result.fetchone()
        return _row_to_position(row) if row else None
