# src/pm_market/infrastructure/price_feed.py
"""Read-only price feed backed by the price_feeds table.

Rows are written by an external feeder process; this module only reads
the most recent quote per asset.
"""
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.database import store_call
from src.pm_market.domain.models import PriceQuote

_LATEST_PRICE_SQL = text("""
    SELECT asset_name, price, timestamp
    FROM price_feeds
    WHERE asset_name = :asset_name
    ORDER BY timestamp DESC
    LIMIT 1
""")


class PriceFeedRepository:
    async def latest_price(
        self, db: AsyncSession, asset_name: str
    ) -> PriceQuote | None:
        async with store_call("latest_price"):
            row = (
                await db.execute(_LATEST_PRICE_SQL, {"asset_name": asset_name})
            ).fetchone()
        if row is None:
            return None
        return PriceQuote(asset_name=row.asset_name, price=row.price, timestamp=row.timestamp)
