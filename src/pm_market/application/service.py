"""MarketApplicationService — market listing, detail, creation and prices.

Reads need no commit/rollback; the caller (router) passes the db session and
the service delegates to the repositories. create_market owns its
transaction: the market row and its create_market log row commit together.
"""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.amounts import fits_amount_column, is_positive_amount, price_to_display
from src.pm_common.datetime_utils import ensure_utc, hours_from_now, utc_now
from src.pm_common.enums import MarketStatus, TransactionKind
from src.pm_common.errors import (
    InvalidMarketError,
    MarketNotFoundError,
    PriceUnavailableError,
)
from src.pm_common.id_generator import generate_id
from src.pm_gateway.wallet.models import WalletSession
from src.pm_market.application.schemas import (
    CreateMarketRequest,
    MarketDetail,
    MarketListItem,
    MarketListResponse,
    PriceResponse,
    cursor_decode,
    cursor_encode,
)
from src.pm_market.domain.models import Market
from src.pm_market.domain.repository import MarketRepositoryProtocol, PriceFeedProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_market.infrastructure.price_feed import PriceFeedRepository
from src.pm_transaction.application.schemas import MarketActivityResponse
from src.pm_transaction.application.service import (
    TransactionService,
    get_transaction_service,
)
from src.pm_transaction.domain.models import TransactionPayload

logger = logging.getLogger(__name__)

STATUS_ALL = "all"


def default_description(asset_name: str, strike_price: Decimal) -> str:
    return f"Will {asset_name} price exceed {price_to_display(strike_price)} at expiry?"


def _resolve_expiry(body: CreateMarketRequest, now: datetime) -> datetime:
    if body.expiry_timestamp is not None:
        expiry = ensure_utc(body.expiry_timestamp)
    elif body.expiry_hours is not None:
        expiry = hours_from_now(body.expiry_hours, now)
    else:
        raise InvalidMarketError("expiry_timestamp or expiry_hours is required")
    if expiry <= now:
        raise InvalidMarketError("expiry must be in the future")
    return expiry


class MarketApplicationService:
    def __init__(
        self,
        transactions: TransactionService,
        repo: MarketRepositoryProtocol | None = None,
        price_feed: PriceFeedProtocol | None = None,
    ) -> None:
        self._tx = transactions
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()
        self._price_feed: PriceFeedProtocol = price_feed or PriceFeedRepository()

    async def list_markets(
        self,
        db: AsyncSession,
        status: str | None,
        cursor: str | None,
        limit: int,
    ) -> MarketListResponse:
        # status=None -> default active; status='all' -> no filter
        if status is None:
            sql_status: str | None = MarketStatus.ACTIVE.value
        elif status.lower() == STATUS_ALL:
            sql_status = None
        else:
            try:
                sql_status = MarketStatus(status.lower()).value
            except ValueError:
                raise InvalidMarketError(f"unknown status filter: {status}") from None
        cursor_ts, cursor_id = cursor_decode(cursor)

        # Fetch limit+1 to detect has_more without COUNT(*)
        markets = await self._repo.list_markets(db, sql_status, cursor_ts, cursor_id, limit + 1)
        has_more = len(markets) > limit
        page = markets[:limit]

        items = [MarketListItem.from_domain(m) for m in page]
        next_cursor = cursor_encode(page[-1]) if has_more and page else None
        return MarketListResponse(items=items, next_cursor=next_cursor, has_more=has_more)

    async def _require_market(self, db: AsyncSession, market_id: str) -> Market:
        market = await self._repo.get_market_by_id(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    async def get_market(self, db: AsyncSession, market_id: str) -> MarketDetail:
        return MarketDetail.from_domain(await self._require_market(db, market_id))

    async def create_market(
        self, db: AsyncSession, session: WalletSession, body: CreateMarketRequest
    ) -> MarketDetail:
        asset_name = body.asset_name.strip()
        if not asset_name:
            raise InvalidMarketError("asset_name must not be empty")
        if not is_positive_amount(body.strike_price) or not fits_amount_column(body.strike_price):
            raise InvalidMarketError(
                f"strike_price must be positive with at most 8 decimals, got {body.strike_price}"
            )
        now = utc_now()
        expiry = _resolve_expiry(body, now)
        description = (body.description or "").strip() or default_description(
            asset_name, body.strike_price
        )

        market_id = generate_id("MKT-")
        try:
            market = await self._repo.create_market(
                db,
                market_id=market_id,
                asset_name=asset_name,
                description=description,
                strike_price=body.strike_price,
                expiry_timestamp=expiry,
                creator_address=session.wallet_address,
            )
            handle = await self._tx.emit(
                db,
                TransactionKind.CREATE_MARKET,
                TransactionPayload(
                    from_address=session.wallet_address,
                    amount=Decimal("0"),
                    market_id=market_id,
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        await self._tx.start(handle)

        logger.info(
            "Market created: market=%s asset=%s strike=%s expiry=%s creator=%s",
            market_id, asset_name, body.strike_price, expiry.isoformat(), session.wallet_address,
        )
        return MarketDetail.from_domain(market)

    async def latest_price(self, db: AsyncSession, market_id: str) -> PriceResponse:
        market = await self._require_market(db, market_id)
        quote = await self._price_feed.latest_price(db, market.asset_name)
        if quote is None:
            raise PriceUnavailableError(market.asset_name)
        return PriceResponse.from_quote(market, quote)

    async def activity(
        self, db: AsyncSession, market_id: str, limit: int
    ) -> MarketActivityResponse:
        await self._require_market(db, market_id)
        return await self._tx.market_activity(db, market_id, limit)


_service: MarketApplicationService | None = None


def get_market_service() -> MarketApplicationService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = MarketApplicationService(get_transaction_service())
    return _service
