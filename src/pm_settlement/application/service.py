# src/pm_settlement/application/service.py
"""SettlementService — settle markets and claim winning positions.

settle_market: active -> settled exactly once, after expiry, at a price that
is either supplied or read from the price feed. A single conditional UPDATE
decides the race between concurrent settlers.

claim: evaluate with compute_payout (pure), then flip claimed with a
conditional UPDATE. A second claim on the same position, sequential or
concurrent, fails with InvalidStateError and pays nothing.
"""
import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.amounts import (
    amount_to_display,
    fits_amount_column,
    is_positive_amount,
    price_to_display,
)
from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import MarketStatus, TransactionKind
from src.pm_common.errors import (
    AlreadySettledError,
    InvalidMarketError,
    InvalidStateError,
    MarketNotExpiredError,
    MarketNotFoundError,
    PositionNotFoundError,
    PriceUnavailableError,
)
from src.pm_gateway.wallet.models import WalletSession
from src.pm_market.domain.repository import MarketRepositoryProtocol, PriceFeedProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_market.infrastructure.price_feed import PriceFeedRepository
from src.pm_position.domain.repository import PositionRepositoryProtocol
from src.pm_position.infrastructure.persistence import PositionRepository
from src.pm_settlement.application.schemas import ClaimResponse, SettleMarketResponse
from src.pm_settlement.domain.evaluator import compute_payout, determine_winning_side
from src.pm_transaction.application.schemas import TransactionOut
from src.pm_transaction.application.service import (
    TransactionService,
    get_transaction_service,
)
from src.pm_transaction.domain.models import TransactionPayload

logger = logging.getLogger(__name__)


class SettlementService:
    def __init__(
        self,
        transactions: TransactionService,
        markets: MarketRepositoryProtocol | None = None,
        positions: PositionRepositoryProtocol | None = None,
        price_feed: PriceFeedProtocol | None = None,
    ) -> None:
        self._tx = transactions
        self._markets: MarketRepositoryProtocol = markets or MarketRepository()
        self._positions: PositionRepositoryProtocol = positions or PositionRepository()
        self._price_feed: PriceFeedProtocol = price_feed or PriceFeedRepository()

    async def settle_market(
        self,
        db: AsyncSession,
        session: WalletSession,
        market_id: str,
        settled_price: Decimal | None,
    ) -> SettleMarketResponse:
        now = utc_now()
        try:
            market = await self._markets.get_market_by_id(db, market_id)
            if market is None:
                raise MarketNotFoundError(market_id)
            if market.status != MarketStatus.ACTIVE.value:
                raise AlreadySettledError(market_id)
            if not market.is_expired(now):
                raise MarketNotExpiredError(market_id)

            if settled_price is None:
                quote = await self._price_feed.latest_price(db, market.asset_name)
                if quote is None:
                    raise PriceUnavailableError(market.asset_name)
                settled_price = quote.price
            if not is_positive_amount(settled_price) or not fits_amount_column(settled_price):
                raise InvalidMarketError(
                    f"settlement price must be positive with at most 8 decimals, got {settled_price}"
                )

            settled = await self._markets.settle_market(db, market_id, settled_price, now)
            if settled is None:
                # another settler won the conditional update
                raise AlreadySettledError(market_id)

            handle = await self._tx.emit(
                db,
                TransactionKind.SETTLE,
                TransactionPayload(
                    from_address=session.wallet_address,
                    amount=settled.total_pool,
                    market_id=market_id,
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        await self._tx.start(handle)

        winner = determine_winning_side(settled.strike_price, settled_price)
        logger.info(
            "Market settled: market=%s price=%s strike=%s winner=%s",
            market_id, settled_price, settled.strike_price, winner.value,
        )
        return SettleMarketResponse(
            market_id=settled.id,
            asset_name=settled.asset_name,
            strike_price=settled.strike_price,
            settled_price=settled_price,
            settled_price_display=price_to_display(settled_price),
            winning_side=winner.value,
            yes_pool=settled.yes_pool,
            no_pool=settled.no_pool,
            settled_at=settled.settled_at,
            transaction=TransactionOut.from_handle(handle),
        )

    async def claim(
        self,
        db: AsyncSession,
        session: WalletSession,
        position_id: str,
    ) -> ClaimResponse:
        now = utc_now()
        try:
            pm = await self._positions.get_with_market(db, position_id, session.wallet_address)
            if pm is None:
                raise PositionNotFoundError(position_id)

            payout = compute_payout(pm.position, pm.market)

            claimed = await self._positions.mark_claimed(db, position_id, payout, now)
            if claimed is None:
                raise InvalidStateError(f"position {position_id} has already been claimed")

            handle = await self._tx.emit(
                db,
                TransactionKind.CLAIM,
                TransactionPayload(
                    from_address=session.wallet_address,
                    amount=payout,
                    market_id=pm.market.id,
                    position_id=position_id,
                    side=pm.position.side,
                ),
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        await self._tx.start(handle)

        logger.info(
            "Position claimed: position=%s market=%s stake=%s payout=%s tx=%s",
            position_id, pm.market.id, pm.position.amount, payout, handle.tx_hash,
        )
        return ClaimResponse(
            position_id=position_id,
            market_id=pm.market.id,
            side=pm.position.side,
            stake=pm.position.amount,
            payout=payout,
            payout_display=amount_to_display(payout),
            claimed_at=claimed.claimed_at,
            transaction=TransactionOut.from_handle(handle),
        )


_service: SettlementService | None = None


def get_settlement_service() -> SettlementService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = SettlementService(get_transaction_service())
    return _service
