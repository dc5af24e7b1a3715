"""Pre-trade checks. Raise typed AppErrors; never retried."""

from datetime import datetime
from decimal import Decimal

from src.pm_common.amounts import fits_amount_column, is_positive_amount, to_decimal
from src.pm_common.enums import MarketStatus
from src.pm_common.errors import InvalidAmountError, MarketClosedError
from src.pm_market.domain.models import Market


def check_amount(amount: object) -> Decimal:
    try:
        value = to_decimal(amount)
    except ValueError:
        raise InvalidAmountError(amount) from None
    if not is_positive_amount(value) or not fits_amount_column(value):
        raise InvalidAmountError(amount)
    return value


def check_market_open(market: Market, now: datetime) -> None:
    if market.status != MarketStatus.ACTIVE.value:
        raise MarketClosedError(market.id, market.status)
    if market.is_expired(now):
        raise MarketClosedError(market.id, "expired")
