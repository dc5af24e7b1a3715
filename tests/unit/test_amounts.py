"""Tests for pm_common.amounts and pm_common.datetime_utils."""
from datetime import UTC, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from src.pm_common.amounts import (
    amount_to_display,
    fits_amount_column,
    implied_odds,
    is_positive_amount,
    price_to_display,
    quantize_amount,
    to_decimal,
)
from src.pm_common.datetime_utils import ensure_utc, hours_from_now, utc_now


class TestToDecimal:
    def test_passthrough(self) -> None:
        d = Decimal("1.5")
        assert to_decimal(d) is d

    def test_int_and_str(self) -> None:
        assert to_decimal(3) == Decimal("3")
        assert to_decimal("0.1") == Decimal("0.1")

    def test_float_goes_through_str(self) -> None:
        assert to_decimal(0.1) == Decimal("0.1")

    def test_garbage_raises_value_error(self) -> None:
        with pytest.raises(ValueError):
            to_decimal("abc")
        with pytest.raises(ValueError):
            to_decimal(None)


class TestQuantize:
    def test_rounds_down(self) -> None:
        assert quantize_amount(Decimal("1.999999999")) == Decimal("1.99999999")

    def test_positive(self) -> None:
        assert is_positive_amount(Decimal("0.00000001"))
        assert not is_positive_amount(Decimal("0"))
        assert not is_positive_amount(Decimal("-1"))
        assert not is_positive_amount(Decimal("NaN"))
        assert not is_positive_amount(Decimal("Infinity"))

    @pytest.mark.parametrize("value", ["0.00000001", "12.5", "99999999999999999999.99999999"])
    def test_fits_column(self, value) -> None:
        assert fits_amount_column(Decimal(value))

    @pytest.mark.parametrize("value", ["0.000000001", "1.123456789", "1E20", "NaN", "Infinity"])
    def test_does_not_fit_column(self, value) -> None:
        assert not fits_amount_column(Decimal(value))


class TestDisplay:
    def test_amount(self) -> None:
        assert amount_to_display(Decimal("1234.5")) == "1,234.50 LEO"
        assert amount_to_display(Decimal("0"), symbol="ETH") == "0.00 ETH"

    def test_price(self) -> None:
        assert price_to_display(Decimal("65000")) == "$65,000.00"
        assert price_to_display(Decimal("-12")) == "-$12.00"


class TestImpliedOdds:
    def test_empty_market_is_even(self) -> None:
        assert implied_odds(Decimal("0"), Decimal("0")) == (Decimal("0.5"), Decimal("0.5"))

    def test_shares_sum_to_one(self) -> None:
        yes, no = implied_odds(Decimal("1"), Decimal("2"))
        assert yes == Decimal("0.3333")
        assert yes + no == Decimal("1")


class TestDatetimeUtils:
    def test_utc_now_is_aware(self) -> None:
        assert utc_now().tzinfo == UTC

    def test_ensure_utc_naive(self) -> None:
        assert ensure_utc(datetime(2026, 1, 1)).tzinfo == UTC

    def test_ensure_utc_converts(self) -> None:
        dt = datetime(2026, 1, 1, 10, tzinfo=timezone(timedelta(hours=2)))
        assert ensure_utc(dt) == datetime(2026, 1, 1, 8, tzinfo=UTC)

    def test_hours_from_now(self) -> None:
        base = datetime(2026, 1, 1, tzinfo=UTC)
        assert hours_from_now(24, base) == datetime(2026, 1, 2, tzinfo=UTC)
