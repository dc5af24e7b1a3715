"""Decimal arithmetic utilities for token amounts and prices.

All prices, stakes and pools use Decimal, stored as NUMERIC(28, 8).
No float anywhere. Computed values are truncated toward zero so that
derived payouts never exceed what the pools hold.
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation

AMOUNT_PLACES = Decimal("0.00000001")
# NUMERIC(28, 8) leaves 20 integer digits
MAX_AMOUNT = Decimal("1E20")
ZERO = Decimal("0")


def to_decimal(value: object) -> Decimal:
    """Coerce int/str/Decimal to Decimal. Floats go through str() to avoid binary noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value)  # type: ignore[arg-type]
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Not a decimal amount: {value!r}") from e


def quantize_amount(amount: Decimal) -> Decimal:
    """Truncate to 8 decimal places (ROUND_DOWN)."""
    return amount.quantize(AMOUNT_PLACES, rounding=ROUND_DOWN)


def is_positive_amount(amount: Decimal) -> bool:
    return amount.is_finite() and amount > ZERO


def fits_amount_column(amount: Decimal) -> bool:
    """True if NUMERIC(28, 8) stores ``amount`` exactly, without rounding."""
    if not amount.is_finite() or abs(amount) >= MAX_AMOUNT:
        return False
    return quantize_amount(amount) == amount


def amount_to_display(amount: Decimal, symbol: str = "LEO") -> str:
    """Format for display: Decimal('1234.5') -> '1,234.50 LEO'."""
    return f"{amount:,.2f} {symbol}"


def price_to_display(price: Decimal) -> str:
    """Format a USD price: Decimal('65000') -> '$65,000.00', negatives -> '-$12.00'."""
    if price < 0:
        return f"-${-price:,.2f}"
    return f"${price:,.2f}"


def implied_odds(yes_pool: Decimal, no_pool: Decimal) -> tuple[Decimal, Decimal]:
    """Share of total stake on each side, (yes, no). Empty market -> (0.5, 0.5)."""
    total = yes_pool + no_pool
    if total == ZERO:
        half = Decimal("0.5")
        return half, half
    yes = (yes_pool / total).quantize(Decimal("0.0001"), rounding=ROUND_DOWN)
    return yes, Decimal("1") - yes
