"""Money helpers using Decimal with two-digit currency rounding."""

from decimal import ROUND_HALF_UP, Decimal

MONEY_PRECISION = Decimal("0.01")
ZERO = Decimal("0.00")
CURRENCY_SYMBOL = "€"


def quantize_money(value: Decimal) -> Decimal:
    """Return value rounded to two decimal places with HALF_UP strategy."""

    return value.quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def parse_money(value: str) -> Decimal:
    """Parse and normalize input money string into Decimal."""

    return quantize_money(Decimal(value))


def format_money(value: Decimal) -> str:
    """Render money as string with exactly two decimal places."""

    return f"{quantize_money(value):.2f}"


def format_eur(value: Decimal) -> str:
    """Render money with the currency symbol, e.g. ``€3.80``."""

    return f"{CURRENCY_SYMBOL}{format_money(value)}"
