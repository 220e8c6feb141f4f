"""Decimal amount utilities.

Balances and transaction amounts are NUMERIC(14, 2) in the database and
Decimal in Python. No float anywhere on the money path.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_TWO_PLACES = Decimal("0.01")

# NUMERIC(14, 2): at most 12 integer digits
AMOUNT_LIMIT = Decimal("1E12")


def quantize(amount: Decimal) -> Decimal:
    """Round to the 2 decimal places the columns store."""
    return amount.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def parse_amount(raw: str) -> Decimal | None:
    """Parse a user-typed amount token.

    Returns None for anything non-finite or too large for the amount columns,
    including values that only reach the limit after rounding.
    """
    try:
        value = Decimal(raw.strip())
    except (InvalidOperation, AttributeError):
        return None
    if not value.is_finite() or abs(value) >= AMOUNT_LIMIT:
        return None
    if abs(quantize(value)) >= AMOUNT_LIMIT:
        return None
    return value


def amount_to_display(amount: Decimal) -> str:
    """Format for display: Decimal('1500') -> '1,500.00', Decimal('-12.5') -> '-12.50'."""
    value = quantize(amount)
    if value < 0:
        return f"-{-value:,.2f}"
    return f"{value:,.2f}"
