"""
Money Utilities - Decimal operations for product prices and cart totals.

Prices are kept as Decimal inside the cart and only become JSON numbers at the
snapshot boundary.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

Number = Union[str, int, float, Decimal]

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")


def to_decimal(value: Union[Number, None]) -> Decimal:
    """
    Convert any value to Decimal safely.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        if isinstance(value, float):
            # Via str to avoid binary float artifacts (19.9 -> 19.899999...)
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def parse_price(value: object) -> Decimal:
    """
    Strict conversion used when reading persisted data.

    Raises:
        ValueError: if value is not a finite, non-negative number
    """
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise ValueError(f"price must be a number, got {type(value).__name__}")
    try:
        price = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except InvalidOperation:
        raise ValueError(f"price is not a number: {value!r}")
    if not price.is_finite() or price < 0:
        raise ValueError(f"price must be a finite non-negative number: {value!r}")
    return price


def round_money(value: Number) -> Decimal:
    """Round monetary value to cents."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def multiply(value: Number, factor: Number) -> Decimal:
    """Safe multiplication of monetary value by a factor."""
    return to_decimal(value) * to_decimal(factor)


def to_json_number(value: Number) -> Union[int, float]:
    """
    Convert a price to a JSON-friendly number.

    Integral values stay integers (100 -> 100, not 100.0) so a snapshot written
    from a catalog price reads back with the same shape.
    """
    decimal_value = to_decimal(value)
    if decimal_value == decimal_value.to_integral_value():
        return int(decimal_value)
    return float(decimal_value)


def format_money(value: Number, symbol: str = "$") -> str:
    """Format monetary value with currency symbol, e.g. $1,299.90."""
    return f"{symbol}{round_money(value):,.2f}"
