"""Helpers for Decimal normalization."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

MINOR_UNIT = Decimal("0.01")


def coerce_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal.

    Args:
        value: Raw numeric value from SQL or adapters.

    Returns:
        Decimal: Normalized numeric value.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def try_coerce_decimal(value) -> Decimal | None:
    """Return a finite Decimal for ``value`` or None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = coerce_decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not result.is_finite():
        return None
    return result


def round_minor(value) -> Decimal:
    """Round a value half-up to currency minor-unit precision.

    Args:
        value: Numeric value to round.

    Returns:
        Decimal: Value quantized to two decimal places.
    """
    return coerce_decimal(value).quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)


__all__ = ["MINOR_UNIT", "coerce_decimal", "try_coerce_decimal", "round_minor"]
