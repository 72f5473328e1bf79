"""Domain normalization helpers."""

from datetime import date, datetime


def normalize_currency_code(code: str | None) -> str | None:
    """Normalize currency code values.

    Args:
        code: Raw currency code from a repository.

    Returns:
        str | None: Upper-cased code or None when blank.
    """
    if not code:
        return None
    cleaned = code.strip()
    return cleaned.upper() if cleaned else None


def normalize_date(value: date | datetime | str) -> date:
    """Strip the time of day from a date-like value.

    Aware datetimes are converted to the local timezone before the calendar
    day is taken, so a value stored in UTC late in the evening still maps to
    the day the user saw locally.

    Args:
        value: Date, datetime, or ISO-8601 string.

    Returns:
        date: Calendar date of the value.

    Raises:
        ValueError: If the value cannot be interpreted as a date.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        return normalize_date(datetime.fromisoformat(text.replace("Z", "+00:00")))
    raise ValueError(f"Unsupported date value: {value!r}")


def try_normalize_date(value) -> date | None:
    """Return the calendar date of ``value`` or None when it is invalid."""
    if value is None:
        return None
    try:
        return normalize_date(value)
    except (TypeError, ValueError):
        return None


__all__ = ["normalize_currency_code", "normalize_date", "try_normalize_date"]
