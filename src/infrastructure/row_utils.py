"""Conversions between domain values and stored column values.

Amounts are stored as exact decimal strings and calendar dates as ISO
``YYYY-MM-DD`` text so that both SQLite and PostgreSQL round-trip them
without float drift and compare dates lexicographically.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
import uuid

from src.domain.services.normalization import try_normalize_date
from src.utils.decimal_utils import round_minor, try_coerce_decimal


def new_id() -> str:
    """Return a new opaque row identifier."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_db_amount(value) -> str:
    """Render an amount rounded to the minor unit."""
    return str(round_minor(value))


def from_db_amount(value) -> Decimal | None:
    return try_coerce_decimal(value)


def to_db_date(value: date | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def from_db_date(value) -> date | None:
    return try_normalize_date(value)


def to_db_datetime(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def from_db_datetime(value) -> datetime | None:
    """Parse a stored timestamp; invalid values become None."""
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


__all__ = [
    "new_id",
    "utc_now",
    "to_db_amount",
    "from_db_amount",
    "to_db_date",
    "from_db_date",
    "to_db_datetime",
    "from_db_datetime",
]
