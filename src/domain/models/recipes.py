"""Domain models for recurring transaction recipes."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class RecurrenceSpec:
    """Cadence of a recurring transaction.

    Attributes:
        frequency: DAILY, WEEKLY, MONTHLY, QUARTERLY, or YEARLY.
        interval: Number of frequency units between occurrences.
        day_of_month: Optional anchor day (1-31), clamped to short months.
        day_of_week: Optional weekday anchor, 0 = Sunday through 6 = Saturday.
        month_of_year: Optional month anchor (1-12) for yearly cadences.
    """

    frequency: str
    interval: int = 1
    day_of_month: int | None = None
    day_of_week: int | None = None
    month_of_year: int | None = None


@dataclass(frozen=True)
class RecurringTransaction:
    """Recurring transaction recipe with its cursor state."""

    id: str
    user_id: str
    account_id: str
    currency_id: str
    type: str
    amount: Decimal
    description: str
    spec: RecurrenceSpec
    start_date: date
    next_date: date
    current_count: int = 0
    end_date: date | None = None
    max_occurrences: int | None = None
    is_active: bool = True
    notes: str | None = None


@dataclass(frozen=True)
class RecurringTransactionData:
    """User-supplied fields for creating or updating a recurring recipe."""

    account_id: str
    currency_code: str
    type: str
    amount: Decimal
    description: str
    frequency: str
    start_date: date
    interval: int = 1
    day_of_month: int | None = None
    day_of_week: int | None = None
    month_of_year: int | None = None
    end_date: date | None = None
    max_occurrences: int | None = None
    is_active: bool = True
    notes: str | None = None

    @property
    def spec(self) -> RecurrenceSpec:
        """Return the cadence described by these fields."""
        return RecurrenceSpec(
            frequency=self.frequency,
            interval=self.interval,
            day_of_month=self.day_of_month,
            day_of_week=self.day_of_week,
            month_of_year=self.month_of_year,
        )


__all__ = [
    "RecurrenceSpec",
    "RecurringTransaction",
    "RecurringTransactionData",
]
