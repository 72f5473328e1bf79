"""Calendar arithmetic for recurring transactions and loan schedules."""

import calendar
from datetime import date, timedelta

from src.domain.constants import DAILY, MONTHLY, QUARTERLY, WEEKLY, YEARLY
from src.domain.models.recipes import RecurrenceSpec


def days_in_month(year: int, month: int) -> int:
    """Return the number of days in the given month."""
    return calendar.monthrange(year, month)[1]


def add_months(value: date, months: int, target_day: int | None = None) -> date:
    """Move a date by whole months, clamping the day to the target month.

    The computation starts from day 1 of the source month so that a day that
    does not exist in the target month never rolls over into the next one.

    Args:
        value: Source date.
        months: Number of months to add (may be negative).
        target_day: Desired day of month; defaults to ``value.day``.

    Returns:
        date: Date in the target month on ``min(target_day, month length)``.
    """
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = target_day if target_day is not None else value.day
    return date(year, month, min(day, days_in_month(year, month)))


def _sunday_based_weekday(value: date) -> int:
    # 0 = Sunday ... 6 = Saturday
    return (value.weekday() + 1) % 7


def next_date(
    current: date,
    spec: RecurrenceSpec,
    anchor_day: int | None = None,
) -> date:
    """Return the occurrence that follows ``current`` for a cadence.

    Month-based cadences target ``spec.day_of_month``, then ``anchor_day``,
    then ``current.day``. Passing the recipe's start day as ``anchor_day``
    keeps a day-31 recipe on each month's last day after a short month.

    Args:
        current: Date of the current occurrence.
        spec: Cadence of the recipe.
        anchor_day: Day of month the recipe started on.

    Returns:
        date: Next occurrence date.

    Raises:
        ValueError: If the frequency is not supported.
    """
    interval = spec.interval or 1
    target_day = spec.day_of_month or anchor_day or current.day
    if spec.frequency == DAILY:
        return current + timedelta(days=interval)
    if spec.frequency == WEEKLY:
        result = current + timedelta(weeks=interval)
        if spec.day_of_week is not None:
            offset = (spec.day_of_week - _sunday_based_weekday(result) + 7) % 7
            result += timedelta(days=offset)
        return result
    if spec.frequency == MONTHLY:
        return add_months(current, interval, target_day)
    if spec.frequency == QUARTERLY:
        return add_months(current, interval * 3, target_day)
    if spec.frequency == YEARLY:
        result = add_months(current.replace(day=1), interval * 12, 1)
        if spec.month_of_year is not None:
            result = result.replace(month=spec.month_of_year)
        return result.replace(
            day=min(target_day, days_in_month(result.year, result.month))
        )
    raise ValueError(f"Unsupported frequency: {spec.frequency}")


def occurrences_between(
    start: date,
    end: date,
    spec: RecurrenceSpec,
    limit: int | None = None,
) -> list[date]:
    """List occurrence dates from ``start`` up to ``end`` inclusive.

    Args:
        start: First occurrence date; its day anchors month-based cadences.
        end: Inclusive upper bound.
        spec: Cadence of the recipe.
        limit: Optional maximum number of dates to return.

    Returns:
        list[date]: Occurrence dates in increasing order.
    """
    dates: list[date] = []
    current = start
    while current <= end:
        if limit is not None and len(dates) >= limit:
            break
        dates.append(current)
        current = next_date(current, spec, anchor_day=start.day)
    return dates


def payment_date_for_period(
    start_date: date,
    payment_day: int,
    period: int,
) -> date:
    """Return the due date of a loan period.

    Period 1 falls on the contract start date; every later period falls on
    ``payment_day`` of the month ``period - 1`` months after the start,
    clamped to the month length.

    Args:
        start_date: Contract start date.
        payment_day: Monthly payment day (1-31).
        period: Period number, starting at 1.

    Returns:
        date: Payment date of the period.
    """
    if period <= 1:
        return start_date
    return add_months(start_date, period - 1, payment_day)


__all__ = [
    "days_in_month",
    "add_months",
    "next_date",
    "occurrences_between",
    "payment_date_for_period",
]
