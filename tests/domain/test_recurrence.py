"""Tests for the recurrence calendar helpers."""

from datetime import date

import pytest

from src.domain.models import RecurrenceSpec
from src.domain.services.recurrence import (
    add_months,
    days_in_month,
    next_date,
    occurrences_between,
    payment_date_for_period,
)


def test_monthly_anchor_clamps_to_month_end_without_drift() -> None:
    """A day-31 anchor should land on each month's last day."""
    spec = RecurrenceSpec(frequency="MONTHLY", day_of_month=31)

    february = next_date(date(2024, 1, 31), spec)
    march = next_date(february, spec)
    april = next_date(march, spec)

    assert february == date(2024, 2, 29)
    assert march == date(2024, 3, 31)
    assert april == date(2024, 4, 30)


def test_monthly_never_rolls_over_into_following_month() -> None:
    """Jan 31 plus one month must stay in February."""
    spec = RecurrenceSpec(frequency="MONTHLY")

    assert next_date(date(2023, 1, 31), spec) == date(2023, 2, 28)


def test_start_day_anchors_month_end_over_several_cycles() -> None:
    """Without day_of_month, a Jan 31 start keeps landing on month ends."""
    monthly = RecurrenceSpec("MONTHLY")

    assert occurrences_between(date(2024, 1, 31), date(2024, 4, 30), monthly) == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 31),
        date(2024, 4, 30),
    ]
    assert next_date(date(2024, 2, 29), monthly, anchor_day=31) == date(
        2024, 3, 31
    )
    assert occurrences_between(
        date(2024, 8, 31), date(2025, 3, 1), RecurrenceSpec("QUARTERLY")
    ) == [date(2024, 8, 31), date(2024, 11, 30), date(2025, 2, 28)]
    assert occurrences_between(
        date(2024, 2, 29), date(2028, 3, 1), RecurrenceSpec("YEARLY")
    )[-1] == date(2028, 2, 29)


def test_quarterly_adds_three_months_per_interval() -> None:
    """Quarterly cadence should clamp like monthly."""
    spec = RecurrenceSpec(frequency="QUARTERLY", interval=1)

    assert next_date(date(2024, 11, 30), spec) == date(2025, 2, 28)


def test_yearly_month_override_and_leap_day() -> None:
    """Yearly cadence should honor month_of_year and clamp the day."""
    spec = RecurrenceSpec(frequency="YEARLY", month_of_year=2, day_of_month=29)

    assert next_date(date(2023, 3, 15), spec) == date(2024, 2, 29)
    assert next_date(date(2024, 2, 29), RecurrenceSpec("YEARLY")) == date(
        2025, 2, 28
    )


def test_weekly_snaps_forward_to_weekday() -> None:
    """Day of week uses 0 = Sunday; 5 is Friday."""
    spec = RecurrenceSpec(frequency="WEEKLY", day_of_week=5)

    # 2024-01-01 is a Monday.
    assert next_date(date(2024, 1, 1), spec) == date(2024, 1, 12)
    assert next_date(date(2024, 1, 1), RecurrenceSpec("WEEKLY", 2)) == date(
        2024, 1, 15
    )


def test_daily_interval() -> None:
    assert next_date(date(2024, 2, 28), RecurrenceSpec("DAILY", 2)) == date(
        2024, 3, 1
    )


def test_unknown_frequency_raises() -> None:
    with pytest.raises(ValueError):
        next_date(date(2024, 1, 1), RecurrenceSpec("HOURLY"))


def test_occurrences_between_is_inclusive_and_limited() -> None:
    """Occurrences should include the end date and respect the limit."""
    spec = RecurrenceSpec("DAILY", 3)

    assert occurrences_between(date(2024, 1, 1), date(2024, 1, 10), spec) == [
        date(2024, 1, 1),
        date(2024, 1, 4),
        date(2024, 1, 7),
        date(2024, 1, 10),
    ]
    assert len(
        occurrences_between(date(2024, 1, 1), date(2024, 1, 10), spec, limit=2)
    ) == 2


def test_payment_dates_start_on_contract_start() -> None:
    """Period 1 falls on the start date; later periods on the payment day."""
    start = date(2024, 1, 31)

    assert payment_date_for_period(start, 31, 1) == start
    assert payment_date_for_period(start, 31, 2) == date(2024, 2, 29)
    assert payment_date_for_period(start, 31, 3) == date(2024, 3, 31)
    assert payment_date_for_period(date(2024, 1, 10), 5, 2) == date(2024, 2, 5)


def test_month_helpers() -> None:
    assert days_in_month(2024, 2) == 29
    assert days_in_month(2023, 2) == 28
    assert add_months(date(2024, 12, 15), 1) == date(2025, 1, 15)
    assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
