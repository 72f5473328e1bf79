"""Tests for loan amortization schedules."""

from decimal import Decimal

import pytest

from src.domain.errors import ValidationError
from src.domain.services.amortization import (
    calculate_schedule,
    payment_for_period,
    remaining_balance_after,
    validate_loan_parameters,
)


def _assert_closes(calculation, principal: Decimal) -> None:
    schedule = calculation.schedule
    assert schedule[-1].remaining_balance == Decimal("0")
    assert sum(p.principal_amount for p in schedule) == principal
    assert calculation.total_payment == sum(p.total_amount for p in schedule)
    assert calculation.total_interest == sum(
        p.interest_amount for p in schedule
    )


def test_equal_payment_schedule_closes_at_zero() -> None:
    """An annuity should pay a fixed amount and close exactly."""
    calculation = calculate_schedule(
        Decimal("100000"), Decimal("0.05"), 12, "EQUAL_PAYMENT"
    )

    assert calculation.monthly_payment == Decimal("8560.75")
    assert calculation.schedule[0].interest_amount == Decimal("416.67")
    assert calculation.schedule[0].total_amount == Decimal("8560.75")
    assert len(calculation.schedule) == 12
    _assert_closes(calculation, Decimal("100000.00"))


def test_equal_payment_without_interest_absorbs_rounding_last() -> None:
    calculation = calculate_schedule(Decimal("1000"), 0, 3, "EQUAL_PAYMENT")

    principals = [p.principal_amount for p in calculation.schedule]
    assert principals == [
        Decimal("333.33"),
        Decimal("333.33"),
        Decimal("333.34"),
    ]
    _assert_closes(calculation, Decimal("1000.00"))


def test_equal_principal_interest_declines() -> None:
    """Fixed principal with interest on the declining balance."""
    calculation = calculate_schedule(
        Decimal("1200"), Decimal("0.12"), 12, "EQUAL_PRINCIPAL"
    )

    first, last = calculation.schedule[0], calculation.schedule[-1]
    assert first.principal_amount == Decimal("100.00")
    assert first.interest_amount == Decimal("12.00")
    assert calculation.monthly_payment == Decimal("112.00")
    assert last.interest_amount == Decimal("1.00")
    assert calculation.total_interest == Decimal("78.00")
    _assert_closes(calculation, Decimal("1200.00"))


def test_interest_only_repays_principal_in_last_period() -> None:
    calculation = calculate_schedule(
        Decimal("1000"), Decimal("0.12"), 3, "INTEREST_ONLY"
    )

    assert [p.interest_amount for p in calculation.schedule] == [
        Decimal("10.00")
    ] * 3
    assert [p.principal_amount for p in calculation.schedule] == [
        Decimal("0"),
        Decimal("0"),
        Decimal("1000.00"),
    ]
    assert [p.remaining_balance for p in calculation.schedule] == [
        Decimal("1000.00"),
        Decimal("1000.00"),
        Decimal("0"),
    ]
    _assert_closes(calculation, Decimal("1000.00"))


def test_unknown_repayment_type_raises() -> None:
    with pytest.raises(ValueError):
        calculate_schedule(Decimal("1000"), Decimal("0.1"), 3, "BALLOON")


def test_period_helpers() -> None:
    """Single-period lookups should match the full schedule."""
    schedule = calculate_schedule(
        Decimal("1200"), Decimal("0.12"), 12, "EQUAL_PRINCIPAL"
    ).schedule

    assert payment_for_period(
        Decimal("1200"), Decimal("0.12"), 12, "EQUAL_PRINCIPAL", 5
    ) == schedule[4]
    assert payment_for_period(
        Decimal("1200"), Decimal("0.12"), 12, "EQUAL_PRINCIPAL", 13
    ) is None
    assert remaining_balance_after(
        Decimal("1200"), Decimal("0.12"), 12, "EQUAL_PRINCIPAL", 0
    ) == Decimal("1200.00")
    assert remaining_balance_after(
        Decimal("1200"), Decimal("0.12"), 12, "EQUAL_PRINCIPAL", 3
    ) == Decimal("900.00")
    assert remaining_balance_after(
        Decimal("1200"), Decimal("0.12"), 12, "EQUAL_PRINCIPAL", 12
    ) == Decimal("0")


@pytest.mark.parametrize(
    ("principal", "rate", "periods"),
    [
        (Decimal("0"), Decimal("0.05"), 12),
        (Decimal("1000"), Decimal("-0.01"), 12),
        (Decimal("1000"), Decimal("1.5"), 12),
        (Decimal("1000"), Decimal("0.05"), 0),
        (Decimal("1000"), Decimal("0.05"), 601),
        (Decimal("1000"), Decimal("0.05"), 1.5),
    ],
)
def test_invalid_loan_parameters_are_rejected(principal, rate, periods) -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_loan_parameters(principal, rate, periods)

    assert len(excinfo.value.errors) == 1
