"""Loan amortization calculations.

All amounts are Decimals rounded half-up to two decimal places. The running
balance is tracked in rounded terms and the final period pays whatever
principal is left, so every schedule closes at exactly zero and its
principal components add up to the loan amount.
"""

from decimal import Decimal

from src.domain.constants import (
    EQUAL_PAYMENT,
    EQUAL_PRINCIPAL,
    INTEREST_ONLY,
    MAX_LOAN_PERIODS,
)
from src.domain.errors import ValidationError
from src.domain.models.loans import LoanCalculation, ScheduledPayment
from src.utils.decimal_utils import coerce_decimal, round_minor

ZERO = Decimal("0")
MONTHS_PER_YEAR = Decimal("12")


def monthly_rate(annual_rate) -> Decimal:
    """Convert an annual rate (fraction) into a monthly rate."""
    return coerce_decimal(annual_rate) / MONTHS_PER_YEAR


def annuity_payment(principal, rate: Decimal, periods: int) -> Decimal:
    """Return the unrounded fixed payment of an annuity.

    Args:
        principal: Loan amount.
        rate: Periodic interest rate.
        periods: Number of periods.

    Returns:
        Decimal: ``P*r*(1+r)^n / ((1+r)^n - 1)``, or ``P/n`` when ``r`` is 0.
    """
    principal = coerce_decimal(principal)
    if rate == 0:
        return principal / periods
    growth = (1 + rate) ** periods
    return principal * rate * growth / (growth - 1)


def calculate_schedule(
    principal,
    annual_rate,
    periods: int,
    repayment_type: str,
) -> LoanCalculation:
    """Compute the full repayment schedule of a loan.

    Args:
        principal: Loan amount.
        annual_rate: Annual interest rate as a fraction (0.05 for 5%).
        periods: Number of monthly periods.
        repayment_type: EQUAL_PAYMENT, EQUAL_PRINCIPAL, or INTEREST_ONLY.

    Returns:
        LoanCalculation: Schedule and aggregate figures.

    Raises:
        ValueError: If the repayment type is not supported.
    """
    principal = round_minor(principal)
    rate = monthly_rate(annual_rate)
    if repayment_type == EQUAL_PAYMENT:
        return _equal_payment(principal, rate, periods)
    if repayment_type == EQUAL_PRINCIPAL:
        return _equal_principal(principal, rate, periods)
    if repayment_type == INTEREST_ONLY:
        return _interest_only(principal, rate, periods)
    raise ValueError(f"Unsupported repayment type: {repayment_type}")


def _equal_payment(
    principal: Decimal,
    rate: Decimal,
    periods: int,
) -> LoanCalculation:
    payment = round_minor(annuity_payment(principal, rate, periods))
    balance = principal
    schedule = []
    for period in range(1, periods + 1):
        interest = round_minor(balance * rate)
        if period == periods:
            principal_part = balance
        else:
            principal_part = min(max(payment - interest, ZERO), balance)
        balance -= principal_part
        schedule.append(
            ScheduledPayment(
                period=period,
                principal_amount=principal_part,
                interest_amount=interest,
                total_amount=principal_part + interest,
                remaining_balance=balance,
            )
        )
    return _summarize(payment, schedule)


def _equal_principal(
    principal: Decimal,
    rate: Decimal,
    periods: int,
) -> LoanCalculation:
    fixed_principal = round_minor(principal / periods)
    balance = principal
    schedule = []
    for period in range(1, periods + 1):
        interest = round_minor(balance * rate)
        if period == periods:
            principal_part = balance
        else:
            principal_part = min(fixed_principal, balance)
        balance -= principal_part
        schedule.append(
            ScheduledPayment(
                period=period,
                principal_amount=principal_part,
                interest_amount=interest,
                total_amount=principal_part + interest,
                remaining_balance=balance,
            )
        )
    first_payment = schedule[0].total_amount if schedule else ZERO
    return _summarize(first_payment, schedule)


def _interest_only(
    principal: Decimal,
    rate: Decimal,
    periods: int,
) -> LoanCalculation:
    interest = round_minor(principal * rate)
    schedule = []
    for period in range(1, periods + 1):
        last = period == periods
        principal_part = principal if last else ZERO
        schedule.append(
            ScheduledPayment(
                period=period,
                principal_amount=principal_part,
                interest_amount=interest,
                total_amount=principal_part + interest,
                remaining_balance=ZERO if last else principal,
            )
        )
    return _summarize(interest, schedule)


def _summarize(
    monthly_payment: Decimal,
    schedule: list[ScheduledPayment],
) -> LoanCalculation:
    total_interest = sum((p.interest_amount for p in schedule), ZERO)
    total_payment = sum((p.total_amount for p in schedule), ZERO)
    return LoanCalculation(
        monthly_payment=monthly_payment,
        total_interest=total_interest,
        total_payment=total_payment,
        schedule=schedule,
    )


def payment_for_period(
    principal,
    annual_rate,
    periods: int,
    repayment_type: str,
    period: int,
) -> ScheduledPayment | None:
    """Return one period of the schedule, or None when out of range."""
    if period < 1 or period > periods:
        return None
    schedule = calculate_schedule(
        principal, annual_rate, periods, repayment_type
    ).schedule
    return schedule[period - 1]


def remaining_balance_after(
    principal,
    annual_rate,
    periods: int,
    repayment_type: str,
    current_period: int,
) -> Decimal:
    """Return the balance left once ``current_period`` has been paid."""
    if current_period >= periods:
        return ZERO
    if current_period < 1:
        return round_minor(principal)
    payment = payment_for_period(
        principal, annual_rate, periods, repayment_type, current_period
    )
    return payment.remaining_balance


def loan_parameter_errors(principal, annual_rate, periods) -> list[str]:
    """Return validation messages for loan terms (empty when valid)."""
    errors = []
    try:
        amount = coerce_decimal(principal)
    except (ArithmeticError, ValueError):
        amount = None
    if amount is None or not amount.is_finite() or amount <= 0:
        errors.append("Loan amount must be greater than 0")
    try:
        rate = coerce_decimal(annual_rate)
    except (ArithmeticError, ValueError):
        rate = None
    if rate is None or not rate.is_finite() or rate < 0 or rate > 1:
        errors.append("Annual interest rate must be between 0 and 100%")
    if (
        isinstance(periods, bool)
        or not isinstance(periods, int)
        or periods <= 0
    ):
        errors.append("Loan term must be a positive whole number of months")
    elif periods > MAX_LOAN_PERIODS:
        errors.append(
            f"Loan term cannot exceed {MAX_LOAN_PERIODS} months"
        )
    return errors


def validate_loan_parameters(principal, annual_rate, periods) -> None:
    """Raise when loan terms are invalid.

    Raises:
        ValidationError: If any term is out of range.
    """
    errors = loan_parameter_errors(principal, annual_rate, periods)
    if errors:
        raise ValidationError(errors)


__all__ = [
    "monthly_rate",
    "annuity_payment",
    "calculate_schedule",
    "payment_for_period",
    "remaining_balance_after",
    "loan_parameter_errors",
    "validate_loan_parameters",
]
