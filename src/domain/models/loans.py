"""Domain models for loan contracts and amortization schedules."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal


@dataclass(frozen=True)
class ScheduledPayment:
    """One period of a computed amortization schedule."""

    period: int
    principal_amount: Decimal
    interest_amount: Decimal
    total_amount: Decimal
    remaining_balance: Decimal


@dataclass(frozen=True)
class LoanCalculation:
    """Full amortization result.

    Attributes:
        monthly_payment: Regular payment (first-period payment for
            EQUAL_PRINCIPAL, interest payment for INTEREST_ONLY).
        total_interest: Sum of all interest components.
        total_payment: Sum of all period totals.
        schedule: Period-by-period breakdown.
    """

    monthly_payment: Decimal
    total_interest: Decimal
    total_payment: Decimal
    schedule: list[ScheduledPayment] = field(default_factory=list)


@dataclass(frozen=True)
class LoanContract:
    """Loan contract recipe with its cursor state."""

    id: str
    user_id: str
    account_id: str
    currency_id: str
    contract_name: str
    loan_amount: Decimal
    interest_rate: Decimal
    total_periods: int
    repayment_type: str
    start_date: date
    payment_day: int
    payment_account_id: str | None = None
    transaction_description: str | None = None
    transaction_notes: str | None = None
    is_active: bool = True
    current_period: int = 0
    next_payment_date: date | None = None


@dataclass(frozen=True)
class LoanPayment:
    """Materialized schedule row of a loan contract."""

    id: str
    loan_contract_id: str
    user_id: str
    period: int
    payment_date: date
    principal_amount: Decimal
    interest_amount: Decimal
    total_amount: Decimal
    remaining_balance: Decimal
    status: str
    principal_transaction_id: str | None = None
    interest_transaction_id: str | None = None
    balance_transaction_id: str | None = None
    processed_at: datetime | None = None


@dataclass(frozen=True)
class NewLoanPayment:
    """Schedule row staged for insertion."""

    loan_contract_id: str
    user_id: str
    period: int
    payment_date: date
    principal_amount: Decimal
    interest_amount: Decimal
    total_amount: Decimal
    remaining_balance: Decimal


@dataclass(frozen=True)
class LoanContractData:
    """User-supplied fields for creating or editing a loan contract."""

    account_id: str
    currency_code: str
    contract_name: str
    loan_amount: Decimal
    interest_rate: Decimal
    total_periods: int
    repayment_type: str
    start_date: date
    payment_day: int
    payment_account_id: str | None = None
    transaction_description: str | None = None
    transaction_notes: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class ResetPaymentsResult:
    """Summary of a COMPLETED to PENDING reset."""

    reset_count: int
    deleted_transactions: int


__all__ = [
    "ScheduledPayment",
    "LoanCalculation",
    "LoanContract",
    "LoanPayment",
    "NewLoanPayment",
    "LoanContractData",
    "ResetPaymentsResult",
]
