"""Domain services package."""

from .amortization import (
    calculate_schedule,
    payment_for_period,
    remaining_balance_after,
    validate_loan_parameters,
)
from .balance import (
    aggregate_balances,
    compute_account_balance,
    compute_balances_by_type,
    compute_net_worth,
    convert_totals,
)
from .idempotency import existing_keys, filter_new, make_key
from .normalization import normalize_currency_code, normalize_date
from .recurrence import (
    add_months,
    days_in_month,
    next_date,
    occurrences_between,
    payment_date_for_period,
)
from .templates import replace_template_placeholders
from .validation import validate_loan_contract, validate_recurring_transaction

__all__ = [
    "calculate_schedule",
    "payment_for_period",
    "remaining_balance_after",
    "validate_loan_parameters",
    "aggregate_balances",
    "compute_account_balance",
    "compute_balances_by_type",
    "compute_net_worth",
    "convert_totals",
    "existing_keys",
    "filter_new",
    "make_key",
    "normalize_currency_code",
    "normalize_date",
    "add_months",
    "days_in_month",
    "next_date",
    "occurrences_between",
    "payment_date_for_period",
    "replace_template_placeholders",
    "validate_loan_contract",
    "validate_recurring_transaction",
]
