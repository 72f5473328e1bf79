"""Domain validation helpers for recipes."""

from logging import Logger

from src.domain.constants import (
    DAILY,
    EXPENSE,
    FLOW_ACCOUNT_TYPES,
    FREQUENCIES,
    INCOME,
    LIABILITY,
    MONTHLY,
    QUARTERLY,
    REPAYMENT_TYPES,
    STOCK_ACCOUNT_TYPES,
    WEEKLY,
    YEARLY,
)
from src.domain.errors import ValidationError
from src.domain.models.ledger import Account
from src.domain.models.loans import LoanContractData
from src.domain.models.recipes import RecurringTransactionData
from src.domain.services.amortization import loan_parameter_errors
from src.utils.decimal_utils import try_coerce_decimal


def recurring_transaction_errors(
    data: RecurringTransactionData,
    account: Account | None,
    logger: Logger,
) -> list[str]:
    """Collect validation errors for a recurring transaction recipe.

    Non-fatal findings (unused anchors, long intervals, stock accounts) are
    logged as warnings.

    Args:
        data: Recipe fields supplied by the user.
        account: Target account, or None when it could not be found.
        logger: Logger used for warnings.

    Returns:
        list[str]: Validation messages; empty when the recipe is valid.
    """
    errors = []
    if data.frequency not in FREQUENCIES:
        errors.append(f"Unsupported frequency: {data.frequency}")
    if (
        isinstance(data.interval, bool)
        or not isinstance(data.interval, int)
        or data.interval < 1
    ):
        errors.append("Interval must be a positive whole number")
    if data.type not in (INCOME, EXPENSE):
        errors.append("Recurring transactions must be INCOME or EXPENSE")
    amount = try_coerce_decimal(data.amount)
    if amount is None or amount <= 0:
        errors.append("Amount must be greater than 0")
    if not (data.description or "").strip():
        errors.append("Description is required")
    if data.day_of_month is not None and not 1 <= data.day_of_month <= 31:
        errors.append("Day of month must be between 1 and 31")
    if data.day_of_week is not None and not 0 <= data.day_of_week <= 6:
        errors.append("Day of week must be between 0 (Sunday) and 6")
    if data.month_of_year is not None and not 1 <= data.month_of_year <= 12:
        errors.append("Month of year must be between 1 and 12")
    if data.end_date is not None and data.end_date <= data.start_date:
        errors.append("End date must be after the start date")
    if data.max_occurrences is not None and data.max_occurrences < 1:
        errors.append("Maximum occurrences must be at least 1")

    if account is None:
        errors.append(f"Account {data.account_id} does not exist")
    elif account.category_type in FLOW_ACCOUNT_TYPES:
        if data.type != account.category_type:
            errors.append(
                f"Transaction type {data.type} does not match "
                f"account type {account.category_type}"
            )
    elif account.category_type in STOCK_ACCOUNT_TYPES:
        logger.warning(
            f"Recurring transaction '{data.description}' targets stock "
            f"account {account.name}; flow accounts are usually expected"
        )

    _warn_unused_anchors(data, logger)
    return errors


def _warn_unused_anchors(
    data: RecurringTransactionData,
    logger: Logger,
) -> None:
    unused = []
    if data.frequency == DAILY and (
        data.day_of_month or data.day_of_week is not None or data.month_of_year
    ):
        unused.append("daily cadence ignores day/month anchors")
    if data.frequency == WEEKLY and (data.day_of_month or data.month_of_year):
        unused.append("weekly cadence ignores day-of-month/month anchors")
    if data.frequency in (MONTHLY, QUARTERLY) and (
        data.day_of_week is not None or data.month_of_year
    ):
        unused.append("monthly cadence ignores weekday/month anchors")
    if data.frequency == YEARLY and data.day_of_week is not None:
        unused.append("yearly cadence ignores the weekday anchor")
    if (
        data.frequency in (MONTHLY, QUARTERLY, YEARLY)
        and data.day_of_month is not None
        and data.day_of_month > 28
    ):
        unused.append(
            f"day {data.day_of_month} is clamped to the end of shorter months"
        )
    for message in unused:
        logger.warning(f"Recurring transaction '{data.description}': {message}")


def validate_recurring_transaction(
    data: RecurringTransactionData,
    account: Account | None,
    logger: Logger,
) -> None:
    """Raise when a recurring transaction recipe is invalid.

    Raises:
        ValidationError: If any field is rejected.
    """
    errors = recurring_transaction_errors(data, account, logger)
    if errors:
        raise ValidationError(errors)


def loan_contract_errors(
    data: LoanContractData,
    account: Account | None,
    payment_account: Account | None,
    currency_id: str | None,
) -> list[str]:
    """Collect validation errors for a loan contract.

    Args:
        data: Contract fields supplied by the user.
        account: Liability account the loan is booked on.
        payment_account: Expense account paying the loan, if configured.
        currency_id: Resolved contract currency identifier.

    Returns:
        list[str]: Validation messages; empty when the contract is valid.
    """
    errors = loan_parameter_errors(
        data.loan_amount,
        data.interest_rate,
        data.total_periods,
    )
    if data.repayment_type not in REPAYMENT_TYPES:
        errors.append(f"Unsupported repayment type: {data.repayment_type}")
    if (
        isinstance(data.payment_day, bool)
        or not isinstance(data.payment_day, int)
        or not 1 <= data.payment_day <= 31
    ):
        errors.append("Payment day must be between 1 and 31")
    if not (data.contract_name or "").strip():
        errors.append("Contract name is required")
    if currency_id is None:
        errors.append(f"Currency {data.currency_code} does not exist")
    if account is None:
        errors.append(f"Account {data.account_id} does not exist")
    elif account.category_type != LIABILITY:
        errors.append("Loan account must be a liability account")
    if data.payment_account_id:
        if payment_account is None:
            errors.append(
                f"Payment account {data.payment_account_id} does not exist"
            )
        else:
            if payment_account.category_type != EXPENSE:
                errors.append("Payment account must be an expense account")
            if (
                currency_id is not None
                and payment_account.currency_id is not None
                and payment_account.currency_id != currency_id
            ):
                errors.append(
                    "Payment account currency does not match the contract"
                )
    return errors


def validate_loan_contract(
    data: LoanContractData,
    account: Account | None,
    payment_account: Account | None,
    currency_id: str | None,
) -> None:
    """Raise when a loan contract is invalid.

    Raises:
        ValidationError: If any field is rejected.
    """
    errors = loan_contract_errors(data, account, payment_account, currency_id)
    if errors:
        raise ValidationError(errors)


__all__ = [
    "recurring_transaction_errors",
    "validate_recurring_transaction",
    "loan_contract_errors",
    "validate_loan_contract",
]
