"""Domain models for accounts, transactions, and derived balances."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal


@dataclass(frozen=True)
class Account:
    """Ledger account and the type of the category it belongs to.

    Attributes:
        id: Account identifier.
        name: Display name.
        category_type: ASSET, LIABILITY, INCOME, or EXPENSE. Unknown values
            are tolerated and treated like assets by the balance engine.
        currency_id: Identifier of the account currency, when fixed.
        user_id: Owner of the account.
    """

    id: str
    name: str
    category_type: str | None
    currency_id: str | None = None
    user_id: str | None = None


@dataclass(frozen=True)
class Transaction:
    """Immutable ledger entry as read from the store."""

    id: str
    account_id: str
    currency_code: str | None
    type: str
    amount: Decimal | None
    date: date | None
    currency_id: str | None = None
    user_id: str | None = None
    description: str = ""
    notes: str | None = None
    recurring_transaction_id: str | None = None
    loan_contract_id: str | None = None
    loan_payment_id: str | None = None
    generated_role: str | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class NewTransaction:
    """Transaction staged for insertion by a batch generator."""

    user_id: str
    account_id: str
    currency_id: str
    type: str
    amount: Decimal
    date: date
    description: str
    notes: str | None = None
    recurring_transaction_id: str | None = None
    loan_contract_id: str | None = None
    loan_payment_id: str | None = None
    generated_role: str | None = None


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of a currency conversion request."""

    converted_amount: Decimal | None
    rate: Decimal | None
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class TotalBalance:
    """Per-currency totals across accounts, optionally converted.

    Attributes:
        by_currency: Summed balance per currency code.
        base_currency: Currency used for the converted total, if any.
        converted_total: Sum of every amount that could be expressed in the
            base currency.
        has_conversion_errors: True when at least one currency could not be
            converted.
        conversion_errors: Messages describing failed conversions.
    """

    by_currency: dict[str, Decimal]
    base_currency: str | None = None
    converted_total: Decimal | None = None
    has_conversion_errors: bool = False
    conversion_errors: list[str] = field(default_factory=list)


__all__ = [
    "Account",
    "Transaction",
    "NewTransaction",
    "ConversionResult",
    "TotalBalance",
]
