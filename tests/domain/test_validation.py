"""Tests for recipe validation, normalization, and templates."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from src.domain.errors import ValidationError
from src.domain.models import (
    Account,
    IdempotencyKey,
    LoanContractData,
    RecurringTransactionData,
)
from src.domain.services.idempotency import existing_keys, filter_new, make_key
from src.domain.services.normalization import (
    normalize_currency_code,
    normalize_date,
    try_normalize_date,
)
from src.domain.services.templates import (
    format_amount,
    replace_template_placeholders,
)
from src.domain.services.validation import (
    loan_contract_errors,
    recurring_transaction_errors,
    validate_loan_contract,
    validate_recurring_transaction,
)

RENT = Account(id="rent", name="Rent", category_type="EXPENSE", currency_id="usd")
CHECKING = Account(id="chk", name="Checking", category_type="ASSET")
MORTGAGE = Account(
    id="mtg", name="Mortgage", category_type="LIABILITY", currency_id="usd"
)


def _recipe(**overrides) -> RecurringTransactionData:
    fields = dict(
        account_id="rent",
        currency_code="USD",
        type="EXPENSE",
        amount=Decimal("1500"),
        description="Rent",
        frequency="MONTHLY",
        start_date=date(2024, 1, 1),
    )
    fields.update(overrides)
    return RecurringTransactionData(**fields)


def _loan(**overrides) -> LoanContractData:
    fields = dict(
        account_id="mtg",
        currency_code="USD",
        contract_name="Home loan",
        loan_amount=Decimal("100000"),
        interest_rate=Decimal("0.05"),
        total_periods=12,
        repayment_type="EQUAL_PAYMENT",
        start_date=date(2024, 1, 15),
        payment_day=15,
    )
    fields.update(overrides)
    return LoanContractData(**fields)


def test_valid_recipe_has_no_errors() -> None:
    assert recurring_transaction_errors(_recipe(), RENT, MagicMock()) == []


@pytest.mark.parametrize(
    "overrides",
    [
        {"frequency": "HOURLY"},
        {"interval": 0},
        {"interval": True},
        {"amount": Decimal("0")},
        {"description": "  "},
        {"day_of_month": 32},
        {"day_of_week": 7},
        {"month_of_year": 13},
        {"end_date": date(2024, 1, 1)},
        {"max_occurrences": 0},
        {"type": "INCOME"},
    ],
)
def test_invalid_recipe_fields_are_reported(overrides) -> None:
    with pytest.raises(ValidationError) as excinfo:
        validate_recurring_transaction(_recipe(**overrides), RENT, MagicMock())

    assert len(excinfo.value.errors) == 1
    assert str(excinfo.value) == excinfo.value.errors[0]


def test_missing_account_is_an_error() -> None:
    errors = recurring_transaction_errors(_recipe(), None, MagicMock())

    assert errors == ["Account rent does not exist"]


def test_unused_anchors_and_stock_accounts_only_warn() -> None:
    logger = MagicMock()

    errors = recurring_transaction_errors(
        _recipe(day_of_week=3, day_of_month=31),
        CHECKING,
        logger,
    )

    assert errors == []
    assert logger.warning.call_count == 3


def test_loan_contract_checks_accounts_and_currency() -> None:
    assert loan_contract_errors(_loan(), MORTGAGE, None, "usd") == []

    errors = loan_contract_errors(
        _loan(payment_account_id="chk", payment_day=0),
        RENT,
        CHECKING,
        None,
    )

    assert errors == [
        "Payment day must be between 1 and 31",
        "Currency USD does not exist",
        "Loan account must be a liability account",
        "Payment account must be an expense account",
    ]


def test_loan_payment_account_currency_must_match() -> None:
    with pytest.raises(ValidationError, match="currency does not match"):
        validate_loan_contract(
            _loan(payment_account_id="rent"), MORTGAGE, RENT, "eur"
        )


def test_normalize_date_uses_local_calendar_day() -> None:
    aware = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
    local = aware.astimezone()

    assert normalize_date(aware) == local.date()
    assert normalize_date("2024-01-10") == date(2024, 1, 10)
    assert normalize_date(datetime(2024, 1, 10, 23, 59)) == date(2024, 1, 10)
    assert try_normalize_date("not a date") is None
    assert try_normalize_date(None) is None


def test_normalize_currency_code() -> None:
    assert normalize_currency_code(" usd ") == "USD"
    assert normalize_currency_code("") is None
    assert normalize_currency_code(None) is None


def test_idempotency_keys_compare_by_local_date() -> None:
    """Keys built from a date and a same-day datetime must match."""
    key = make_key("r1", date(2024, 1, 10), "OCCURRENCE")
    same_day = make_key(
        "r1", datetime(2024, 1, 10, 8, 30) + timedelta(hours=1), "OCCURRENCE"
    )

    assert key == same_day
    assert str(key) == "r1@2024-01-10/OCCURRENCE"
    assert existing_keys("r1", ["2024-01-10"], "OCCURRENCE") == {key}

    items = [
        MagicMock(key=key),
        MagicMock(key=IdempotencyKey("r1", date(2024, 1, 11), "OCCURRENCE")),
    ]
    assert filter_new(items, {key}) == [items[1]]


def test_template_placeholders_are_replaced() -> None:
    text = replace_template_placeholders(
        "{contractName} #{period} left {remainingBalance} {other}",
        period=3,
        contract_name="Home loan",
        remaining_balance=Decimal("12000"),
    )

    assert text == "Home loan #3 left 12,000.00 {other}"
    assert format_amount(Decimal("0.005")) == "0.01"
