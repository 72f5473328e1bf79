"""Tests for balance reconstruction."""

from datetime import date, datetime
from decimal import Decimal
from unittest.mock import MagicMock

from src.domain.models import Account, ConversionResult, Transaction
from src.domain.services.balance import (
    aggregate_balances,
    compute_account_balance,
    compute_balances_by_type,
    compute_flow_balance,
    compute_net_worth,
    compute_stock_balance,
    convert_totals,
    month_window,
)

CHECKING = Account(id="acc-1", name="Checking", category_type="ASSET")
GROCERIES = Account(id="acc-2", name="Groceries", category_type="EXPENSE")


def _tx(tx_id, tx_type, amount, day, currency="USD", updated_at=None):
    return Transaction(
        id=tx_id,
        account_id="acc-1",
        currency_code=currency,
        type=tx_type,
        amount=Decimal(amount) if isinstance(amount, str) else amount,
        date=day,
        updated_at=updated_at,
    )


def test_stock_balance_uses_latest_anchor_plus_suffix() -> None:
    """An anchor of 1000 then an expense of 200 should leave 800."""
    txs = [
        _tx("t1", "BALANCE", "1000", date(2024, 1, 10)),
        _tx("t2", "EXPENSE", "200", date(2024, 1, 15)),
    ]

    after = compute_stock_balance(
        CHECKING, txs, as_of=date(2024, 1, 20), logger=MagicMock()
    )
    before = compute_stock_balance(
        CHECKING, txs, as_of=date(2024, 1, 5), logger=MagicMock()
    )

    assert after == {"USD": Decimal("800")}
    assert before.get("USD", Decimal("0")) == Decimal("0")


def test_same_day_flows_are_inside_the_anchor() -> None:
    """Entries dated on the anchor day are already part of the snapshot."""
    txs = [
        _tx("t1", "BALANCE", "1000", date(2024, 1, 10)),
        _tx("t2", "INCOME", "50", date(2024, 1, 10)),
        _tx("t3", "INCOME", "25", date(2024, 1, 11)),
    ]

    result = compute_stock_balance(
        CHECKING, txs, as_of=date(2024, 1, 11), logger=MagicMock()
    )

    assert result == {"USD": Decimal("1025")}


def test_same_day_anchors_tie_break_on_update_time() -> None:
    txs = [
        _tx(
            "t1",
            "BALANCE",
            "500",
            date(2024, 1, 10),
            updated_at=datetime(2024, 1, 10, 12, 0),
        ),
        _tx(
            "t2",
            "BALANCE",
            "700",
            date(2024, 1, 10),
            updated_at=datetime(2024, 1, 10, 9, 0),
        ),
    ]

    result = compute_stock_balance(
        CHECKING, txs, as_of=None, logger=MagicMock()
    )

    assert result == {"USD": Decimal("500")}


def test_stock_balance_without_anchor_sums_flows_per_currency() -> None:
    txs = [
        _tx("t1", "INCOME", "100", date(2024, 1, 1)),
        _tx("t2", "EXPENSE", "30", date(2024, 1, 2)),
        _tx("t3", "INCOME", "10", date(2024, 1, 2), currency="eur"),
    ]

    result = compute_stock_balance(
        CHECKING, txs, as_of=None, logger=MagicMock()
    )

    assert result == {"USD": Decimal("70"), "EUR": Decimal("10")}


def test_invalid_entries_are_skipped_with_warning() -> None:
    logger = MagicMock()
    txs = [
        _tx("t1", "INCOME", "100", date(2024, 1, 1)),
        _tx("t2", "INCOME", None, date(2024, 1, 2)),
        _tx("t3", "INCOME", "5", None),
    ]

    result = compute_stock_balance(CHECKING, txs, as_of=None, logger=logger)

    assert result == {"USD": Decimal("100")}
    assert logger.warning.call_count == 2


def test_flow_balance_sums_window_and_flags_mismatched_types() -> None:
    logger = MagicMock()
    txs = [
        _tx("t1", "EXPENSE", "40", date(2024, 3, 1)),
        _tx("t2", "EXPENSE", "60", date(2024, 3, 31)),
        _tx("t3", "EXPENSE", "999", date(2024, 4, 1)),
        _tx("t4", "INCOME", "5", date(2024, 3, 15)),
    ]

    result = compute_flow_balance(
        GROCERIES,
        txs,
        period_start=date(2024, 3, 1),
        period_end=date(2024, 3, 31),
        logger=logger,
    )

    assert result == {"USD": Decimal("100")}
    logger.warning.assert_called_once()


def test_account_balance_defaults_flow_window_to_current_month() -> None:
    txs = [
        _tx("t1", "EXPENSE", "40", date(2024, 2, 29)),
        _tx("t2", "EXPENSE", "60", date(2024, 1, 31)),
    ]

    result = compute_account_balance(
        GROCERIES, txs, today=date(2024, 2, 10), logger=MagicMock()
    )

    assert result == {"USD": Decimal("40")}
    assert month_window(date(2024, 2, 10)) == (
        date(2024, 2, 1),
        date(2024, 2, 29),
    )


def test_unknown_account_type_is_treated_as_stock() -> None:
    logger = MagicMock()
    account = Account(id="acc-9", name="Mystery", category_type=None)
    txs = [_tx("t1", "BALANCE", "10", date(2024, 1, 1))]

    result = compute_account_balance(account, txs, logger=logger)

    assert result == {"USD": Decimal("10")}
    logger.warning.assert_called_once()


def test_convert_totals_flags_failures_without_zeroing() -> None:
    """Failed conversions raise the flag and leave other amounts intact."""

    def convert(amount, source, target):
        if source == "EUR":
            return ConversionResult(None, None, False, "no rate")
        if source == "GBP":
            raise RuntimeError("rates offline")
        return ConversionResult(amount * 2, Decimal("2"), True)

    totals = {
        "USD": Decimal("100"),
        "EUR": Decimal("50"),
        "GBP": Decimal("5"),
        "CHF": Decimal("10"),
    }

    result = convert_totals(totals, "usd", convert, logger=MagicMock())

    assert result.base_currency == "USD"
    assert result.converted_total == Decimal("120")
    assert result.has_conversion_errors is True
    assert len(result.conversion_errors) == 2
    assert result.by_currency == totals


def test_convert_totals_in_single_currency_has_no_errors() -> None:
    result = convert_totals(
        {"USD": Decimal("5")}, "USD", MagicMock(), logger=MagicMock()
    )

    assert result.converted_total == Decimal("5")
    assert result.has_conversion_errors is False


def test_net_worth_is_assets_minus_liabilities() -> None:
    mortgage = Account(id="acc-3", name="Mortgage", category_type="LIABILITY")
    grouped = compute_balances_by_type(
        [
            (CHECKING, {"USD": Decimal("1000")}),
            (mortgage, {"USD": Decimal("400"), "EUR": Decimal("10")}),
            (GROCERIES, {"USD": Decimal("50")}),
        ]
    )

    assert grouped["EXPENSE"] == {"USD": Decimal("50")}
    assert compute_net_worth(grouped) == {
        "EUR": Decimal("-10"),
        "USD": Decimal("600"),
    }
    assert aggregate_balances(
        [{"USD": Decimal("1")}, {"USD": Decimal("2"), "EUR": Decimal("3")}]
    ) == {"EUR": Decimal("3"), "USD": Decimal("3")}
