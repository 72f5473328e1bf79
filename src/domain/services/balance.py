"""Balance reconstruction from the transaction log.

Stock accounts (assets, liabilities) are reconstructed from the latest
BALANCE checkpoint at or before the requested date plus the INCOME/EXPENSE
suffix after it. Flow accounts (income, expense) are summed over a period
window and carry no running balance.
"""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal
from logging import Logger

from src.domain.constants import (
    ASSET,
    BALANCE,
    EXPENSE,
    FLOW_ACCOUNT_TYPES,
    INCOME,
    LIABILITY,
    STOCK_ACCOUNT_TYPES,
)
from src.domain.models.ledger import Account, TotalBalance, Transaction
from src.domain.services.normalization import (
    normalize_currency_code,
    try_normalize_date,
)
from src.domain.services.recurrence import days_in_month
from src.utils.decimal_utils import try_coerce_decimal

ZERO = Decimal("0")


def month_window(today: date) -> tuple[date, date]:
    """Return the first and last day of the calendar month of ``today``."""
    start = today.replace(day=1)
    end = today.replace(day=days_in_month(today.year, today.month))
    return start, end


def _valid_entries(
    account: Account,
    transactions: Iterable[Transaction],
    logger: Logger,
) -> list[tuple[Transaction, str, Decimal, date]]:
    entries = []
    for transaction in transactions:
        amount = try_coerce_decimal(transaction.amount)
        if amount is None:
            logger.warning(
                f"Skipping transaction {transaction.id} in account "
                f"{account.name} with invalid amount: {transaction.amount!r}"
            )
            continue
        entry_date = try_normalize_date(transaction.date)
        if entry_date is None:
            logger.warning(
                f"Skipping transaction {transaction.id} in account "
                f"{account.name} with invalid date: {transaction.date!r}"
            )
            continue
        currency = normalize_currency_code(transaction.currency_code)
        if currency is None:
            logger.warning(
                f"Skipping transaction {transaction.id} in account "
                f"{account.name} with missing currency"
            )
            continue
        entries.append((transaction, currency, amount, entry_date))
    return entries


def _anchor_sort_key(entry) -> tuple[date, datetime]:
    transaction, _, _, entry_date = entry
    updated_at = transaction.updated_at or datetime.min
    if updated_at.tzinfo is not None:
        updated_at = updated_at.astimezone().replace(tzinfo=None)
    return entry_date, updated_at


def compute_stock_balance(
    account: Account,
    transactions: Iterable[Transaction],
    *,
    as_of: date | None,
    logger: Logger,
) -> dict[str, Decimal]:
    """Reconstruct a stock account balance per currency.

    Args:
        account: Asset or liability account (unknown types are accepted).
        transactions: Transactions of the account.
        as_of: Inclusive upper bound; None means no bound.
        logger: Logger used for warnings.

    Returns:
        dict[str, Decimal]: Balance per currency code.
    """
    by_currency: dict[str, list] = defaultdict(list)
    for entry in _valid_entries(account, transactions, logger):
        if as_of is not None and entry[3] > as_of:
            continue
        by_currency[entry[1]].append(entry)

    balances: dict[str, Decimal] = {}
    for currency, entries in by_currency.items():
        anchors = [entry for entry in entries if entry[0].type == BALANCE]
        anchor = max(anchors, key=_anchor_sort_key) if anchors else None
        balance = anchor[2] if anchor else ZERO
        anchor_date = anchor[3] if anchor else None
        for transaction, _, amount, entry_date in entries:
            if anchor_date is not None and entry_date <= anchor_date:
                continue
            if transaction.type == INCOME:
                balance += amount
            elif transaction.type == EXPENSE:
                balance -= amount
        balances[currency] = balance
    return balances


def compute_flow_balance(
    account: Account,
    transactions: Iterable[Transaction],
    *,
    period_start: date,
    period_end: date,
    logger: Logger,
) -> dict[str, Decimal]:
    """Sum a flow account over an inclusive period window.

    Only transactions whose type matches the account category type are
    counted; anything else is reported as a data-integrity warning.

    Args:
        account: Income or expense account.
        transactions: Transactions of the account.
        period_start: First day of the window.
        period_end: Last day of the window.
        logger: Logger used for warnings.

    Returns:
        dict[str, Decimal]: Period total per currency code.
    """
    balances: dict[str, Decimal] = {}
    for transaction, currency, amount, entry_date in _valid_entries(
        account, transactions, logger
    ):
        if entry_date < period_start or entry_date > period_end:
            continue
        if transaction.type != account.category_type:
            logger.warning(
                f"Flow account {account.name} ({account.category_type}) "
                f"contains {transaction.type} transaction {transaction.id}"
            )
            continue
        balances[currency] = balances.get(currency, ZERO) + amount
    return balances


def compute_account_balance(
    account: Account,
    transactions: Iterable[Transaction],
    *,
    as_of: date | None = None,
    period_start: date | None = None,
    period_end: date | None = None,
    today: date | None = None,
    logger: Logger,
) -> dict[str, Decimal]:
    """Return the balance of an account per currency.

    Args:
        account: Account whose balance is requested.
        transactions: Transactions of the account.
        as_of: Inclusive cut-off for stock accounts.
        period_start: Window start for flow accounts.
        period_end: Window end for flow accounts.
        today: Reference date for the default flow window.
        logger: Logger used for warnings.

    Returns:
        dict[str, Decimal]: Balance per currency code.
    """
    if account.category_type in FLOW_ACCOUNT_TYPES:
        default_start, default_end = month_window(today or date.today())
        return compute_flow_balance(
            account,
            transactions,
            period_start=period_start or default_start,
            period_end=period_end or default_end,
            logger=logger,
        )
    if account.category_type not in STOCK_ACCOUNT_TYPES:
        logger.warning(
            f"Account {account.name} has unknown type "
            f"{account.category_type!r}; treating it as {ASSET}"
        )
    return compute_stock_balance(
        account,
        transactions,
        as_of=as_of,
        logger=logger,
    )


def aggregate_balances(
    balances: Iterable[dict[str, Decimal]],
) -> dict[str, Decimal]:
    """Sum per-currency balances across accounts."""
    totals: dict[str, Decimal] = {}
    for balance in balances:
        for currency, amount in balance.items():
            totals[currency] = totals.get(currency, ZERO) + amount
    return dict(sorted(totals.items()))


def convert_totals(
    totals: dict[str, Decimal],
    base_currency: str,
    convert,
    *,
    logger: Logger,
) -> TotalBalance:
    """Express per-currency totals in a base currency.

    Amounts already in the base currency are always included. Any currency
    whose conversion fails, or whose converter raises, is recorded in
    ``conversion_errors`` and flagged instead of being zeroed.

    Args:
        totals: Per-currency totals.
        base_currency: Target currency code.
        convert: Callable ``(amount, from_code, to_code) -> ConversionResult``.
        logger: Logger used for warnings.

    Returns:
        TotalBalance: Totals with the converted sum and error flag.
    """
    base = normalize_currency_code(base_currency) or base_currency
    converted_total = ZERO
    errors: list[str] = []
    for currency, amount in totals.items():
        if currency == base:
            converted_total += amount
            continue
        try:
            result = convert(amount, currency, base)
        except Exception as exc:
            result = None
            message = f"{currency}->{base}: {exc}"
        else:
            message = f"{currency}->{base}: {getattr(result, 'error', None)}"
        if result is None or not result.success or result.converted_amount is None:
            logger.warning(f"Currency conversion failed {message}")
            errors.append(message)
            continue
        converted_total += result.converted_amount
    return TotalBalance(
        by_currency=dict(totals),
        base_currency=base,
        converted_total=converted_total,
        has_conversion_errors=bool(errors),
        conversion_errors=errors,
    )


def compute_balances_by_type(
    accounts: Iterable[tuple[Account, dict[str, Decimal]]],
) -> dict[str, dict[str, Decimal]]:
    """Group per-currency balances by account category type.

    Accounts without a known type are grouped with assets.
    """
    grouped: dict[str, dict[str, Decimal]] = {
        ASSET: {},
        LIABILITY: {},
        INCOME: {},
        EXPENSE: {},
    }
    for account, balance in accounts:
        account_type = account.category_type
        if account_type not in grouped:
            account_type = ASSET
        bucket = grouped[account_type]
        for currency, amount in balance.items():
            bucket[currency] = bucket.get(currency, ZERO) + amount
    return grouped


def compute_net_worth(
    balances_by_type: dict[str, dict[str, Decimal]],
) -> dict[str, Decimal]:
    """Return assets minus liabilities per currency."""
    assets = balances_by_type.get(ASSET, {})
    liabilities = balances_by_type.get(LIABILITY, {})
    currencies = sorted(set(assets) | set(liabilities))
    return {
        currency: assets.get(currency, ZERO) - liabilities.get(currency, ZERO)
        for currency in currencies
    }


__all__ = [
    "month_window",
    "compute_stock_balance",
    "compute_flow_balance",
    "compute_account_balance",
    "aggregate_balances",
    "convert_totals",
    "compute_balances_by_type",
    "compute_net_worth",
]
