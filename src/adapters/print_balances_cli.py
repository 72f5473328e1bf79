"""CLI adapter printing account balances and net worth for one user."""

from datetime import date
import os

from src.application.use_cases.get_account_balance import (
    GetAccountBalanceUseCase,
)
from src.application.use_cases.get_net_worth_summary import (
    GetNetWorthSummaryUseCase,
)
from src.infrastructure.container import (
    build_currency_converter,
    build_database_adapter,
    build_ledger_repository,
)
from src.infrastructure.logging.logger import get_app_logger
from src.infrastructure.settings import LedgerSettings


def _parse_date(value: str | None, logger) -> date | None:
    """Parse an ISO date string into a date.

    Args:
        value: Date string in YYYY-MM-DD format.
        logger: Logger used for warnings.

    Returns:
        date | None: Parsed date or None when invalid.
    """
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.warning(
            f"Invalid date '{value}'. Expected format YYYY-MM-DD."
        )
        return None


def main() -> int:
    """Print every account balance and the net worth summary."""
    logger = get_app_logger()
    user_id = os.getenv("LEDGER_USER_ID", "").strip()
    if not user_id:
        logger.error("LEDGER_USER_ID is required to print balances.")
        return 2
    as_of = _parse_date(os.getenv("LEDGER_AS_OF"), logger) or date.today()
    settings = LedgerSettings.from_env()

    db_adapter = build_database_adapter()
    ledger = build_ledger_repository(db_adapter)
    balance_use_case = GetAccountBalanceUseCase(ledger, logger=logger)
    net_worth_use_case = GetNetWorthSummaryUseCase(
        ledger,
        build_currency_converter(db_adapter),
        logger=logger,
    )

    print(f"Balances as of {as_of}")
    for account in ledger.fetch_accounts(user_id):
        balances = balance_use_case.execute(account.id, as_of=as_of, today=as_of)
        rendered = ", ".join(
            f"{amount:,.2f} {currency}" for currency, amount in balances.items()
        ) or "0.00"
        print(f"  [{account.category_type}] {account.name}: {rendered}")

    summary = net_worth_use_case.execute(
        user_id, settings.base_currency, as_of=as_of
    )
    print(
        f"Net worth ({summary.currency_code}): {summary.net_worth:,.2f} "
        f"(assets {summary.asset_total:,.2f}, "
        f"liabilities {summary.liability_total:,.2f})"
    )
    for error in summary.conversion_errors:
        print(f"  conversion error: {error}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
