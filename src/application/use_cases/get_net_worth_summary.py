"""Use case to compute net worth from the transaction log."""

from collections import defaultdict
from datetime import date
from decimal import Decimal

from src.application.ports.currency import CurrencyConverterPort
from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.domain.constants import ASSET, LIABILITY, STOCK_ACCOUNT_TYPES
from src.domain.models import NetWorthSummary
from src.domain.services.balance import (
    compute_account_balance,
    compute_balances_by_type,
    convert_totals,
)
from src.infrastructure.logging.logger import get_app_logger


class GetNetWorthSummaryUseCase:
    """Compute assets, liabilities, and net worth in one currency."""

    def __init__(
        self,
        ledger_repository: LedgerRepositoryPort,
        converter: CurrencyConverterPort,
        logger=None,
    ) -> None:
        """Initialize the use case.

        Args:
            ledger_repository: Port exposing accounts and transactions.
            converter: Port converting balances into the target currency.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._ledger = ledger_repository
        self._converter = converter
        self._logger = logger or get_app_logger()

    def execute(
        self,
        user_id: str,
        base_currency: str,
        as_of: date | None = None,
    ) -> NetWorthSummary:
        """Return the net worth summary.

        Args:
            user_id: Owner of the accounts.
            base_currency: Currency of the totals.
            as_of: Inclusive cut-off date; defaults to today.

        Returns:
            NetWorthSummary: Computed asset, liability, and net worth totals.
        """
        as_of = as_of or date.today()
        accounts = [
            account
            for account in self._ledger.fetch_accounts(user_id)
            if account.category_type in STOCK_ACCOUNT_TYPES
        ]
        by_account = defaultdict(list)
        for transaction in self._ledger.fetch_transactions(
            [account.id for account in accounts]
        ):
            by_account[transaction.account_id].append(transaction)

        by_type = compute_balances_by_type(
            (
                account,
                compute_account_balance(
                    account,
                    by_account[account.id],
                    as_of=as_of,
                    logger=self._logger,
                ),
            )
            for account in accounts
        )

        def convert(amount, source, target):
            return self._converter.convert(amount, source, target, as_of)

        assets = convert_totals(
            by_type[ASSET], base_currency, convert, logger=self._logger
        )
        liabilities = convert_totals(
            by_type[LIABILITY], base_currency, convert, logger=self._logger
        )
        asset_total = assets.converted_total or Decimal("0")
        liability_total = liabilities.converted_total or Decimal("0")
        net_worth = asset_total - liability_total
        errors = assets.conversion_errors + liabilities.conversion_errors

        self._logger.info(
            f"Net worth computed: assets={asset_total}, "
            f"liabilities={liability_total}"
        )

        return NetWorthSummary(
            asset_total=asset_total,
            liability_total=liability_total,
            net_worth=net_worth,
            currency_code=assets.base_currency,
            has_conversion_errors=bool(errors),
            conversion_errors=errors,
        )


__all__ = ["GetNetWorthSummaryUseCase"]
