"""Use case summing balances across accounts and currencies."""

from collections import defaultdict
from collections.abc import Iterable
from datetime import date

from src.application.ports.currency import CurrencyConverterPort
from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.domain.errors import NotFoundError
from src.domain.models import ConversionResult, TotalBalance
from src.domain.services.balance import (
    aggregate_balances,
    compute_account_balance,
    convert_totals,
)
from src.infrastructure.logging.logger import get_app_logger


class GetTotalBalanceUseCase:
    """Aggregate account balances and optionally convert them."""

    def __init__(
        self,
        ledger_repository: LedgerRepositoryPort,
        converter: CurrencyConverterPort | None = None,
        logger=None,
    ) -> None:
        """Initialize the use case.

        Args:
            ledger_repository: Port exposing accounts and transactions.
            converter: Optional port used when a base currency is requested.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._ledger = ledger_repository
        self._converter = converter
        self._logger = logger or get_app_logger()

    def execute(
        self,
        account_ids: Iterable[str],
        base_currency: str | None = None,
        as_of: date | None = None,
        today: date | None = None,
    ) -> TotalBalance:
        """Return per-currency totals and, when asked, a converted sum.

        Conversions that fail are reported through ``has_conversion_errors``
        instead of silently dropping the amounts.

        Without a converter only amounts already in the base currency are
        summed; every other currency is flagged as a conversion error.

        Raises:
            NotFoundError: If an account does not exist.
        """
        ids = list(account_ids)
        accounts = []
        for account_id in ids:
            account = self._ledger.fetch_account(account_id)
            if account is None:
                raise NotFoundError(f"Account {account_id} does not exist")
            accounts.append(account)

        by_account = defaultdict(list)
        for transaction in self._ledger.fetch_transactions(ids):
            by_account[transaction.account_id].append(transaction)

        totals = aggregate_balances(
            compute_account_balance(
                account,
                by_account[account.id],
                as_of=as_of,
                today=today,
                logger=self._logger,
            )
            for account in accounts
        )
        if base_currency is None:
            return TotalBalance(by_currency=totals)
        rate_date = as_of or today or date.today()
        result = convert_totals(
            totals,
            base_currency,
            lambda amount, source, target: self._convert(
                amount, source, target, rate_date
            ),
            logger=self._logger,
        )
        self._logger.info(
            f"Total balance over {len(accounts)} accounts: "
            f"{result.converted_total} {result.base_currency}"
            + (" (with conversion errors)" if result.has_conversion_errors else "")
        )
        return result

    def _convert(
        self,
        amount,
        source: str,
        target: str,
        rate_date: date,
    ) -> ConversionResult:
        if self._converter is None:
            return ConversionResult(
                converted_amount=None,
                rate=None,
                success=False,
                error="No currency converter configured",
            )
        return self._converter.convert(amount, source, target, rate_date)


__all__ = ["GetTotalBalanceUseCase"]
