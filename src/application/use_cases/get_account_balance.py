"""Use case returning the reconstructed balance of one account."""

from datetime import date
from decimal import Decimal

from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.domain.errors import NotFoundError
from src.domain.services.balance import compute_account_balance
from src.infrastructure.logging.logger import get_app_logger


class GetAccountBalanceUseCase:
    """Compute the per-currency balance of an account from its log."""

    def __init__(self, ledger_repository: LedgerRepositoryPort, logger=None):
        """Initialize the use case.

        Args:
            ledger_repository: Port exposing accounts and transactions.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._ledger = ledger_repository
        self._logger = logger or get_app_logger()

    def execute(
        self,
        account_id: str,
        as_of: date | None = None,
        period_start: date | None = None,
        period_end: date | None = None,
        today: date | None = None,
    ) -> dict[str, Decimal]:
        """Return the balance of ``account_id`` per currency code.

        Args:
            account_id: Account to reconstruct.
            as_of: Inclusive cut-off for stock accounts.
            period_start: Window start for flow accounts.
            period_end: Window end for flow accounts.
            today: Reference date for the default flow window.

        Returns:
            dict[str, Decimal]: Balance per currency code.

        Raises:
            NotFoundError: If the account does not exist.
        """
        account = self._ledger.fetch_account(account_id)
        if account is None:
            raise NotFoundError(f"Account {account_id} does not exist")
        transactions = self._ledger.fetch_transactions([account_id])
        balances = compute_account_balance(
            account,
            transactions,
            as_of=as_of,
            period_start=period_start,
            period_end=period_end,
            today=today,
            logger=self._logger,
        )
        self._logger.debug(
            f"Balance of {account.name} ({account.category_type}): {balances}"
        )
        return balances


__all__ = ["GetAccountBalanceUseCase"]
