"""Port for reading and appending ledger accounts and transactions."""

from collections.abc import Iterable
from typing import Protocol

from src.domain.models import Account, NewTransaction, Transaction


class LedgerRepositoryPort(Protocol):
    """Port exposing the transaction log and its reference data."""

    def fetch_account(self, account_id: str) -> Account | None:
        """Return one account, or None when it does not exist."""

    def fetch_accounts(self, user_id: str) -> list[Account]:
        """Return every account owned by a user."""

    def fetch_transactions(
        self,
        account_ids: Iterable[str],
    ) -> list[Transaction]:
        """Return the transactions of the given accounts."""

    def fetch_currency_id(self, code: str) -> str | None:
        """Return the identifier of a currency code."""

    def fetch_currency_code(self, currency_id: str) -> str | None:
        """Return the code of a currency identifier."""

    def add_currency(self, code: str) -> str:
        """Register a currency and return its identifier."""

    def add_account(
        self,
        user_id: str,
        name: str,
        category_type: str,
        currency_id: str | None = None,
    ) -> str:
        """Create an account and return its identifier."""

    def add_transaction(self, transaction: NewTransaction) -> str:
        """Append a manual transaction and return its identifier."""


__all__ = ["LedgerRepositoryPort"]
