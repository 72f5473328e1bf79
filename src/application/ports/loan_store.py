"""Ports for persisting loan contracts and their payment schedules."""

from collections.abc import Iterable
from contextlib import AbstractContextManager
from datetime import date, datetime
from typing import Protocol

from src.domain.models import (
    LoanContract,
    LoanPayment,
    NewLoanPayment,
    NewTransaction,
)


class LoanUnitOfWork(Protocol):
    """Transactional handle used while one contract is modified."""

    def payment_statuses(self, payment_ids: Iterable[str]) -> dict[str, str]:
        """Return the current status of each payment."""

    def existing_transactions(
        self,
        payment_ids: Iterable[str],
    ) -> dict[str, dict[str, str]]:
        """Return ``{payment_id: {generated_role: transaction_id}}``."""

    def insert_transaction(self, transaction: NewTransaction) -> str:
        """Insert a generated transaction and return its identifier."""

    def delete_transactions(self, transaction_ids: Iterable[str]) -> int:
        """Delete transactions and return how many were removed."""

    def complete_payment(
        self,
        payment_id: str,
        principal_transaction_id: str | None,
        interest_transaction_id: str | None,
        balance_transaction_id: str | None,
        processed_at: datetime,
    ) -> None:
        """Mark a payment COMPLETED and link its transactions."""

    def reset_payment(self, payment_id: str) -> None:
        """Mark a payment PENDING and clear its transaction links."""

    def insert_contract(self, contract: LoanContract) -> None:
        """Store a new contract."""

    def update_contract(self, contract: LoanContract) -> None:
        """Replace the stored fields of a contract."""

    def insert_payments(self, payments: Iterable[NewLoanPayment]) -> int:
        """Store schedule rows as PENDING payments."""

    def delete_pending_payments(self, contract_id: str) -> int:
        """Delete every PENDING payment of a contract."""

    def save_cursor(
        self,
        contract_id: str,
        current_period: int,
        next_payment_date: date | None,
        is_active: bool,
    ) -> None:
        """Persist the contract cursor."""


class LoanStorePort(Protocol):
    """Port exposing loan contracts and payments."""

    def fetch_contracts(self, user_id: str) -> list[LoanContract]:
        """Return every contract of a user, active or not."""

    def fetch_contract(self, contract_id: str) -> LoanContract | None:
        """Return one contract, or None when it does not exist."""

    def fetch_payments(self, contract_id: str) -> list[LoanPayment]:
        """Return every payment of a contract ordered by period."""

    def fetch_due_payments(
        self,
        contract_id: str,
        horizon: date,
    ) -> list[LoanPayment]:
        """Return PENDING payments due on or before ``horizon``."""

    def existing_transactions(
        self,
        payment_ids: Iterable[str],
    ) -> dict[str, dict[str, str]]:
        """Read-only lookup of transactions already linked to payments."""

    def begin(self) -> AbstractContextManager[LoanUnitOfWork]:
        """Open a database transaction scoped to one contract."""


__all__ = ["LoanUnitOfWork", "LoanStorePort"]
