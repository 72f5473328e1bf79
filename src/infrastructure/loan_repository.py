"""SQLAlchemy-backed store for loan contracts and payments."""

from collections import defaultdict
from collections.abc import Iterable
from contextlib import contextmanager
from datetime import date, datetime

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Connection

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.loan_store import LoanStorePort, LoanUnitOfWork
from src.domain.constants import COMPLETED, PENDING
from src.domain.models import (
    LoanContract,
    LoanPayment,
    NewLoanPayment,
    NewTransaction,
)
from src.infrastructure.ledger_repository import insert_transaction
from src.infrastructure.row_utils import (
    from_db_amount,
    from_db_date,
    from_db_datetime,
    new_id,
    to_db_amount,
    to_db_date,
    to_db_datetime,
)


CONTRACT_COLUMNS = """
    id, user_id, account_id, currency_id, contract_name, loan_amount,
    interest_rate, total_periods, repayment_type, start_date, payment_day,
    payment_account_id, transaction_description, transaction_notes,
    is_active, current_period, next_payment_date
"""

PAYMENT_COLUMNS = """
    id, loan_contract_id, user_id, period, payment_date, principal_amount,
    interest_amount, total_amount, remaining_balance, status,
    principal_transaction_id, interest_transaction_id,
    balance_transaction_id, processed_at
"""

SELECT_USER_CONTRACTS_SQL = text(
    f"""
    SELECT {CONTRACT_COLUMNS}
    FROM loan_contracts
    WHERE user_id = :user_id
    ORDER BY contract_name, id
    """
)

SELECT_CONTRACT_SQL = text(
    f"""
    SELECT {CONTRACT_COLUMNS}
    FROM loan_contracts
    WHERE id = :contract_id
    """
)

SELECT_PAYMENTS_SQL = text(
    f"""
    SELECT {PAYMENT_COLUMNS}
    FROM loan_payments
    WHERE loan_contract_id = :contract_id
    ORDER BY period
    """
)

SELECT_DUE_PAYMENTS_SQL = text(
    f"""
    SELECT {PAYMENT_COLUMNS}
    FROM loan_payments
    WHERE loan_contract_id = :contract_id
      AND status = :status
      AND payment_date <= :horizon
    ORDER BY period
    """
)

SELECT_PAYMENT_STATUSES_SQL = text(
    """
    SELECT id, status
    FROM loan_payments
    WHERE id IN :payment_ids
    """
).bindparams(bindparam("payment_ids", expanding=True))

SELECT_LINKED_TRANSACTIONS_SQL = text(
    """
    SELECT id, loan_payment_id, generated_role
    FROM transactions
    WHERE loan_payment_id IN :payment_ids
    """
).bindparams(bindparam("payment_ids", expanding=True))

DELETE_TRANSACTIONS_SQL = text(
    "DELETE FROM transactions WHERE id IN :transaction_ids"
).bindparams(bindparam("transaction_ids", expanding=True))

COMPLETE_PAYMENT_SQL = text(
    """
    UPDATE loan_payments
    SET status = :status,
        principal_transaction_id = :principal_transaction_id,
        interest_transaction_id = :interest_transaction_id,
        balance_transaction_id = :balance_transaction_id,
        processed_at = :processed_at
    WHERE id = :payment_id
    """
)

RESET_PAYMENT_SQL = text(
    """
    UPDATE loan_payments
    SET status = :status,
        principal_transaction_id = NULL,
        interest_transaction_id = NULL,
        balance_transaction_id = NULL,
        processed_at = NULL
    WHERE id = :payment_id
    """
)

INSERT_CONTRACT_SQL = text(
    """
    INSERT INTO loan_contracts (
        id, user_id, account_id, currency_id, contract_name, loan_amount,
        interest_rate, total_periods, repayment_type, start_date,
        payment_day, payment_account_id, transaction_description,
        transaction_notes, is_active, current_period, next_payment_date
    )
    VALUES (
        :id, :user_id, :account_id, :currency_id, :contract_name,
        :loan_amount, :interest_rate, :total_periods, :repayment_type,
        :start_date, :payment_day, :payment_account_id,
        :transaction_description, :transaction_notes, :is_active,
        :current_period, :next_payment_date
    )
    """
)

UPDATE_CONTRACT_SQL = text(
    """
    UPDATE loan_contracts
    SET account_id = :account_id,
        currency_id = :currency_id,
        contract_name = :contract_name,
        loan_amount = :loan_amount,
        interest_rate = :interest_rate,
        total_periods = :total_periods,
        repayment_type = :repayment_type,
        start_date = :start_date,
        payment_day = :payment_day,
        payment_account_id = :payment_account_id,
        transaction_description = :transaction_description,
        transaction_notes = :transaction_notes,
        is_active = :is_active,
        current_period = :current_period,
        next_payment_date = :next_payment_date
    WHERE id = :id
    """
)

INSERT_PAYMENT_SQL = text(
    """
    INSERT INTO loan_payments (
        id, loan_contract_id, user_id, period, payment_date,
        principal_amount, interest_amount, total_amount, remaining_balance,
        status
    )
    VALUES (
        :id, :loan_contract_id, :user_id, :period, :payment_date,
        :principal_amount, :interest_amount, :total_amount,
        :remaining_balance, :status
    )
    """
)

DELETE_PENDING_PAYMENTS_SQL = text(
    """
    DELETE FROM loan_payments
    WHERE loan_contract_id = :contract_id AND status = :status
    """
)

UPDATE_CURSOR_SQL = text(
    """
    UPDATE loan_contracts
    SET current_period = :current_period,
        next_payment_date = :next_payment_date,
        is_active = :is_active
    WHERE id = :contract_id
    """
)


def _row_to_contract(row) -> LoanContract:
    return LoanContract(
        id=row.id,
        user_id=row.user_id,
        account_id=row.account_id,
        currency_id=row.currency_id,
        contract_name=row.contract_name,
        loan_amount=from_db_amount(row.loan_amount),
        interest_rate=from_db_amount(row.interest_rate),
        total_periods=row.total_periods,
        repayment_type=row.repayment_type,
        start_date=from_db_date(row.start_date),
        payment_day=row.payment_day,
        payment_account_id=row.payment_account_id,
        transaction_description=row.transaction_description,
        transaction_notes=row.transaction_notes,
        is_active=bool(row.is_active),
        current_period=row.current_period,
        next_payment_date=from_db_date(row.next_payment_date),
    )


def _row_to_payment(row) -> LoanPayment:
    return LoanPayment(
        id=row.id,
        loan_contract_id=row.loan_contract_id,
        user_id=row.user_id,
        period=row.period,
        payment_date=from_db_date(row.payment_date),
        principal_amount=from_db_amount(row.principal_amount),
        interest_amount=from_db_amount(row.interest_amount),
        total_amount=from_db_amount(row.total_amount),
        remaining_balance=from_db_amount(row.remaining_balance),
        status=row.status,
        principal_transaction_id=row.principal_transaction_id,
        interest_transaction_id=row.interest_transaction_id,
        balance_transaction_id=row.balance_transaction_id,
        processed_at=from_db_datetime(row.processed_at),
    )


def _contract_params(contract: LoanContract) -> dict:
    return {
        "id": contract.id,
        "user_id": contract.user_id,
        "account_id": contract.account_id,
        "currency_id": contract.currency_id,
        "contract_name": contract.contract_name,
        "loan_amount": to_db_amount(contract.loan_amount),
        # Rates keep their full precision.
        "interest_rate": str(contract.interest_rate),
        "total_periods": contract.total_periods,
        "repayment_type": contract.repayment_type,
        "start_date": to_db_date(contract.start_date),
        "payment_day": contract.payment_day,
        "payment_account_id": contract.payment_account_id,
        "transaction_description": contract.transaction_description,
        "transaction_notes": contract.transaction_notes,
        "is_active": contract.is_active,
        "current_period": contract.current_period,
        "next_payment_date": to_db_date(contract.next_payment_date),
    }


def _linked_transactions(
    conn: Connection,
    payment_ids: Iterable[str],
) -> dict[str, dict[str, str]]:
    ids = list(payment_ids)
    if not ids:
        return {}
    rows = conn.execute(
        SELECT_LINKED_TRANSACTIONS_SQL, {"payment_ids": ids}
    ).all()
    linked: dict[str, dict[str, str]] = defaultdict(dict)
    for row in rows:
        linked[row.loan_payment_id][row.generated_role] = row.id
    return dict(linked)


class SqlAlchemyLoanUnitOfWork(LoanUnitOfWork):
    """Contract and payment writes bound to one open database transaction."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def payment_statuses(self, payment_ids: Iterable[str]) -> dict[str, str]:
        ids = list(payment_ids)
        if not ids:
            return {}
        rows = self._conn.execute(
            SELECT_PAYMENT_STATUSES_SQL, {"payment_ids": ids}
        ).all()
        return {row.id: row.status for row in rows}

    def existing_transactions(
        self,
        payment_ids: Iterable[str],
    ) -> dict[str, dict[str, str]]:
        return _linked_transactions(self._conn, payment_ids)

    def insert_transaction(self, transaction: NewTransaction) -> str:
        return insert_transaction(self._conn, transaction)

    def delete_transactions(self, transaction_ids: Iterable[str]) -> int:
        ids = [value for value in transaction_ids if value]
        if not ids:
            return 0
        result = self._conn.execute(
            DELETE_TRANSACTIONS_SQL, {"transaction_ids": ids}
        )
        return result.rowcount

    def complete_payment(
        self,
        payment_id: str,
        principal_transaction_id: str | None,
        interest_transaction_id: str | None,
        balance_transaction_id: str | None,
        processed_at: datetime,
    ) -> None:
        self._conn.execute(
            COMPLETE_PAYMENT_SQL,
            {
                "payment_id": payment_id,
                "status": COMPLETED,
                "principal_transaction_id": principal_transaction_id,
                "interest_transaction_id": interest_transaction_id,
                "balance_transaction_id": balance_transaction_id,
                "processed_at": to_db_datetime(processed_at),
            },
        )

    def reset_payment(self, payment_id: str) -> None:
        self._conn.execute(
            RESET_PAYMENT_SQL, {"payment_id": payment_id, "status": PENDING}
        )

    def insert_contract(self, contract: LoanContract) -> None:
        self._conn.execute(INSERT_CONTRACT_SQL, _contract_params(contract))

    def update_contract(self, contract: LoanContract) -> None:
        self._conn.execute(UPDATE_CONTRACT_SQL, _contract_params(contract))

    def insert_payments(self, payments: Iterable[NewLoanPayment]) -> int:
        rows = [
            {
                "id": new_id(),
                "loan_contract_id": payment.loan_contract_id,
                "user_id": payment.user_id,
                "period": payment.period,
                "payment_date": to_db_date(payment.payment_date),
                "principal_amount": to_db_amount(payment.principal_amount),
                "interest_amount": to_db_amount(payment.interest_amount),
                "total_amount": to_db_amount(payment.total_amount),
                "remaining_balance": to_db_amount(payment.remaining_balance),
                "status": PENDING,
            }
            for payment in payments
        ]
        if rows:
            self._conn.execute(INSERT_PAYMENT_SQL, rows)
        return len(rows)

    def delete_pending_payments(self, contract_id: str) -> int:
        result = self._conn.execute(
            DELETE_PENDING_PAYMENTS_SQL,
            {"contract_id": contract_id, "status": PENDING},
        )
        return result.rowcount

    def save_cursor(
        self,
        contract_id: str,
        current_period: int,
        next_payment_date: date | None,
        is_active: bool,
    ) -> None:
        self._conn.execute(
            UPDATE_CURSOR_SQL,
            {
                "contract_id": contract_id,
                "current_period": current_period,
                "next_payment_date": to_db_date(next_payment_date),
                "is_active": is_active,
            },
        )


class SqlAlchemyLoanStore(LoanStorePort):
    """Store backed by SQLAlchemy for loan contracts."""

    def __init__(self, db_port: DatabaseEnginePort) -> None:
        """Initialize the store.

        Args:
            db_port: Port providing access to the ledger engine.
        """
        self._db_port = db_port

    def fetch_contracts(self, user_id: str) -> list[LoanContract]:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            rows = conn.execute(
                SELECT_USER_CONTRACTS_SQL, {"user_id": user_id}
            ).all()
        return [_row_to_contract(row) for row in rows]

    def fetch_contract(self, contract_id: str) -> LoanContract | None:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            row = conn.execute(
                SELECT_CONTRACT_SQL, {"contract_id": contract_id}
            ).first()
        return _row_to_contract(row) if row else None

    def fetch_payments(self, contract_id: str) -> list[LoanPayment]:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            rows = conn.execute(
                SELECT_PAYMENTS_SQL, {"contract_id": contract_id}
            ).all()
        return [_row_to_payment(row) for row in rows]

    def fetch_due_payments(
        self,
        contract_id: str,
        horizon: date,
    ) -> list[LoanPayment]:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            rows = conn.execute(
                SELECT_DUE_PAYMENTS_SQL,
                {
                    "contract_id": contract_id,
                    "status": PENDING,
                    "horizon": to_db_date(horizon),
                },
            ).all()
        return [_row_to_payment(row) for row in rows]

    def existing_transactions(
        self,
        payment_ids: Iterable[str],
    ) -> dict[str, dict[str, str]]:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            return _linked_transactions(conn, payment_ids)

    @contextmanager
    def begin(self):
        """Yield a unit of work committed when the block exits cleanly."""
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            yield SqlAlchemyLoanUnitOfWork(conn)


__all__ = ["SqlAlchemyLoanStore", "SqlAlchemyLoanUnitOfWork"]
