"""SQLAlchemy-backed repository for accounts, currencies, and transactions."""

from collections.abc import Iterable

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Connection

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.domain.models import Account, NewTransaction, Transaction
from src.domain.services.normalization import normalize_currency_code
from src.infrastructure.row_utils import (
    from_db_amount,
    from_db_date,
    from_db_datetime,
    new_id,
    to_db_amount,
    to_db_date,
    to_db_datetime,
    utc_now,
)


SELECT_ACCOUNT_SQL = text(
    """
    SELECT id, user_id, name, category_type, currency_id
    FROM accounts
    WHERE id = :account_id
    """
)

SELECT_USER_ACCOUNTS_SQL = text(
    """
    SELECT id, user_id, name, category_type, currency_id
    FROM accounts
    WHERE user_id = :user_id
    ORDER BY name, id
    """
)

SELECT_TRANSACTIONS_SQL = text(
    """
    SELECT t.id, t.user_id, t.account_id, t.currency_id,
           c.code AS currency_code, t.type, t.amount, t.date,
           t.description, t.notes, t.recurring_transaction_id,
           t.loan_contract_id, t.loan_payment_id, t.generated_role,
           t.updated_at
    FROM transactions t
    LEFT JOIN currencies c ON c.id = t.currency_id
    WHERE t.account_id IN :account_ids
    ORDER BY t.date, t.updated_at, t.id
    """
).bindparams(bindparam("account_ids", expanding=True))

SELECT_CURRENCY_ID_SQL = text(
    "SELECT id FROM currencies WHERE code = :code"
)

SELECT_CURRENCY_CODE_SQL = text(
    "SELECT code FROM currencies WHERE id = :currency_id"
)

INSERT_CURRENCY_SQL = text(
    "INSERT INTO currencies (id, code) VALUES (:id, :code)"
)

INSERT_ACCOUNT_SQL = text(
    """
    INSERT INTO accounts (id, user_id, name, category_type, currency_id)
    VALUES (:id, :user_id, :name, :category_type, :currency_id)
    """
)

INSERT_TRANSACTION_SQL = text(
    """
    INSERT INTO transactions (
        id, user_id, account_id, currency_id, type, amount, date,
        description, notes, recurring_transaction_id, loan_contract_id,
        loan_payment_id, generated_role, created_at, updated_at
    )
    VALUES (
        :id, :user_id, :account_id, :currency_id, :type, :amount, :date,
        :description, :notes, :recurring_transaction_id, :loan_contract_id,
        :loan_payment_id, :generated_role, :created_at, :updated_at
    )
    """
)


def insert_transaction(conn: Connection, transaction: NewTransaction) -> str:
    """Insert one transaction on an open connection.

    Args:
        conn: Connection inside the caller's database transaction.
        transaction: Transaction to insert.

    Returns:
        str: Identifier of the inserted row.
    """
    transaction_id = new_id()
    stamp = to_db_datetime(utc_now())
    conn.execute(
        INSERT_TRANSACTION_SQL,
        {
            "id": transaction_id,
            "user_id": transaction.user_id,
            "account_id": transaction.account_id,
            "currency_id": transaction.currency_id,
            "type": transaction.type,
            "amount": to_db_amount(transaction.amount),
            "date": to_db_date(transaction.date),
            "description": transaction.description,
            "notes": transaction.notes,
            "recurring_transaction_id": transaction.recurring_transaction_id,
            "loan_contract_id": transaction.loan_contract_id,
            "loan_payment_id": transaction.loan_payment_id,
            "generated_role": transaction.generated_role,
            "created_at": stamp,
            "updated_at": stamp,
        },
    )
    return transaction_id


def _row_to_account(row) -> Account:
    return Account(
        id=row.id,
        name=row.name,
        category_type=row.category_type,
        currency_id=row.currency_id,
        user_id=row.user_id,
    )


class SqlAlchemyLedgerRepository(LedgerRepositoryPort):
    """Repository backed by SQLAlchemy for the transaction log."""

    def __init__(self, db_port: DatabaseEnginePort) -> None:
        """Initialize the repository.

        Args:
            db_port: Port providing access to the ledger engine.
        """
        self._db_port = db_port

    def fetch_account(self, account_id: str) -> Account | None:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            row = conn.execute(
                SELECT_ACCOUNT_SQL, {"account_id": account_id}
            ).first()
        return _row_to_account(row) if row else None

    def fetch_accounts(self, user_id: str) -> list[Account]:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            rows = conn.execute(
                SELECT_USER_ACCOUNTS_SQL, {"user_id": user_id}
            ).all()
        return [_row_to_account(row) for row in rows]

    def fetch_transactions(
        self,
        account_ids: Iterable[str],
    ) -> list[Transaction]:
        """Return the transactions of the given accounts.

        Stored values are parsed leniently: an unreadable amount or date is
        passed on as None so the balance engine can report and skip it.
        """
        ids = list(account_ids)
        if not ids:
            return []
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            rows = conn.execute(
                SELECT_TRANSACTIONS_SQL, {"account_ids": ids}
            ).all()
        return [
            Transaction(
                id=row.id,
                account_id=row.account_id,
                currency_code=row.currency_code,
                type=row.type,
                amount=from_db_amount(row.amount),
                date=from_db_date(row.date),
                currency_id=row.currency_id,
                user_id=row.user_id,
                description=row.description or "",
                notes=row.notes,
                recurring_transaction_id=row.recurring_transaction_id,
                loan_contract_id=row.loan_contract_id,
                loan_payment_id=row.loan_payment_id,
                generated_role=row.generated_role,
                updated_at=from_db_datetime(row.updated_at),
            )
            for row in rows
        ]

    def fetch_currency_id(self, code: str) -> str | None:
        normalized = normalize_currency_code(code)
        if normalized is None:
            return None
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            row = conn.execute(
                SELECT_CURRENCY_ID_SQL, {"code": normalized}
            ).first()
        return row.id if row else None

    def fetch_currency_code(self, currency_id: str) -> str | None:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            row = conn.execute(
                SELECT_CURRENCY_CODE_SQL, {"currency_id": currency_id}
            ).first()
        return row.code if row else None

    def add_currency(self, code: str) -> str:
        normalized = normalize_currency_code(code)
        if normalized is None:
            raise ValueError("Currency code is required")
        currency_id = new_id()
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            conn.execute(
                INSERT_CURRENCY_SQL, {"id": currency_id, "code": normalized}
            )
        return currency_id

    def add_account(
        self,
        user_id: str,
        name: str,
        category_type: str,
        currency_id: str | None = None,
    ) -> str:
        account_id = new_id()
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            conn.execute(
                INSERT_ACCOUNT_SQL,
                {
                    "id": account_id,
                    "user_id": user_id,
                    "name": name,
                    "category_type": category_type,
                    "currency_id": currency_id,
                },
            )
        return account_id

    def add_transaction(self, transaction: NewTransaction) -> str:
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            return insert_transaction(conn, transaction)


__all__ = [
    "SqlAlchemyLedgerRepository",
    "insert_transaction",
    "INSERT_TRANSACTION_SQL",
]
