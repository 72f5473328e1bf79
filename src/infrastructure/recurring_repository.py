"""SQLAlchemy-backed store for recurring transaction recipes."""

from collections.abc import Iterable
from contextlib import contextmanager
from datetime import date

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Connection

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.recurring_store import (
    RecurringStorePort,
    RecurringUnitOfWork,
)
from src.domain.constants import ROLE_OCCURRENCE
from src.domain.models import (
    NewTransaction,
    RecurrenceSpec,
    RecurringTransaction,
)
from src.infrastructure.ledger_repository import insert_transaction
from src.infrastructure.row_utils import (
    from_db_amount,
    from_db_date,
    to_db_amount,
    to_db_date,
)


RECIPE_COLUMNS = """
    id, user_id, account_id, currency_id, type, amount, description, notes,
    frequency, interval_count, day_of_month, day_of_week, month_of_year,
    start_date, end_date, max_occurrences, current_count, next_date,
    is_active
"""

SELECT_DUE_RECIPES_SQL = text(
    f"""
    SELECT {RECIPE_COLUMNS}
    FROM recurring_transactions
    WHERE user_id = :user_id
      AND is_active = :active
      AND next_date <= :horizon
    ORDER BY next_date, id
    """
)

SELECT_RECIPE_SQL = text(
    f"""
    SELECT {RECIPE_COLUMNS}
    FROM recurring_transactions
    WHERE id = :recipe_id
    """
)

SELECT_EXISTING_DATES_SQL = text(
    """
    SELECT date
    FROM transactions
    WHERE recurring_transaction_id = :recipe_id
      AND generated_role = :role
      AND date IN :dates
    """
).bindparams(bindparam("dates", expanding=True))

INSERT_RECIPE_SQL = text(
    """
    INSERT INTO recurring_transactions (
        id, user_id, account_id, currency_id, type, amount, description,
        notes, frequency, interval_count, day_of_month, day_of_week,
        month_of_year, start_date, end_date, max_occurrences, current_count,
        next_date, is_active
    )
    VALUES (
        :id, :user_id, :account_id, :currency_id, :type, :amount,
        :description, :notes, :frequency, :interval_count, :day_of_month,
        :day_of_week, :month_of_year, :start_date, :end_date,
        :max_occurrences, :current_count, :next_date, :is_active
    )
    """
)

UPDATE_RECIPE_SQL = text(
    """
    UPDATE recurring_transactions
    SET account_id = :account_id,
        currency_id = :currency_id,
        type = :type,
        amount = :amount,
        description = :description,
        notes = :notes,
        frequency = :frequency,
        interval_count = :interval_count,
        day_of_month = :day_of_month,
        day_of_week = :day_of_week,
        month_of_year = :month_of_year,
        start_date = :start_date,
        end_date = :end_date,
        max_occurrences = :max_occurrences,
        current_count = :current_count,
        next_date = :next_date,
        is_active = :is_active
    WHERE id = :id
    """
)

UPDATE_CURSOR_SQL = text(
    """
    UPDATE recurring_transactions
    SET current_count = :current_count,
        next_date = :next_date,
        is_active = :is_active
    WHERE id = :recipe_id
    """
)


def _row_to_recipe(row) -> RecurringTransaction:
    return RecurringTransaction(
        id=row.id,
        user_id=row.user_id,
        account_id=row.account_id,
        currency_id=row.currency_id,
        type=row.type,
        amount=from_db_amount(row.amount),
        description=row.description,
        notes=row.notes,
        spec=RecurrenceSpec(
            frequency=row.frequency,
            interval=row.interval_count,
            day_of_month=row.day_of_month,
            day_of_week=row.day_of_week,
            month_of_year=row.month_of_year,
        ),
        start_date=from_db_date(row.start_date),
        end_date=from_db_date(row.end_date),
        max_occurrences=row.max_occurrences,
        current_count=row.current_count,
        next_date=from_db_date(row.next_date),
        is_active=bool(row.is_active),
    )


def _recipe_params(recipe: RecurringTransaction) -> dict:
    return {
        "id": recipe.id,
        "user_id": recipe.user_id,
        "account_id": recipe.account_id,
        "currency_id": recipe.currency_id,
        "type": recipe.type,
        "amount": to_db_amount(recipe.amount),
        "description": recipe.description,
        "notes": recipe.notes,
        "frequency": recipe.spec.frequency,
        "interval_count": recipe.spec.interval,
        "day_of_month": recipe.spec.day_of_month,
        "day_of_week": recipe.spec.day_of_week,
        "month_of_year": recipe.spec.month_of_year,
        "start_date": to_db_date(recipe.start_date),
        "end_date": to_db_date(recipe.end_date),
        "max_occurrences": recipe.max_occurrences,
        "current_count": recipe.current_count,
        "next_date": to_db_date(recipe.next_date),
        "is_active": recipe.is_active,
    }


def _existing_dates(
    conn: Connection,
    recipe_id: str,
    dates: Iterable[date],
) -> set[date]:
    iso_dates = sorted({to_db_date(value) for value in dates})
    if not iso_dates:
        return set()
    rows = conn.execute(
        SELECT_EXISTING_DATES_SQL,
        {"recipe_id": recipe_id, "role": ROLE_OCCURRENCE, "dates": iso_dates},
    ).all()
    return {from_db_date(row.date) for row in rows}


class SqlAlchemyRecurringUnitOfWork(RecurringUnitOfWork):
    """Recipe writes bound to one open database transaction."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def existing_dates(
        self,
        recipe_id: str,
        dates: Iterable[date],
    ) -> set[date]:
        return _existing_dates(self._conn, recipe_id, dates)

    def insert_transaction(self, transaction: NewTransaction) -> str:
        return insert_transaction(self._conn, transaction)

    def save_cursor(
        self,
        recipe_id: str,
        current_count: int,
        next_date: date,
        is_active: bool,
    ) -> None:
        self._conn.execute(
            UPDATE_CURSOR_SQL,
            {
                "recipe_id": recipe_id,
                "current_count": current_count,
                "next_date": to_db_date(next_date),
                "is_active": is_active,
            },
        )


class SqlAlchemyRecurringStore(RecurringStorePort):
    """Store backed by SQLAlchemy for recurring recipes."""

    def __init__(self, db_port: DatabaseEnginePort) -> None:
        """Initialize the store.

        Args:
            db_port: Port providing access to the ledger engine.
        """
        self._db_port = db_port

    def fetch_due_recipes(
        self,
        user_id: str,
        horizon: date,
    ) -> list[RecurringTransaction]:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            rows = conn.execute(
                SELECT_DUE_RECIPES_SQL,
                {
                    "user_id": user_id,
                    "active": True,
                    "horizon": to_db_date(horizon),
                },
            ).all()
        return [_row_to_recipe(row) for row in rows]

    def fetch_recipe(self, recipe_id: str) -> RecurringTransaction | None:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            row = conn.execute(
                SELECT_RECIPE_SQL, {"recipe_id": recipe_id}
            ).first()
        return _row_to_recipe(row) if row else None

    def existing_dates(
        self,
        recipe_id: str,
        dates: Iterable[date],
    ) -> set[date]:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            return _existing_dates(conn, recipe_id, dates)

    def insert_recipe(self, recipe: RecurringTransaction) -> None:
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            conn.execute(INSERT_RECIPE_SQL, _recipe_params(recipe))

    def update_recipe(self, recipe: RecurringTransaction) -> None:
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            conn.execute(UPDATE_RECIPE_SQL, _recipe_params(recipe))

    @contextmanager
    def begin(self):
        """Yield a unit of work committed when the block exits cleanly."""
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            yield SqlAlchemyRecurringUnitOfWork(conn)


__all__ = ["SqlAlchemyRecurringStore", "SqlAlchemyRecurringUnitOfWork"]
