"""Shared fixtures for tests backed by a file-based SQLite ledger."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine

from src.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from src.infrastructure.ledger_repository import SqlAlchemyLedgerRepository
from src.infrastructure.loan_repository import SqlAlchemyLoanStore
from src.infrastructure.recurring_repository import SqlAlchemyRecurringStore
from src.infrastructure.schema import ensure_schema
from src.infrastructure.sync_status_repository import (
    SqlAlchemySyncStatusRepository,
)


@pytest.fixture
def ledger_db(tmp_path):
    """Create a ledger database with one user's accounts in USD."""
    engine = create_engine(f"sqlite:///{tmp_path}/ledger.db")
    ensure_schema(engine, logger=MagicMock())
    db_port = SqlAlchemyDatabaseEngineAdapter(engine)
    ledger = SqlAlchemyLedgerRepository(db_port)
    usd = ledger.add_currency("USD")
    eur = ledger.add_currency("EUR")
    db = SimpleNamespace(
        engine=engine,
        db_port=db_port,
        ledger=ledger,
        recurring_store=SqlAlchemyRecurringStore(db_port),
        loan_store=SqlAlchemyLoanStore(db_port),
        sync_status=SqlAlchemySyncStatusRepository(db_port),
        usd=usd,
        eur=eur,
        checking=ledger.add_account("user-1", "Checking", "ASSET", usd),
        salary=ledger.add_account("user-1", "Salary", "INCOME", usd),
        rent=ledger.add_account("user-1", "Rent", "EXPENSE", usd),
        mortgage=ledger.add_account("user-1", "Mortgage", "LIABILITY", usd),
        euro_savings=ledger.add_account("user-1", "Savings EUR", "ASSET", eur),
    )
    yield db
    engine.dispose()
