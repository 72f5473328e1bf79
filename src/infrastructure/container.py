"""Composition root for wiring infrastructure adapters."""

from src.application.ports.currency import CurrencyConverterPort
from src.application.ports.database import DatabaseEnginePort
from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.application.ports.loan_store import LoanStorePort
from src.application.ports.recurring_store import RecurringStorePort
from src.application.ports.sync_status import SyncStatusPort
from src.application.use_cases.run_ledger_sync import RunLedgerSyncUseCase
from src.application.use_cases.run_loan_batch import RunLoanBatchUseCase
from src.application.use_cases.run_recurring_batch import (
    RunRecurringBatchUseCase,
)
from src.infrastructure.currency_converter import SqlAlchemyRateTableConverter
from src.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from src.infrastructure.ledger_repository import SqlAlchemyLedgerRepository
from src.infrastructure.loan_repository import SqlAlchemyLoanStore
from src.infrastructure.logging.logger import get_app_logger
from src.infrastructure.recurring_repository import SqlAlchemyRecurringStore
from src.infrastructure.settings import LedgerSettings
from src.infrastructure.sync_status_repository import (
    SqlAlchemySyncStatusRepository,
)
from src.infrastructure.translation import CatalogTranslator


def build_database_adapter() -> DatabaseEnginePort:
    """Return the database adapter instance."""
    return SqlAlchemyDatabaseEngineAdapter()


def build_ledger_repository(
    db_port: DatabaseEnginePort | None = None,
) -> LedgerRepositoryPort:
    """Return the transaction log repository."""
    resolved_db = db_port or build_database_adapter()
    return SqlAlchemyLedgerRepository(resolved_db)


def build_recurring_store(
    db_port: DatabaseEnginePort | None = None,
) -> RecurringStorePort:
    """Return the recurring recipe store."""
    resolved_db = db_port or build_database_adapter()
    return SqlAlchemyRecurringStore(resolved_db)


def build_loan_store(
    db_port: DatabaseEnginePort | None = None,
) -> LoanStorePort:
    """Return the loan contract store."""
    resolved_db = db_port or build_database_adapter()
    return SqlAlchemyLoanStore(resolved_db)


def build_sync_status_repository(
    db_port: DatabaseEnginePort | None = None,
) -> SyncStatusPort:
    """Return the sync status repository."""
    resolved_db = db_port or build_database_adapter()
    return SqlAlchemySyncStatusRepository(resolved_db)


def build_currency_converter(
    db_port: DatabaseEnginePort | None = None,
) -> CurrencyConverterPort:
    """Return the rate-table currency converter."""
    resolved_db = db_port or build_database_adapter()
    return SqlAlchemyRateTableConverter(resolved_db, logger=get_app_logger())


def build_recurring_batch(
    db_port: DatabaseEnginePort | None = None,
    settings: LedgerSettings | None = None,
) -> RunRecurringBatchUseCase:
    """Return the recurring transactions batch."""
    resolved_db = db_port or build_database_adapter()
    resolved_settings = settings or LedgerSettings.from_env()
    return RunRecurringBatchUseCase(
        store=build_recurring_store(resolved_db),
        sync_status=build_sync_status_repository(resolved_db),
        future_data_days=resolved_settings.future_data_days,
        logger=get_app_logger(),
    )


def build_loan_batch(
    db_port: DatabaseEnginePort | None = None,
    settings: LedgerSettings | None = None,
) -> RunLoanBatchUseCase:
    """Return the loan payments batch."""
    resolved_db = db_port or build_database_adapter()
    resolved_settings = settings or LedgerSettings.from_env()
    return RunLoanBatchUseCase(
        store=build_loan_store(resolved_db),
        translator=CatalogTranslator(),
        sync_status=build_sync_status_repository(resolved_db),
        future_data_days=resolved_settings.future_data_days,
        logger=get_app_logger(),
    )


def build_ledger_sync(
    db_port: DatabaseEnginePort | None = None,
    settings: LedgerSettings | None = None,
) -> RunLedgerSyncUseCase:
    """Return the orchestrator wired to both batches."""
    resolved_db = db_port or build_database_adapter()
    resolved_settings = settings or LedgerSettings.from_env()
    return RunLedgerSyncUseCase(
        recurring_batch=build_recurring_batch(resolved_db, resolved_settings),
        loan_batch=build_loan_batch(resolved_db, resolved_settings),
        sync_status=build_sync_status_repository(resolved_db),
        sync_interval_hours=resolved_settings.sync_interval_hours,
        batch_timeout_seconds=resolved_settings.batch_timeout_seconds,
        logger=get_app_logger(),
    )


__all__ = [
    "build_database_adapter",
    "build_ledger_repository",
    "build_recurring_store",
    "build_loan_store",
    "build_sync_status_repository",
    "build_currency_converter",
    "build_recurring_batch",
    "build_loan_batch",
    "build_ledger_sync",
]
