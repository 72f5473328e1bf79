"""Application ports package."""

from .currency import CurrencyConverterPort
from .database import DatabaseEnginePort
from .ledger_repository import LedgerRepositoryPort
from .loan_store import LoanStorePort, LoanUnitOfWork
from .recipes import RecipeKind
from .recurring_store import RecurringStorePort, RecurringUnitOfWork
from .sync_status import SyncStatusPort
from .translation import TranslatorPort

__all__ = [
    "CurrencyConverterPort",
    "DatabaseEnginePort",
    "LedgerRepositoryPort",
    "LoanStorePort",
    "LoanUnitOfWork",
    "RecipeKind",
    "RecurringStorePort",
    "RecurringUnitOfWork",
    "SyncStatusPort",
    "TranslatorPort",
]
