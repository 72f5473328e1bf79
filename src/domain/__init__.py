"""Domain package for ledger rules and core models."""

from .errors import (
    ConcurrencyConflictError,
    LedgerError,
    NotFoundError,
    ValidationError,
)
from .models import (
    Account,
    BatchResult,
    LoanContract,
    LoanPayment,
    NetWorthSummary,
    RecurringTransaction,
    TotalBalance,
    Transaction,
)
from .services import (
    calculate_schedule,
    compute_account_balance,
    next_date,
    normalize_date,
)

__all__ = [
    "LedgerError",
    "ValidationError",
    "ConcurrencyConflictError",
    "NotFoundError",
    "Account",
    "BatchResult",
    "LoanContract",
    "LoanPayment",
    "NetWorthSummary",
    "RecurringTransaction",
    "TotalBalance",
    "Transaction",
    "calculate_schedule",
    "compute_account_balance",
    "next_date",
    "normalize_date",
]
