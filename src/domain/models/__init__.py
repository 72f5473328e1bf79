"""Domain models package."""

from .batch import BatchResult, IdempotencyKey, Occurrence, RecipePlan
from .finance import NetWorthSummary
from .ledger import (
    Account,
    ConversionResult,
    NewTransaction,
    TotalBalance,
    Transaction,
)
from .loans import (
    LoanCalculation,
    LoanContract,
    LoanContractData,
    LoanPayment,
    NewLoanPayment,
    ResetPaymentsResult,
    ScheduledPayment,
)
from .recipes import (
    RecurrenceSpec,
    RecurringTransaction,
    RecurringTransactionData,
)
from .sync import SyncRunResult, UserSyncState

__all__ = [
    "Account",
    "Transaction",
    "NewTransaction",
    "ConversionResult",
    "TotalBalance",
    "NetWorthSummary",
    "RecurrenceSpec",
    "RecurringTransaction",
    "RecurringTransactionData",
    "ScheduledPayment",
    "LoanCalculation",
    "LoanContract",
    "LoanPayment",
    "NewLoanPayment",
    "LoanContractData",
    "ResetPaymentsResult",
    "IdempotencyKey",
    "Occurrence",
    "RecipePlan",
    "BatchResult",
    "UserSyncState",
    "SyncRunResult",
]
