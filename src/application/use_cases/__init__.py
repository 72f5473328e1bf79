"""Application use cases package."""

from .batch_materializer import BatchMaterializer, resolve_horizon
from .get_account_balance import GetAccountBalanceUseCase
from .get_net_worth_summary import GetNetWorthSummaryUseCase
from .get_total_balance import GetTotalBalanceUseCase
from .manage_loan_contracts import LoanContractService
from .manage_recurring import RecurringTransactionService
from .run_ledger_sync import RunLedgerSyncUseCase
from .run_loan_batch import LoanRecipeKind, RunLoanBatchUseCase
from .run_recurring_batch import RecurringRecipeKind, RunRecurringBatchUseCase

__all__ = [
    "BatchMaterializer",
    "resolve_horizon",
    "GetAccountBalanceUseCase",
    "GetNetWorthSummaryUseCase",
    "GetTotalBalanceUseCase",
    "LoanContractService",
    "RecurringTransactionService",
    "RunLedgerSyncUseCase",
    "LoanRecipeKind",
    "RunLoanBatchUseCase",
    "RecurringRecipeKind",
    "RunRecurringBatchUseCase",
]
