"""Domain constants for the ledger core."""

from typing import Literal

# Transaction types.
INCOME = "INCOME"
EXPENSE = "EXPENSE"
BALANCE = "BALANCE"
TRANSACTION_TYPES = (INCOME, EXPENSE, BALANCE)

# Category types.
ASSET = "ASSET"
LIABILITY = "LIABILITY"
STOCK_ACCOUNT_TYPES = (ASSET, LIABILITY)
FLOW_ACCOUNT_TYPES = (INCOME, EXPENSE)
ACCOUNT_TYPES = STOCK_ACCOUNT_TYPES + FLOW_ACCOUNT_TYPES

# Recurrence frequencies.
DAILY = "DAILY"
WEEKLY = "WEEKLY"
MONTHLY = "MONTHLY"
QUARTERLY = "QUARTERLY"
YEARLY = "YEARLY"
FREQUENCIES = (DAILY, WEEKLY, MONTHLY, QUARTERLY, YEARLY)

# Loan repayment types.
EQUAL_PAYMENT = "EQUAL_PAYMENT"
EQUAL_PRINCIPAL = "EQUAL_PRINCIPAL"
INTEREST_ONLY = "INTEREST_ONLY"
REPAYMENT_TYPES = (EQUAL_PAYMENT, EQUAL_PRINCIPAL, INTEREST_ONLY)

# Loan payment statuses. FAILED is reserved; the batch path never sets it.
PENDING = "PENDING"
COMPLETED = "COMPLETED"
FAILED = "FAILED"

# Roles of generated transactions, part of the idempotency key.
ROLE_OCCURRENCE = "OCCURRENCE"
ROLE_PRINCIPAL = "PRINCIPAL"
ROLE_INTEREST = "INTEREST"
ROLE_BALANCE = "BALANCE"

# Per-occurrence batch outcomes.
OUTCOME_MATERIALIZED = "materialized"
OUTCOME_SKIPPED_EXISTING = "skipped_existing"
OUTCOME_SKIPPED_LIMIT = "skipped_limit"

# Orchestrator run statuses.
SYNC_IDLE = "idle"
SYNC_PROCESSING = "processing"
SYNC_COMPLETED = "completed"
SYNC_FAILED = "failed"
SYNC_ALREADY_SYNCED = "already_synced"

MAX_LOAN_PERIODS = 600

TransactionType = Literal["INCOME", "EXPENSE", "BALANCE"]
AccountType = Literal["ASSET", "LIABILITY", "INCOME", "EXPENSE"]
Frequency = Literal["DAILY", "WEEKLY", "MONTHLY", "QUARTERLY", "YEARLY"]
RepaymentType = Literal["EQUAL_PAYMENT", "EQUAL_PRINCIPAL", "INTEREST_ONLY"]
PaymentStatus = Literal["PENDING", "COMPLETED", "FAILED"]
SyncStatus = Literal[
    "idle", "processing", "completed", "failed", "already_synced"
]


__all__ = [
    "INCOME",
    "EXPENSE",
    "BALANCE",
    "TRANSACTION_TYPES",
    "ASSET",
    "LIABILITY",
    "STOCK_ACCOUNT_TYPES",
    "FLOW_ACCOUNT_TYPES",
    "ACCOUNT_TYPES",
    "DAILY",
    "WEEKLY",
    "MONTHLY",
    "QUARTERLY",
    "YEARLY",
    "FREQUENCIES",
    "EQUAL_PAYMENT",
    "EQUAL_PRINCIPAL",
    "INTEREST_ONLY",
    "REPAYMENT_TYPES",
    "PENDING",
    "COMPLETED",
    "FAILED",
    "ROLE_OCCURRENCE",
    "ROLE_PRINCIPAL",
    "ROLE_INTEREST",
    "ROLE_BALANCE",
    "OUTCOME_MATERIALIZED",
    "OUTCOME_SKIPPED_EXISTING",
    "OUTCOME_SKIPPED_LIMIT",
    "SYNC_IDLE",
    "SYNC_PROCESSING",
    "SYNC_COMPLETED",
    "SYNC_FAILED",
    "SYNC_ALREADY_SYNCED",
    "MAX_LOAN_PERIODS",
    "TransactionType",
    "AccountType",
    "Frequency",
    "RepaymentType",
    "PaymentStatus",
    "SyncStatus",
]
