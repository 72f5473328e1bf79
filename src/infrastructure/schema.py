"""DDL for the ledger tables.

The unique constraints on generated transactions and loan payments are what
ultimately keeps concurrent batch runs from duplicating entries; the
application-level checks only turn most collisions into clean skips.
"""

from sqlalchemy.engine import Engine

from src.infrastructure.logging.logger import get_app_logger


CREATE_CURRENCIES_SQL = """
CREATE TABLE IF NOT EXISTS currencies (
    id TEXT PRIMARY KEY,
    code TEXT NOT NULL UNIQUE
)
"""

CREATE_EXCHANGE_RATES_SQL = """
CREATE TABLE IF NOT EXISTS exchange_rates (
    id TEXT PRIMARY KEY,
    from_currency TEXT NOT NULL,
    to_currency TEXT NOT NULL,
    rate TEXT NOT NULL,
    effective_date TEXT NOT NULL,
    UNIQUE (from_currency, to_currency, effective_date)
)
"""

CREATE_ACCOUNTS_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL,
    category_type TEXT,
    currency_id TEXT REFERENCES currencies (id)
)
"""

CREATE_RECURRING_SQL = """
CREATE TABLE IF NOT EXISTS recurring_transactions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    account_id TEXT NOT NULL REFERENCES accounts (id),
    currency_id TEXT NOT NULL REFERENCES currencies (id),
    type TEXT NOT NULL,
    amount TEXT NOT NULL,
    description TEXT NOT NULL,
    notes TEXT,
    frequency TEXT NOT NULL,
    interval_count INTEGER NOT NULL DEFAULT 1,
    day_of_month INTEGER,
    day_of_week INTEGER,
    month_of_year INTEGER,
    start_date TEXT NOT NULL,
    end_date TEXT,
    max_occurrences INTEGER,
    current_count INTEGER NOT NULL DEFAULT 0,
    next_date TEXT NOT NULL,
    is_active BOOLEAN NOT NULL DEFAULT TRUE
)
"""

CREATE_LOAN_CONTRACTS_SQL = """
CREATE TABLE IF NOT EXISTS loan_contracts (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    account_id TEXT NOT NULL REFERENCES accounts (id),
    currency_id TEXT NOT NULL REFERENCES currencies (id),
    contract_name TEXT NOT NULL,
    loan_amount TEXT NOT NULL,
    interest_rate TEXT NOT NULL,
    total_periods INTEGER NOT NULL,
    repayment_type TEXT NOT NULL,
    start_date TEXT NOT NULL,
    payment_day INTEGER NOT NULL,
    payment_account_id TEXT REFERENCES accounts (id),
    transaction_description TEXT,
    transaction_notes TEXT,
    is_active BOOLEAN NOT NULL DEFAULT TRUE,
    current_period INTEGER NOT NULL DEFAULT 0,
    next_payment_date TEXT
)
"""

CREATE_LOAN_PAYMENTS_SQL = """
CREATE TABLE IF NOT EXISTS loan_payments (
    id TEXT PRIMARY KEY,
    loan_contract_id TEXT NOT NULL REFERENCES loan_contracts (id),
    user_id TEXT NOT NULL,
    period INTEGER NOT NULL,
    payment_date TEXT NOT NULL,
    principal_amount TEXT NOT NULL,
    interest_amount TEXT NOT NULL,
    total_amount TEXT NOT NULL,
    remaining_balance TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'PENDING',
    principal_transaction_id TEXT,
    interest_transaction_id TEXT,
    balance_transaction_id TEXT,
    processed_at TEXT,
    UNIQUE (loan_contract_id, period)
)
"""

CREATE_TRANSACTIONS_SQL = """
CREATE TABLE IF NOT EXISTS transactions (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    account_id TEXT NOT NULL REFERENCES accounts (id),
    currency_id TEXT NOT NULL REFERENCES currencies (id),
    type TEXT NOT NULL,
    amount TEXT NOT NULL,
    date TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    notes TEXT,
    recurring_transaction_id TEXT REFERENCES recurring_transactions (id),
    loan_contract_id TEXT REFERENCES loan_contracts (id),
    loan_payment_id TEXT REFERENCES loan_payments (id),
    generated_role TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (recurring_transaction_id, date, generated_role),
    UNIQUE (loan_payment_id, generated_role)
)
"""

CREATE_USER_SYNC_STATE_SQL = """
CREATE TABLE IF NOT EXISTS user_sync_state (
    user_id TEXT PRIMARY KEY,
    status TEXT NOT NULL DEFAULT 'idle',
    last_sync_at TEXT,
    future_data_days INTEGER,
    status_updated_at TEXT
)
"""

CREATE_SYNC_PROCESSING_LOG_SQL = """
CREATE TABLE IF NOT EXISTS sync_processing_log (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    started_at TEXT NOT NULL,
    ended_at TEXT,
    status TEXT NOT NULL,
    processed_recurring INTEGER NOT NULL DEFAULT 0,
    processed_loans INTEGER NOT NULL DEFAULT 0,
    error_message TEXT
)
"""

CREATE_INDEXES_SQL = (
    "CREATE INDEX IF NOT EXISTS ix_transactions_account_date "
    "ON transactions (account_id, date)",
    "CREATE INDEX IF NOT EXISTS ix_recurring_due "
    "ON recurring_transactions (user_id, is_active, next_date)",
    "CREATE INDEX IF NOT EXISTS ix_loan_payments_due "
    "ON loan_payments (loan_contract_id, status, payment_date)",
)

SCHEMA_STATEMENTS = (
    CREATE_CURRENCIES_SQL,
    CREATE_EXCHANGE_RATES_SQL,
    CREATE_ACCOUNTS_SQL,
    CREATE_RECURRING_SQL,
    CREATE_LOAN_CONTRACTS_SQL,
    CREATE_LOAN_PAYMENTS_SQL,
    CREATE_TRANSACTIONS_SQL,
    CREATE_USER_SYNC_STATE_SQL,
    CREATE_SYNC_PROCESSING_LOG_SQL,
) + CREATE_INDEXES_SQL


def ensure_schema(engine: Engine, logger=None) -> int:
    """Create every ledger table and index that does not exist yet.

    Args:
        engine: Engine connected to the ledger database.
        logger: Optional logger compatible with logging.Logger-like API.

    Returns:
        int: Number of DDL statements executed.
    """
    logger = logger or get_app_logger()
    with engine.begin() as conn:
        for statement in SCHEMA_STATEMENTS:
            conn.exec_driver_sql(statement)
    logger.info(f"Ledger schema ensured on {engine.url}")
    return len(SCHEMA_STATEMENTS)


__all__ = ["SCHEMA_STATEMENTS", "ensure_schema"]
