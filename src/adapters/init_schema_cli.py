"""CLI adapter creating the ledger tables.

This adapter is meant for local operations: it instantiates the concrete
database adapter, checks the connection, and applies the schema DDL.
"""

from src.infrastructure.container import build_database_adapter
from src.infrastructure.logging.logger import get_app_logger
from src.infrastructure.schema import ensure_schema


def main() -> None:
    """Check the ledger connection and create missing tables."""
    logger = get_app_logger()
    engine = build_database_adapter().get_ledger_engine()
    logger.info(f"Ledger DB: {engine.url}")

    with engine.connect() as conn:
        conn.exec_driver_sql("SELECT 1")

    statements = ensure_schema(engine, logger=logger)
    print(f"Applied {statements} schema statements to the ledger database.")


if __name__ == "__main__":  # pragma: no cover
    main()
