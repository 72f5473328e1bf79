"""CLI adapter running the ledger sync for one user.

Configuration comes from the environment: ``LEDGER_USER_ID`` selects the
user and ``LEDGER_SYNC_FORCE`` (1/true/yes) bypasses the sync interval.
"""

import os

from src.infrastructure.container import build_ledger_sync
from src.infrastructure.logging.logger import get_app_logger

TRUTHY = {"1", "true", "yes", "on"}


def main() -> int:
    """Trigger the orchestrator and print its outcome.

    Returns:
        int: Process exit code, non-zero when the run failed.
    """
    logger = get_app_logger()
    user_id = os.getenv("LEDGER_USER_ID", "").strip()
    if not user_id:
        logger.error("LEDGER_USER_ID is required to run the ledger sync.")
        return 2
    force = os.getenv("LEDGER_SYNC_FORCE", "").strip().lower() in TRUTHY

    result = build_ledger_sync().trigger(user_id, force=force)

    print(
        f"Ledger sync {result.status}: "
        f"recurring={result.processed_recurring}, "
        f"loans={result.processed_loans}"
    )
    for error in result.errors:
        print(f"  error: {error}")
    return 1 if result.status == "failed" else 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
