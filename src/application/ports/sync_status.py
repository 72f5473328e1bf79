"""Port for orchestrator run tracking."""

from datetime import datetime
from typing import Protocol

from src.domain.models import UserSyncState


class SyncStatusPort(Protocol):
    """Port storing the coarse sync status and processing logs per user."""

    def get_state(self, user_id: str) -> UserSyncState:
        """Return the sync state of a user (idle when never synced)."""

    def set_status(
        self,
        user_id: str,
        status: str,
        last_sync_at: datetime | None = None,
    ) -> None:
        """Store the status, and the last sync time when given."""

    def claim(
        self,
        user_id: str,
        now: datetime,
        stale_before: datetime,
    ) -> bool:
        """Atomically move a user to processing.

        Returns False when another run holds the claim and started after
        ``stale_before``.
        """

    def set_future_data_days(self, user_id: str, days: int | None) -> None:
        """Store the per-user look-ahead of the batch horizon."""

    def start_log(self, user_id: str, started_at: datetime) -> str:
        """Open a processing log row and return its identifier."""

    def finish_log(
        self,
        log_id: str,
        status: str,
        ended_at: datetime,
        processed_recurring: int,
        processed_loans: int,
        error_message: str | None = None,
    ) -> None:
        """Close a processing log row."""


__all__ = ["SyncStatusPort"]
