"""Domain models for orchestrator run tracking."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class UserSyncState:
    """Coarse sync status stored per user."""

    user_id: str
    status: str = "idle"
    last_sync_at: datetime | None = None
    future_data_days: int | None = None
    status_updated_at: datetime | None = None


@dataclass(frozen=True)
class SyncRunResult:
    """Outcome returned by the orchestrator trigger."""

    status: str
    processed_recurring: int = 0
    processed_loans: int = 0
    errors: list[str] = field(default_factory=list)


__all__ = ["UserSyncState", "SyncRunResult"]
