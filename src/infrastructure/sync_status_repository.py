"""SQLAlchemy-backed store for per-user sync status and run logs."""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from src.application.ports.database import DatabaseEnginePort
from src.application.ports.sync_status import SyncStatusPort
from src.domain.constants import SYNC_IDLE, SYNC_PROCESSING
from src.domain.models import UserSyncState
from src.infrastructure.row_utils import (
    from_db_datetime,
    new_id,
    to_db_datetime,
)


SELECT_STATE_SQL = text(
    """
    SELECT user_id, status, last_sync_at, future_data_days,
           status_updated_at
    FROM user_sync_state
    WHERE user_id = :user_id
    """
)

INSERT_STATE_SQL = text(
    """
    INSERT INTO user_sync_state (
        user_id, status, last_sync_at, future_data_days, status_updated_at
    )
    VALUES (
        :user_id, :status, :last_sync_at, :future_data_days,
        :status_updated_at
    )
    """
)

UPDATE_STATUS_SQL = text(
    """
    UPDATE user_sync_state
    SET status = :status,
        status_updated_at = :status_updated_at
    WHERE user_id = :user_id
    """
)

UPDATE_STATUS_AND_SYNC_SQL = text(
    """
    UPDATE user_sync_state
    SET status = :status,
        status_updated_at = :status_updated_at,
        last_sync_at = :last_sync_at
    WHERE user_id = :user_id
    """
)

CLAIM_SQL = text(
    """
    UPDATE user_sync_state
    SET status = :processing,
        status_updated_at = :now
    WHERE user_id = :user_id
      AND (
        status <> :processing
        OR status_updated_at IS NULL
        OR status_updated_at < :stale_before
      )
    """
)

UPDATE_FUTURE_DAYS_SQL = text(
    """
    UPDATE user_sync_state
    SET future_data_days = :future_data_days
    WHERE user_id = :user_id
    """
)

INSERT_LOG_SQL = text(
    """
    INSERT INTO sync_processing_log (id, user_id, started_at, status)
    VALUES (:id, :user_id, :started_at, :status)
    """
)

FINISH_LOG_SQL = text(
    """
    UPDATE sync_processing_log
    SET status = :status,
        ended_at = :ended_at,
        processed_recurring = :processed_recurring,
        processed_loans = :processed_loans,
        error_message = :error_message
    WHERE id = :id
    """
)


class SqlAlchemySyncStatusRepository(SyncStatusPort):
    """Repository backed by SQLAlchemy for orchestrator bookkeeping."""

    def __init__(self, db_port: DatabaseEnginePort) -> None:
        """Initialize the repository.

        Args:
            db_port: Port providing access to the ledger engine.
        """
        self._db_port = db_port

    def get_state(self, user_id: str) -> UserSyncState:
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            row = conn.execute(SELECT_STATE_SQL, {"user_id": user_id}).first()
        if row is None:
            return UserSyncState(user_id=user_id)
        return UserSyncState(
            user_id=row.user_id,
            status=row.status,
            last_sync_at=from_db_datetime(row.last_sync_at),
            future_data_days=row.future_data_days,
            status_updated_at=from_db_datetime(row.status_updated_at),
        )

    def set_status(
        self,
        user_id: str,
        status: str,
        last_sync_at: datetime | None = None,
    ) -> None:
        now = to_db_datetime(datetime.now().astimezone())
        params = {
            "user_id": user_id,
            "status": status,
            "status_updated_at": now,
            "last_sync_at": to_db_datetime(last_sync_at),
        }
        query = (
            UPDATE_STATUS_AND_SYNC_SQL
            if last_sync_at is not None
            else UPDATE_STATUS_SQL
        )
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            result = conn.execute(query, params)
            if result.rowcount == 0:
                conn.execute(
                    INSERT_STATE_SQL, {**params, "future_data_days": None}
                )

    def claim(
        self,
        user_id: str,
        now: datetime,
        stale_before: datetime,
    ) -> bool:
        """Move the user to processing unless a fresh run holds the claim."""
        params = {
            "user_id": user_id,
            "processing": SYNC_PROCESSING,
            "now": to_db_datetime(now),
            "stale_before": to_db_datetime(stale_before),
        }
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            if conn.execute(CLAIM_SQL, params).rowcount == 1:
                return True
            if conn.execute(SELECT_STATE_SQL, {"user_id": user_id}).first():
                return False
        try:
            with engine.begin() as conn:
                conn.execute(
                    INSERT_STATE_SQL,
                    {
                        "user_id": user_id,
                        "status": SYNC_PROCESSING,
                        "last_sync_at": None,
                        "future_data_days": None,
                        "status_updated_at": to_db_datetime(now),
                    },
                )
        except IntegrityError:
            # Another run inserted the row first.
            return False
        return True

    def set_future_data_days(self, user_id: str, days: int | None) -> None:
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            result = conn.execute(
                UPDATE_FUTURE_DAYS_SQL,
                {"user_id": user_id, "future_data_days": days},
            )
            if result.rowcount == 0:
                conn.execute(
                    INSERT_STATE_SQL,
                    {
                        "user_id": user_id,
                        "status": SYNC_IDLE,
                        "last_sync_at": None,
                        "future_data_days": days,
                        "status_updated_at": None,
                    },
                )

    def start_log(self, user_id: str, started_at: datetime) -> str:
        log_id = new_id()
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            conn.execute(
                INSERT_LOG_SQL,
                {
                    "id": log_id,
                    "user_id": user_id,
                    "started_at": to_db_datetime(started_at),
                    "status": SYNC_PROCESSING,
                },
            )
        return log_id

    def finish_log(
        self,
        log_id: str,
        status: str,
        ended_at: datetime,
        processed_recurring: int,
        processed_loans: int,
        error_message: str | None = None,
    ) -> None:
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            conn.execute(
                FINISH_LOG_SQL,
                {
                    "id": log_id,
                    "status": status,
                    "ended_at": to_db_datetime(ended_at),
                    "processed_recurring": processed_recurring,
                    "processed_loans": processed_loans,
                    "error_message": error_message,
                },
            )


__all__ = ["SqlAlchemySyncStatusRepository"]
