"""Thin orchestrator running the recurring and loan batches for a user."""

from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from datetime import datetime, timedelta, timezone
from typing import Callable

from src.application.ports.sync_status import SyncStatusPort
from src.application.use_cases.run_loan_batch import RunLoanBatchUseCase
from src.application.use_cases.run_recurring_batch import (
    RunRecurringBatchUseCase,
)
from src.domain.constants import (
    SYNC_ALREADY_SYNCED,
    SYNC_COMPLETED,
    SYNC_FAILED,
    SYNC_IDLE,
    SYNC_PROCESSING,
)
from src.domain.models import BatchResult, SyncRunResult, UserSyncState
from src.infrastructure.logging.logger import get_app_logger, get_usage_logger


class RunLedgerSyncUseCase:
    """Decide whether a user needs a sync and run both batches.

    The run is claimed through the sync status port so concurrent triggers
    for the same user report ``processing`` instead of starting a second
    run. Both batches are idempotent, so a run cut short by the timeout is
    safe to retry.
    """

    def __init__(
        self,
        recurring_batch: RunRecurringBatchUseCase,
        loan_batch: RunLoanBatchUseCase,
        sync_status: SyncStatusPort,
        sync_interval_hours: float = 6.0,
        batch_timeout_seconds: float = 300.0,
        logger=None,
        usage_logger=None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            recurring_batch: Recurring transactions batch.
            loan_batch: Loan payments batch.
            sync_status: Port storing status and run logs.
            sync_interval_hours: Minimum age of the last sync before a
                new run is needed.
            batch_timeout_seconds: Wall-clock bound of one run.
            logger: Optional logger compatible with logging.Logger-like API.
            usage_logger: Optional logger recording run summaries.
            clock: Clock returning aware datetimes.
        """
        self._recurring_batch = recurring_batch
        self._loan_batch = loan_batch
        self._sync_status = sync_status
        self._interval = timedelta(hours=sync_interval_hours)
        self._timeout = batch_timeout_seconds
        self._logger = logger or get_app_logger()
        self._usage_logger = usage_logger or get_usage_logger()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def needs_sync(self, state: UserSyncState, now: datetime) -> bool:
        """Return True when the user was never synced, failed, or is stale."""
        if state.status == SYNC_FAILED or state.last_sync_at is None:
            return True
        last_sync = state.last_sync_at
        if last_sync.tzinfo is None:
            last_sync = last_sync.replace(tzinfo=timezone.utc)
        return now - last_sync >= self._interval

    def trigger(self, user_id: str, force: bool = False) -> SyncRunResult:
        """Run both batches for a user when a sync is needed.

        Args:
            user_id: User to synchronize.
            force: Run even when the last sync is recent.

        Returns:
            SyncRunResult: ``already_synced``, ``processing``,
            ``completed``, or ``failed`` with processed counts and errors.
        """
        now = self._clock()
        state = self._sync_status.get_state(user_id)
        if not force and state.status != SYNC_PROCESSING:
            if not self.needs_sync(state, now):
                self._logger.debug(f"User {user_id} already synced")
                return SyncRunResult(status=SYNC_ALREADY_SYNCED)

        stale_before = now - timedelta(seconds=self._timeout)
        if not self._sync_status.claim(user_id, now, stale_before):
            self._logger.info(f"Sync already in progress for {user_id}")
            return SyncRunResult(status=SYNC_PROCESSING)

        log_id = self._sync_status.start_log(user_id, now)
        try:
            recurring, loans = self._run_batches(user_id)
        except FuturesTimeoutError:
            message = f"Sync timed out after {self._timeout:g} seconds"
            return self._finish(user_id, log_id, SYNC_FAILED, 0, 0, [message])
        except Exception as exc:
            self._logger.exception(f"Sync failed for {user_id}: {exc}")
            return self._finish(user_id, log_id, SYNC_FAILED, 0, 0, [str(exc)])

        errors = recurring.errors + loans.errors
        status = SYNC_FAILED if errors else SYNC_COMPLETED
        return self._finish(
            user_id,
            log_id,
            status,
            recurring.processed,
            loans.processed,
            errors,
        )

    def retry_failed(self, user_id: str) -> SyncRunResult:
        """Reset a failed status and force a new run."""
        state = self._sync_status.get_state(user_id)
        if state.status == SYNC_FAILED:
            self._sync_status.set_status(user_id, SYNC_IDLE)
        return self.trigger(user_id, force=True)

    def _run_batches(self, user_id: str) -> tuple[BatchResult, BatchResult]:
        executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="ledger-sync",
        )
        try:
            future = executor.submit(self._run_both, user_id)
            return future.result(timeout=self._timeout)
        finally:
            executor.shutdown(wait=False)

    def _run_both(self, user_id: str) -> tuple[BatchResult, BatchResult]:
        recurring = self._recurring_batch.run(user_id)
        loans = self._loan_batch.run(user_id)
        return recurring, loans

    def _finish(
        self,
        user_id: str,
        log_id: str,
        status: str,
        processed_recurring: int,
        processed_loans: int,
        errors: list[str],
    ) -> SyncRunResult:
        ended_at = self._clock()
        self._sync_status.set_status(
            user_id,
            status,
            last_sync_at=ended_at if status == SYNC_COMPLETED else None,
        )
        self._sync_status.finish_log(
            log_id,
            status,
            ended_at,
            processed_recurring,
            processed_loans,
            "; ".join(errors) or None,
        )
        self._usage_logger.info(
            f"Ledger sync {status} for {user_id}: "
            f"recurring={processed_recurring}, loans={processed_loans}, "
            f"errors={len(errors)}"
        )
        return SyncRunResult(
            status=status,
            processed_recurring=processed_recurring,
            processed_loans=processed_loans,
            errors=errors,
        )


__all__ = ["RunLedgerSyncUseCase"]
