"""Batch generator for recurring transactions."""

from datetime import date
from typing import Callable

from src.application.ports.recurring_store import (
    RecurringStorePort,
    RecurringUnitOfWork,
)
from src.application.ports.sync_status import SyncStatusPort
from src.application.use_cases.batch_materializer import (
    BatchMaterializer,
    resolve_horizon,
)
from src.domain.constants import (
    OUTCOME_MATERIALIZED,
    OUTCOME_SKIPPED_EXISTING,
    OUTCOME_SKIPPED_LIMIT,
    ROLE_OCCURRENCE,
)
from src.domain.models import (
    BatchResult,
    IdempotencyKey,
    NewTransaction,
    Occurrence,
    RecurringTransaction,
)
from src.domain.services.idempotency import existing_keys, make_key
from src.domain.services.recurrence import next_date
from src.infrastructure.logging.logger import get_app_logger


def _limit_reached(recipe: RecurringTransaction, count: int, when: date) -> bool:
    if recipe.max_occurrences is not None and count >= recipe.max_occurrences:
        return True
    return recipe.end_date is not None and when > recipe.end_date


class RecurringRecipeKind:
    """Recipe kind expanding recurring transactions one date at a time."""

    name = "recurring"

    def __init__(self, store: RecurringStorePort) -> None:
        self._store = store

    def due_recipes(
        self,
        user_id: str,
        horizon: date,
    ) -> list[RecurringTransaction]:
        return self._store.fetch_due_recipes(user_id, horizon)

    def recipe_id(self, recipe: RecurringTransaction) -> str:
        return recipe.id

    def idempotency_key(
        self,
        recipe_id: str,
        when: date,
        role: str | None = ROLE_OCCURRENCE,
    ) -> IdempotencyKey:
        return make_key(recipe_id, when, role)

    def expand(
        self,
        recipe: RecurringTransaction,
        horizon: date,
    ) -> list[Occurrence]:
        """Walk the cursor up to ``horizon``.

        The walk stops at the first date blocked by ``max_occurrences`` or
        ``end_date``; that date is returned once with ``blocked`` set.
        """
        occurrences = []
        current = recipe.next_date
        count = recipe.current_count
        while current <= horizon:
            key = self.idempotency_key(recipe.id, current)
            if _limit_reached(recipe, count, current):
                occurrences.append(Occurrence(key=key, date=current, blocked=True))
                break
            count += 1
            occurrences.append(Occurrence(key=key, date=current, period=count))
            current = next_date(
                current, recipe.spec, anchor_day=recipe.start_date.day
            )
        return occurrences

    def existing_keys(
        self,
        recipe: RecurringTransaction,
        occurrences: list[Occurrence],
    ) -> set[IdempotencyKey]:
        if not occurrences:
            return set()
        dates = self._store.existing_dates(
            recipe.id, [occurrence.date for occurrence in occurrences]
        )
        return existing_keys(recipe.id, dates, ROLE_OCCURRENCE)

    def unit_of_work(self):
        return self._store.begin()

    def conflicting_keys(
        self,
        uow: RecurringUnitOfWork,
        recipe: RecurringTransaction,
        occurrences: list[Occurrence],
    ) -> list[IdempotencyKey]:
        if not occurrences:
            return []
        dates = uow.existing_dates(
            recipe.id, [occurrence.date for occurrence in occurrences]
        )
        return [
            occurrence.key
            for occurrence in occurrences
            if occurrence.date in dates
        ]

    def materialize(
        self,
        uow: RecurringUnitOfWork,
        recipe: RecurringTransaction,
        occurrence: Occurrence,
    ) -> None:
        uow.insert_transaction(
            NewTransaction(
                user_id=recipe.user_id,
                account_id=recipe.account_id,
                currency_id=recipe.currency_id,
                type=recipe.type,
                amount=recipe.amount,
                date=occurrence.date,
                description=recipe.description,
                notes=recipe.notes,
                recurring_transaction_id=recipe.id,
                generated_role=ROLE_OCCURRENCE,
            )
        )

    def advance_cursor(
        self,
        uow: RecurringUnitOfWork,
        recipe: RecurringTransaction,
        occurrences: list[Occurrence],
    ) -> None:
        """Count every consumed date and deactivate at a terminal state.

        Dates found already materialized still consume an occurrence so the
        count matches the ledger.
        """
        consumed = [
            occurrence
            for occurrence in occurrences
            if occurrence.outcome
            in (OUTCOME_MATERIALIZED, OUTCOME_SKIPPED_EXISTING)
        ]
        count = recipe.current_count + len(consumed)
        cursor = recipe.next_date
        if consumed:
            cursor = next_date(
                consumed[-1].date,
                recipe.spec,
                anchor_day=recipe.start_date.day,
            )
        terminal = any(
            occurrence.outcome == OUTCOME_SKIPPED_LIMIT
            for occurrence in occurrences
        ) or _limit_reached(recipe, count, cursor)
        is_active = recipe.is_active and not terminal
        uow.save_cursor(recipe.id, count, cursor, is_active)


class RunRecurringBatchUseCase:
    """Materialize due recurring transactions of a user."""

    def __init__(
        self,
        store: RecurringStorePort,
        sync_status: SyncStatusPort | None = None,
        future_data_days: int = 0,
        logger=None,
        today: Callable[[], date] = date.today,
    ) -> None:
        """Initialize the use case.

        Args:
            store: Port persisting recurring recipes.
            sync_status: Optional port holding per-user look-ahead.
            future_data_days: Default look-ahead of the horizon.
            logger: Optional logger compatible with logging.Logger-like API.
            today: Clock returning the current local date.
        """
        self._kind = RecurringRecipeKind(store)
        self._sync_status = sync_status
        self._future_data_days = future_data_days
        self._logger = logger or get_app_logger()
        self._materializer = BatchMaterializer(logger=self._logger)
        self._today = today

    def run(self, user_id: str) -> BatchResult:
        """Run the batch; failures are returned in ``errors``, never raised."""
        try:
            horizon = resolve_horizon(
                user_id,
                self._today(),
                self._future_data_days,
                self._sync_status,
            )
        except Exception as exc:
            self._logger.exception(f"Cannot resolve horizon for {user_id}: {exc}")
            return BatchResult(errors=[f"{self._kind.name}: {exc}"])
        return self._materializer.run(self._kind, user_id, horizon)


__all__ = ["RecurringRecipeKind", "RunRecurringBatchUseCase"]
