"""Generic idempotent materializer shared by the batch generators.

Every recipe is processed as one atomic unit:

* expand the recipe into candidate occurrences up to the horizon;
* pre-check, read-only, which occurrences already exist;
* open a database transaction and re-check the remaining occurrences;
* write the new occurrences and advance the recipe cursor.

A failure in one unit is logged and collected; it never stops the batch.
"""

from dataclasses import replace
from datetime import date, timedelta

from sqlalchemy.exc import IntegrityError

from src.application.ports.recipes import RecipeKind
from src.application.ports.sync_status import SyncStatusPort
from src.domain.constants import (
    OUTCOME_MATERIALIZED,
    OUTCOME_SKIPPED_EXISTING,
    OUTCOME_SKIPPED_LIMIT,
)
from src.domain.errors import ConcurrencyConflictError
from src.domain.models import BatchResult, RecipePlan
from src.infrastructure.logging.logger import get_app_logger


class BatchMaterializer:
    """Run a recipe kind over every due recipe of a user."""

    def __init__(self, logger=None) -> None:
        """Initialize the materializer.

        Args:
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._logger = logger or get_app_logger()

    def run(self, kind: RecipeKind, user_id: str, horizon: date) -> BatchResult:
        """Materialize every due occurrence of ``kind`` for a user.

        Args:
            kind: Recipe kind providing expansion and persistence.
            user_id: Owner of the recipes.
            horizon: Last date (inclusive) to materialize.

        Returns:
            BatchResult: Counts per outcome and one error per failed unit.
        """
        try:
            recipes = kind.due_recipes(user_id, horizon)
        except Exception as exc:
            self._logger.exception(
                f"Failed to load {kind.name} recipes for {user_id}: {exc}"
            )
            return BatchResult(errors=[f"{kind.name}: {exc}"])

        processed = skipped_existing = skipped_limit = 0
        errors: list[str] = []
        for recipe in recipes:
            recipe_id = kind.recipe_id(recipe)
            try:
                plan = self.plan(kind, recipe, horizon)
                if plan.occurrences:
                    self.apply(kind, plan)
            except Exception as exc:
                self._logger.error(f"{kind.name} {recipe_id} failed: {exc}")
                errors.append(f"{kind.name} {recipe_id}: {exc}")
                continue
            for occurrence in plan.occurrences:
                if occurrence.outcome == OUTCOME_MATERIALIZED:
                    processed += 1
                elif occurrence.outcome == OUTCOME_SKIPPED_EXISTING:
                    skipped_existing += 1
                elif occurrence.outcome == OUTCOME_SKIPPED_LIMIT:
                    skipped_limit += 1

        self._logger.info(
            f"{kind.name} batch for {user_id} up to {horizon}: "
            f"processed={processed}, skipped_existing={skipped_existing}, "
            f"skipped_limit={skipped_limit}, errors={len(errors)}"
        )
        return BatchResult(
            processed=processed,
            errors=errors,
            skipped_existing=skipped_existing,
            skipped_limit=skipped_limit,
        )

    def plan(self, kind: RecipeKind, recipe, horizon: date) -> RecipePlan:
        """Expand a recipe and decide each occurrence from a read-only check.

        Returns:
            RecipePlan: Occurrences tagged ``skipped_limit``,
            ``skipped_existing``, or ``materialized``.
        """
        occurrences = kind.expand(recipe, horizon)
        existing = kind.existing_keys(
            recipe,
            [occurrence for occurrence in occurrences if not occurrence.blocked],
        )
        decided = []
        for occurrence in occurrences:
            if occurrence.blocked:
                outcome = OUTCOME_SKIPPED_LIMIT
            elif occurrence.key in existing:
                outcome = OUTCOME_SKIPPED_EXISTING
            else:
                outcome = OUTCOME_MATERIALIZED
            decided.append(replace(occurrence, outcome=outcome))
        return RecipePlan(
            recipe=recipe,
            recipe_id=kind.recipe_id(recipe),
            occurrences=decided,
        )

    def apply(self, kind: RecipeKind, plan: RecipePlan) -> None:
        """Write a planned recipe inside one database transaction.

        Raises:
            ConcurrencyConflictError: If another run wrote any planned
                occurrence after the pre-check; nothing is committed.
        """
        to_write = [
            occurrence
            for occurrence in plan.occurrences
            if occurrence.outcome == OUTCOME_MATERIALIZED
        ]
        try:
            with kind.unit_of_work() as uow:
                conflicts = kind.conflicting_keys(uow, plan.recipe, to_write)
                if conflicts:
                    raise ConcurrencyConflictError(
                        plan.recipe_id,
                        [str(key) for key in conflicts],
                    )
                for occurrence in to_write:
                    kind.materialize(uow, plan.recipe, occurrence)
                kind.advance_cursor(uow, plan.recipe, plan.occurrences)
        except IntegrityError as exc:
            raise ConcurrencyConflictError(plan.recipe_id, []) from exc


def resolve_horizon(
    user_id: str,
    today: date,
    default_days: int = 0,
    sync_status: SyncStatusPort | None = None,
) -> date:
    """Return the last date a batch may materialize for a user.

    The per-user look-ahead stored with the sync state wins over
    ``default_days``; negative values are treated as 0.
    """
    days = default_days
    if sync_status is not None:
        user_days = sync_status.get_state(user_id).future_data_days
        if user_days is not None:
            days = user_days
    return today + timedelta(days=max(days or 0, 0))


__all__ = ["BatchMaterializer", "resolve_horizon"]
