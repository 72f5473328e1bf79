"""Tests for the generic batch materializer."""

from contextlib import contextmanager
from datetime import date, timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from src.application.use_cases.batch_materializer import (
    BatchMaterializer,
    resolve_horizon,
)
from src.domain.errors import ConcurrencyConflictError
from src.domain.models import IdempotencyKey, Occurrence, UserSyncState


class FakeKind:
    """In-memory recipe kind writing to a shared ledger set."""

    name = "fake"

    def __init__(self, recipes, limits=None, fail_on=None):
        self.recipes = recipes
        self.limits = limits or {}
        self.fail_on = fail_on or set()
        self.ledger: set[IdempotencyKey] = set()
        self.cursors: dict[str, int] = {}
        self.raise_integrity = False

    def due_recipes(self, user_id, horizon):
        return self.recipes

    def recipe_id(self, recipe):
        return recipe.id

    def expand(self, recipe, horizon):
        occurrences = []
        current = recipe.start
        count = 0
        while current <= horizon:
            key = IdempotencyKey(recipe.id, current)
            if count >= self.limits.get(recipe.id, 99):
                occurrences.append(Occurrence(key=key, date=current, blocked=True))
                break
            count += 1
            occurrences.append(Occurrence(key=key, date=current))
            current += timedelta(days=1)
        return occurrences

    def existing_keys(self, recipe, occurrences):
        return {o.key for o in occurrences if o.key in self.ledger}

    @contextmanager
    def unit_of_work(self):
        staged = set()
        yield staged
        if self.raise_integrity:
            raise IntegrityError("INSERT", {}, Exception("UNIQUE"))
        self.ledger |= staged

    def conflicting_keys(self, uow, recipe, occurrences):
        return [o.key for o in occurrences if o.key in self.ledger]

    def materialize(self, uow, recipe, occurrence):
        if recipe.id in self.fail_on:
            raise RuntimeError("boom")
        uow.add(occurrence.key)

    def advance_cursor(self, uow, recipe, occurrences):
        self.cursors[recipe.id] = len(occurrences)


def _recipe(recipe_id, start=date(2024, 1, 1)):
    return SimpleNamespace(id=recipe_id, start=start)


def test_run_counts_each_outcome() -> None:
    """Existing and blocked occurrences are reported, not written."""
    kind = FakeKind([_recipe("a"), _recipe("b")], limits={"b": 1})
    kind.ledger.add(IdempotencyKey("a", date(2024, 1, 2)))

    result = BatchMaterializer(logger=MagicMock()).run(
        kind, "user-1", date(2024, 1, 3)
    )

    assert result.processed == 3
    assert result.skipped_existing == 1
    assert result.skipped_limit == 1
    assert result.errors == []
    assert IdempotencyKey("b", date(2024, 1, 2)) not in kind.ledger


def test_failing_recipe_is_collected_and_batch_continues() -> None:
    kind = FakeKind([_recipe("bad"), _recipe("good")], fail_on={"bad"})
    logger = MagicMock()

    result = BatchMaterializer(logger=logger).run(
        kind, "user-1", date(2024, 1, 2)
    )

    assert result.processed == 2
    assert result.errors == ["fake bad: boom"]
    assert not any(key.recipe_id == "bad" for key in kind.ledger)
    logger.error.assert_called_once()


def test_loading_failure_returns_single_error() -> None:
    kind = FakeKind([])
    kind.due_recipes = MagicMock(side_effect=RuntimeError("db down"))

    result = BatchMaterializer(logger=MagicMock()).run(
        kind, "user-1", date(2024, 1, 2)
    )

    assert result.processed == 0
    assert result.errors == ["fake: db down"]


def test_apply_raises_when_keys_were_written_after_precheck() -> None:
    """A second run planned before the first commit must not duplicate."""
    kind = FakeKind([_recipe("a")])
    materializer = BatchMaterializer(logger=MagicMock())
    horizon = date(2024, 1, 2)

    late_plan = materializer.plan(kind, _recipe("a"), horizon)
    materializer.run(kind, "user-1", horizon)

    with pytest.raises(ConcurrencyConflictError) as excinfo:
        materializer.apply(kind, late_plan)

    assert excinfo.value.recipe_id == "a"
    assert excinfo.value.conflicts == ["a@2024-01-01", "a@2024-01-02"]
    assert len(kind.ledger) == 2


def test_unique_violation_is_reported_as_conflict() -> None:
    kind = FakeKind([_recipe("a")])
    kind.raise_integrity = True

    result = BatchMaterializer(logger=MagicMock()).run(
        kind, "user-1", date(2024, 1, 1)
    )

    assert result.processed == 0
    assert len(result.errors) == 1
    assert "Concurrent materialization detected for a" in result.errors[0]


def test_resolve_horizon_prefers_user_setting() -> None:
    sync_status = MagicMock()
    sync_status.get_state.return_value = UserSyncState(
        user_id="user-1", future_data_days=10
    )
    today = date(2024, 1, 1)

    assert resolve_horizon("user-1", today, 3) == date(2024, 1, 4)
    assert resolve_horizon("user-1", today, 3, sync_status) == date(2024, 1, 11)
    assert resolve_horizon("user-1", today, -5) == today
