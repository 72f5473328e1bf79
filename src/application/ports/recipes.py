"""Capability protocol implemented by each kind of batch recipe."""

from contextlib import AbstractContextManager
from datetime import date
from typing import Any, Protocol

from src.domain.models import IdempotencyKey, Occurrence


class RecipeKind(Protocol):
    """Operations the batch materializer needs from a recipe kind.

    Attributes:
        name: Short label used in logs and error messages.
    """

    name: str

    def due_recipes(self, user_id: str, horizon: date) -> list[Any]:
        """Return recipes with at least one occurrence up to ``horizon``."""

    def recipe_id(self, recipe: Any) -> str:
        """Return the identifier of a recipe."""

    def expand(self, recipe: Any, horizon: date) -> list[Occurrence]:
        """List candidate occurrences up to ``horizon`` in cursor order."""

    def idempotency_key(
        self,
        recipe_id: str,
        when: date,
        role: str | None = None,
    ) -> IdempotencyKey:
        """Build the key identifying one occurrence."""

    def existing_keys(
        self,
        recipe: Any,
        occurrences: list[Occurrence],
    ) -> set[IdempotencyKey]:
        """Read-only pre-check of keys already materialized."""

    def unit_of_work(self) -> AbstractContextManager[Any]:
        """Open the atomic unit for one recipe."""

    def conflicting_keys(
        self,
        uow: Any,
        recipe: Any,
        occurrences: list[Occurrence],
    ) -> list[IdempotencyKey]:
        """Re-check inside the unit of work for keys written meanwhile."""

    def materialize(self, uow: Any, recipe: Any, occurrence: Occurrence) -> None:
        """Write the ledger entries of one occurrence."""

    def advance_cursor(
        self,
        uow: Any,
        recipe: Any,
        occurrences: list[Occurrence],
    ) -> None:
        """Move the recipe cursor past every decided occurrence."""


__all__ = ["RecipeKind"]
