"""Ports for persisting recurring transaction recipes."""

from collections.abc import Iterable
from contextlib import AbstractContextManager
from datetime import date
from typing import Protocol

from src.domain.models import NewTransaction, RecurringTransaction


class RecurringUnitOfWork(Protocol):
    """Transactional handle used while one recipe is materialized."""

    def existing_dates(
        self,
        recipe_id: str,
        dates: Iterable[date],
    ) -> set[date]:
        """Return the dates already materialized for the recipe."""

    def insert_transaction(self, transaction: NewTransaction) -> str:
        """Insert a generated transaction and return its identifier."""

    def save_cursor(
        self,
        recipe_id: str,
        current_count: int,
        next_date: date,
        is_active: bool,
    ) -> None:
        """Persist the recipe cursor."""


class RecurringStorePort(Protocol):
    """Port exposing recurring recipes and their generated transactions."""

    def fetch_due_recipes(
        self,
        user_id: str,
        horizon: date,
    ) -> list[RecurringTransaction]:
        """Return active recipes whose cursor is on or before ``horizon``."""

    def fetch_recipe(self, recipe_id: str) -> RecurringTransaction | None:
        """Return one recipe, or None when it does not exist."""

    def existing_dates(
        self,
        recipe_id: str,
        dates: Iterable[date],
    ) -> set[date]:
        """Read-only lookup of dates already materialized for a recipe."""

    def insert_recipe(self, recipe: RecurringTransaction) -> None:
        """Store a new recipe."""

    def update_recipe(self, recipe: RecurringTransaction) -> None:
        """Replace the stored fields of a recipe."""

    def begin(self) -> AbstractContextManager[RecurringUnitOfWork]:
        """Open a database transaction scoped to one recipe."""


__all__ = ["RecurringUnitOfWork", "RecurringStorePort"]
