"""Idempotency helpers shared by the batch generators."""

from collections.abc import Iterable
from datetime import date

from src.domain.models.batch import IdempotencyKey
from src.domain.services.normalization import normalize_date


def make_key(recipe_id: str, value, role: str | None = None) -> IdempotencyKey:
    """Build an idempotency key with a normalized local calendar date."""
    return IdempotencyKey(
        recipe_id=recipe_id,
        date=normalize_date(value),
        role=role,
    )


def existing_keys(
    recipe_id: str,
    dates: Iterable[date | str],
    role: str | None = None,
) -> set[IdempotencyKey]:
    """Build the set of keys already materialized for a recipe."""
    return {make_key(recipe_id, value, role) for value in dates}


def filter_new(items: Iterable, existing: set[IdempotencyKey]) -> list:
    """Drop items whose ``key`` is already materialized."""
    return [item for item in items if item.key not in existing]


__all__ = ["make_key", "existing_keys", "filter_new"]
