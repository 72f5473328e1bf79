"""Domain models shared by the batch generators."""

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class IdempotencyKey:
    """Key identifying one materialized occurrence of a recipe."""

    recipe_id: str
    date: date
    role: str | None = None

    def __str__(self) -> str:
        suffix = f"/{self.role}" if self.role else ""
        return f"{self.recipe_id}@{self.date.isoformat()}{suffix}"


@dataclass(frozen=True)
class Occurrence:
    """Candidate occurrence of a recipe within the batch horizon.

    Attributes:
        key: Idempotency key of the occurrence.
        date: Normalized calendar date of the occurrence.
        period: Loan period number, when applicable.
        payload: Kind-specific data needed to materialize the occurrence.
        blocked: True when a terminal condition prevents materialization.
        outcome: Decision taken by the batch materializer.
    """

    key: IdempotencyKey
    date: date
    period: int | None = None
    payload: object = None
    blocked: bool = False
    outcome: str | None = None


@dataclass(frozen=True)
class RecipePlan:
    """Occurrences of one recipe with their pre-check outcomes."""

    recipe: object
    recipe_id: str
    occurrences: list[Occurrence] = field(default_factory=list)


@dataclass(frozen=True)
class BatchResult:
    """Outcome of a batch run.

    Attributes:
        processed: Number of occurrences materialized.
        errors: One message per recipe whose atomic unit failed.
        skipped_existing: Occurrences already present in the ledger.
        skipped_limit: Occurrences blocked by a terminal condition.
    """

    processed: int = 0
    errors: list[str] = field(default_factory=list)
    skipped_existing: int = 0
    skipped_limit: int = 0


__all__ = ["IdempotencyKey", "Occurrence", "RecipePlan", "BatchResult"]
