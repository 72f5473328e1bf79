"""Domain exceptions raised by the ledger core."""


class LedgerError(Exception):
    """Base class for ledger core errors."""


class ValidationError(LedgerError):
    """Raised when recipe parameters are rejected before materialization.

    Attributes:
        errors: Individual validation messages.
    """

    def __init__(self, errors: list[str] | str) -> None:
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class ConcurrencyConflictError(LedgerError):
    """Raised when a concurrent run already materialized the same keys.

    The error is always safe to retry: the next run sees the committed rows
    and skips them.
    """

    def __init__(self, recipe_id: str, conflicts: list[str]) -> None:
        self.recipe_id = recipe_id
        self.conflicts = list(conflicts)
        joined = ", ".join(self.conflicts) or "unique constraint"
        super().__init__(
            f"Concurrent materialization detected for {recipe_id}: {joined}"
        )


class NotFoundError(LedgerError):
    """Raised when a referenced ledger entity does not exist."""


__all__ = [
    "LedgerError",
    "ValidationError",
    "ConcurrencyConflictError",
    "NotFoundError",
]
