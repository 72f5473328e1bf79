"""Port for user-facing message templates."""

from typing import Protocol


class TranslatorPort(Protocol):
    """Port resolving message keys to text."""

    def translate(self, key: str, **params) -> str:
        """Return the message for ``key`` with ``{name}`` slots filled."""


__all__ = ["TranslatorPort"]
