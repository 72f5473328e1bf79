"""Port for converting amounts between currencies."""

from datetime import date
from decimal import Decimal
from typing import Protocol

from src.domain.models import ConversionResult


class CurrencyConverterPort(Protocol):
    """Port exposing currency conversion at a given date."""

    def convert(
        self,
        amount: Decimal,
        from_currency: str,
        to_currency: str,
        as_of: date | None = None,
    ) -> ConversionResult:
        """Convert ``amount`` and report whether a rate was found."""


__all__ = ["CurrencyConverterPort"]
