"""Domain models for financial aggregates."""

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class NetWorthSummary:
    """Summary of net worth figures.

    Attributes:
        asset_total: Sum of asset balances.
        liability_total: Sum of liability balances.
        net_worth: Assets minus liabilities.
        currency_code: Currency of the totals.
        has_conversion_errors: True when some balances could not be converted.
    """

    asset_total: Decimal
    liability_total: Decimal
    net_worth: Decimal
    currency_code: str
    has_conversion_errors: bool = False
    conversion_errors: list[str] = field(default_factory=list)


__all__ = ["NetWorthSummary"]
