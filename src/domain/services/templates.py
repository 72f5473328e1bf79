"""Placeholder substitution for generated transaction descriptions."""

from decimal import Decimal

from src.utils.decimal_utils import round_minor


def format_amount(value) -> str:
    """Format an amount with thousands separators and two decimals."""
    return f"{round_minor(value):,.2f}"


def replace_template_placeholders(
    template: str,
    *,
    period: int,
    contract_name: str,
    remaining_balance: Decimal,
) -> str:
    """Fill the ``{period}``, ``{contractName}``, ``{remainingBalance}`` slots.

    Unknown braces are left untouched so user-written text survives.

    Args:
        template: User-defined description or notes template.
        period: Loan period number.
        contract_name: Name of the loan contract.
        remaining_balance: Balance left after the period.

    Returns:
        str: Template with placeholders replaced.
    """
    return (
        template.replace("{period}", str(period))
        .replace("{contractName}", contract_name or "")
        .replace("{remainingBalance}", format_amount(remaining_balance))
    )


__all__ = ["format_amount", "replace_template_placeholders"]
