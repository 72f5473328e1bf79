"""Default English message catalog."""

from src.application.ports.translation import TranslatorPort


DEFAULT_MESSAGES = {
    "loan.contract.template.default.description": (
        "{contractName} - Period {period} {type}"
    ),
    "loan.contract.template.default.notes": "Loan contract: {contractName}",
    "loan.contract.template.balance.notes": (
        "Loan contract: {contractName}, remaining balance: "
        "{remainingBalance}"
    ),
    "loan.type.principal": "Principal",
    "loan.type.interest": "Interest",
    "loan.type.balance.update": "Balance Update",
}


class CatalogTranslator(TranslatorPort):
    """Resolve message keys from an in-memory catalog.

    Unknown keys resolve to the key itself so a missing message never
    blocks materialization.
    """

    def __init__(self, messages: dict[str, str] | None = None) -> None:
        self._messages = dict(DEFAULT_MESSAGES)
        if messages:
            self._messages.update(messages)

    def translate(self, key: str, **params) -> str:
        message = self._messages.get(key, key)
        for name, value in params.items():
            message = message.replace("{" + name + "}", str(value))
        return message


__all__ = ["DEFAULT_MESSAGES", "CatalogTranslator"]
