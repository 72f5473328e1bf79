"""Use cases managing recurring transaction recipes."""

from dataclasses import replace
import uuid

from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.application.ports.recurring_store import RecurringStorePort
from src.domain.errors import NotFoundError, ValidationError
from src.domain.models import RecurringTransaction, RecurringTransactionData
from src.domain.services.recurrence import next_date
from src.domain.services.validation import recurring_transaction_errors
from src.infrastructure.logging.logger import get_app_logger
from src.utils.decimal_utils import round_minor


# Upper bound on re-anchoring steps when a cadence is edited.
MAX_REANCHOR_STEPS = 10000


class RecurringTransactionService:
    """Create, edit, and deactivate recurring transactions."""

    def __init__(
        self,
        store: RecurringStorePort,
        ledger_repository: LedgerRepositoryPort,
        logger=None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Port persisting recurring recipes.
            ledger_repository: Port used to resolve accounts and currencies.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._store = store
        self._ledger = ledger_repository
        self._logger = logger or get_app_logger()

    def create(
        self,
        user_id: str,
        data: RecurringTransactionData,
    ) -> RecurringTransaction:
        """Validate and store a new recipe.

        The cursor starts on ``start_date``; nothing is materialized until
        the next batch run.

        Raises:
            ValidationError: If the recipe is rejected.
        """
        currency_id = self._resolve(data)
        recipe = RecurringTransaction(
            id=uuid.uuid4().hex,
            user_id=user_id,
            account_id=data.account_id,
            currency_id=currency_id,
            type=data.type,
            amount=round_minor(data.amount),
            description=data.description.strip(),
            notes=data.notes,
            spec=data.spec,
            start_date=data.start_date,
            end_date=data.end_date,
            max_occurrences=data.max_occurrences,
            current_count=0,
            next_date=data.start_date,
            is_active=data.is_active,
        )
        self._store.insert_recipe(recipe)
        self._logger.info(
            f"Created recurring transaction {recipe.id} "
            f"({recipe.spec.frequency}) for {user_id}"
        )
        return recipe

    def update(
        self,
        recipe_id: str,
        data: RecurringTransactionData,
    ) -> RecurringTransaction:
        """Validate and store new fields for an existing recipe.

        Occurrences already generated are kept. When the cadence or start
        date changes, the cursor moves to the first date of the new cadence
        on or after the current cursor (or to the new start date when
        nothing was generated yet).

        Raises:
            NotFoundError: If the recipe does not exist.
            ValidationError: If the new fields are rejected.
        """
        existing = self._get(recipe_id)
        currency_id = self._resolve(data)
        cursor = existing.next_date
        cadence_changed = (
            data.spec != existing.spec or data.start_date != existing.start_date
        )
        if cadence_changed:
            cursor = self._reanchor(data, existing)
        updated = replace(
            existing,
            account_id=data.account_id,
            currency_id=currency_id,
            type=data.type,
            amount=round_minor(data.amount),
            description=data.description.strip(),
            notes=data.notes,
            spec=data.spec,
            start_date=data.start_date,
            end_date=data.end_date,
            max_occurrences=data.max_occurrences,
            next_date=cursor,
            is_active=data.is_active,
        )
        self._store.update_recipe(updated)
        self._logger.info(
            f"Updated recurring transaction {recipe_id}; next date {cursor}"
        )
        return updated

    def deactivate(self, recipe_id: str) -> RecurringTransaction:
        """Stop future materialization of a recipe.

        Raises:
            NotFoundError: If the recipe does not exist.
        """
        existing = self._get(recipe_id)
        if not existing.is_active:
            return existing
        updated = replace(existing, is_active=False)
        self._store.update_recipe(updated)
        self._logger.info(f"Deactivated recurring transaction {recipe_id}")
        return updated

    def _get(self, recipe_id: str) -> RecurringTransaction:
        recipe = self._store.fetch_recipe(recipe_id)
        if recipe is None:
            raise NotFoundError(f"Recurring transaction {recipe_id} does not exist")
        return recipe

    def _resolve(self, data: RecurringTransactionData) -> str:
        account = self._ledger.fetch_account(data.account_id)
        currency_id = self._ledger.fetch_currency_id(data.currency_code)
        errors = recurring_transaction_errors(data, account, self._logger)
        if currency_id is None:
            errors.append(f"Currency {data.currency_code} does not exist")
        if errors:
            raise ValidationError(errors)
        return currency_id

    @staticmethod
    def _reanchor(
        data: RecurringTransactionData,
        existing: RecurringTransaction,
    ):
        if existing.current_count == 0:
            return data.start_date
        cursor = data.start_date
        for _ in range(MAX_REANCHOR_STEPS):
            if cursor >= existing.next_date:
                return cursor
            cursor = next_date(
                cursor, data.spec, anchor_day=data.start_date.day
            )
        raise ValidationError(
            "Cadence is too fine to re-anchor from the start date"
        )


__all__ = ["RecurringTransactionService"]
