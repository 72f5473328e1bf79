"""Batch generator for loan contract payments."""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable

from src.application.ports.loan_store import LoanStorePort, LoanUnitOfWork
from src.application.ports.sync_status import SyncStatusPort
from src.application.ports.translation import TranslatorPort
from src.application.use_cases.batch_materializer import (
    BatchMaterializer,
    resolve_horizon,
)
from src.domain.constants import (
    BALANCE,
    EXPENSE,
    OUTCOME_MATERIALIZED,
    OUTCOME_SKIPPED_EXISTING,
    PENDING,
    ROLE_BALANCE,
    ROLE_INTEREST,
    ROLE_PRINCIPAL,
)
from src.domain.models import (
    BatchResult,
    IdempotencyKey,
    LoanContract,
    LoanPayment,
    NewTransaction,
    Occurrence,
)
from src.domain.services.idempotency import make_key
from src.domain.services.recurrence import payment_date_for_period
from src.domain.services.templates import (
    format_amount,
    replace_template_placeholders,
)
from src.infrastructure.logging.logger import get_app_logger


ROLE_TYPE_KEYS = {
    ROLE_PRINCIPAL: "loan.type.principal",
    ROLE_INTEREST: "loan.type.interest",
    ROLE_BALANCE: "loan.type.balance.update",
}


def next_payment_date_after(
    contract: LoanContract,
    current_period: int,
) -> date | None:
    """Return the due date following ``current_period``, or None at the end."""
    if current_period >= contract.total_periods:
        return None
    return payment_date_for_period(
        contract.start_date,
        contract.payment_day,
        current_period + 1,
    )


class LoanTextBuilder:
    """Build descriptions and notes of generated loan transactions.

    User templates take precedence; otherwise the translator catalog is
    used.
    """

    def __init__(self, translator: TranslatorPort) -> None:
        self._translator = translator

    def description(
        self,
        contract: LoanContract,
        payment: LoanPayment,
        role: str,
    ) -> str:
        if contract.transaction_description:
            return replace_template_placeholders(
                contract.transaction_description,
                period=payment.period,
                contract_name=contract.contract_name,
                remaining_balance=payment.remaining_balance,
            )
        return self._translator.translate(
            "loan.contract.template.default.description",
            contractName=contract.contract_name,
            period=payment.period,
            type=self._translator.translate(ROLE_TYPE_KEYS[role]),
        )

    def notes(
        self,
        contract: LoanContract,
        payment: LoanPayment,
        role: str,
    ) -> str:
        if contract.transaction_notes:
            return replace_template_placeholders(
                contract.transaction_notes,
                period=payment.period,
                contract_name=contract.contract_name,
                remaining_balance=payment.remaining_balance,
            )
        if role == ROLE_BALANCE:
            return self._translator.translate(
                "loan.contract.template.balance.notes",
                contractName=contract.contract_name,
                remainingBalance=format_amount(payment.remaining_balance),
            )
        return self._translator.translate(
            "loan.contract.template.default.notes",
            contractName=contract.contract_name,
        )


class LoanRecipeKind:
    """Recipe kind turning due PENDING payments into ledger entries.

    One occurrence is one payment; its key is the payment id and due date.
    """

    name = "loan"

    def __init__(
        self,
        store: LoanStorePort,
        translator: TranslatorPort,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._texts = LoanTextBuilder(translator)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def due_recipes(self, user_id: str, horizon: date) -> list[LoanContract]:
        return self._store.fetch_contracts(user_id)

    def recipe_id(self, contract: LoanContract) -> str:
        return contract.id

    def idempotency_key(
        self,
        recipe_id: str,
        when: date,
        role: str | None = None,
    ) -> IdempotencyKey:
        return make_key(recipe_id, when, role)

    def expand(self, contract: LoanContract, horizon: date) -> list[Occurrence]:
        """List due PENDING payments in period order.

        Every due payment of an inactive contract, and periods beyond
        ``total_periods`` left over from a shortened contract, are reported
        as blocked.
        """
        return [
            Occurrence(
                key=self.idempotency_key(payment.id, payment.payment_date),
                date=payment.payment_date,
                period=payment.period,
                payload=payment,
                blocked=not contract.is_active
                or payment.period > contract.total_periods,
            )
            for payment in self._store.fetch_due_payments(contract.id, horizon)
        ]

    def existing_keys(
        self,
        contract: LoanContract,
        occurrences: list[Occurrence],
    ) -> set[IdempotencyKey]:
        if not occurrences:
            return set()
        linked = self._store.existing_transactions(
            occurrence.payload.id for occurrence in occurrences
        )
        return {
            occurrence.key
            for occurrence in occurrences
            if linked.get(occurrence.payload.id)
        }

    def unit_of_work(self):
        return self._store.begin()

    def conflicting_keys(
        self,
        uow: LoanUnitOfWork,
        contract: LoanContract,
        occurrences: list[Occurrence],
    ) -> list[IdempotencyKey]:
        """Return payments completed or materialized since the pre-check."""
        if not occurrences:
            return []
        payment_ids = [occurrence.payload.id for occurrence in occurrences]
        statuses = uow.payment_statuses(payment_ids)
        linked = uow.existing_transactions(payment_ids)
        return [
            occurrence.key
            for occurrence in occurrences
            if statuses.get(occurrence.payload.id) != PENDING
            or linked.get(occurrence.payload.id)
        ]

    def materialize(
        self,
        uow: LoanUnitOfWork,
        contract: LoanContract,
        occurrence: Occurrence,
    ) -> None:
        """Write principal, interest, and balance entries of one payment.

        The BALANCE snapshot on the liability account is written for every
        period, including periods that repay no principal.
        """
        payment: LoanPayment = occurrence.payload
        principal_id = interest_id = None
        if contract.payment_account_id:
            if payment.principal_amount > 0:
                principal_id = uow.insert_transaction(
                    self._transaction(
                        contract,
                        payment,
                        ROLE_PRINCIPAL,
                        contract.payment_account_id,
                        EXPENSE,
                        payment.principal_amount,
                    )
                )
            if payment.interest_amount > 0:
                interest_id = uow.insert_transaction(
                    self._transaction(
                        contract,
                        payment,
                        ROLE_INTEREST,
                        contract.payment_account_id,
                        EXPENSE,
                        payment.interest_amount,
                    )
                )
        balance_id = uow.insert_transaction(
            self._transaction(
                contract,
                payment,
                ROLE_BALANCE,
                contract.account_id,
                BALANCE,
                payment.remaining_balance,
            )
        )
        uow.complete_payment(
            payment.id,
            principal_id,
            interest_id,
            balance_id,
            self._clock(),
        )

    def _transaction(
        self,
        contract: LoanContract,
        payment: LoanPayment,
        role: str,
        account_id: str,
        transaction_type: str,
        amount: Decimal,
    ) -> NewTransaction:
        return NewTransaction(
            user_id=contract.user_id,
            account_id=account_id,
            currency_id=contract.currency_id,
            type=transaction_type,
            amount=amount,
            date=payment.payment_date,
            description=self._texts.description(contract, payment, role),
            notes=self._texts.notes(contract, payment, role),
            loan_contract_id=contract.id,
            loan_payment_id=payment.id,
            generated_role=role,
        )

    def advance_cursor(
        self,
        uow: LoanUnitOfWork,
        contract: LoanContract,
        occurrences: list[Occurrence],
    ) -> None:
        """Link pre-existing entries and move the contract cursor.

        A payment whose entries already exist is completed with links to
        them. The contract is deactivated once the last period is paid,
        and only if it was active.
        """
        existing = [
            occurrence
            for occurrence in occurrences
            if occurrence.outcome == OUTCOME_SKIPPED_EXISTING
        ]
        if existing:
            linked = uow.existing_transactions(
                occurrence.payload.id for occurrence in existing
            )
            for occurrence in existing:
                roles = linked.get(occurrence.payload.id, {})
                uow.complete_payment(
                    occurrence.payload.id,
                    roles.get(ROLE_PRINCIPAL),
                    roles.get(ROLE_INTEREST),
                    roles.get(ROLE_BALANCE),
                    self._clock(),
                )

        paid_periods = [
            occurrence.period
            for occurrence in occurrences
            if occurrence.outcome
            in (OUTCOME_MATERIALIZED, OUTCOME_SKIPPED_EXISTING)
        ]
        if not paid_periods and not contract.is_active:
            return
        current_period = max([contract.current_period, *paid_periods])
        finished = current_period >= contract.total_periods
        is_active = contract.is_active and not finished
        uow.save_cursor(
            contract.id,
            current_period,
            next_payment_date_after(contract, current_period),
            is_active,
        )


class RunLoanBatchUseCase:
    """Materialize due loan payments of a user."""

    def __init__(
        self,
        store: LoanStorePort,
        translator: TranslatorPort,
        sync_status: SyncStatusPort | None = None,
        future_data_days: int = 0,
        logger=None,
        today: Callable[[], date] = date.today,
    ) -> None:
        """Initialize the use case.

        Args:
            store: Port persisting loan contracts and payments.
            translator: Port resolving default transaction texts.
            sync_status: Optional port holding per-user look-ahead.
            future_data_days: Default look-ahead of the horizon.
            logger: Optional logger compatible with logging.Logger-like API.
            today: Clock returning the current local date.
        """
        self._kind = LoanRecipeKind(store, translator)
        self._sync_status = sync_status
        self._future_data_days = future_data_days
        self._logger = logger or get_app_logger()
        self._materializer = BatchMaterializer(logger=self._logger)
        self._today = today

    def run(self, user_id: str) -> BatchResult:
        """Run the batch; failures are returned in ``errors``, never raised."""
        try:
            horizon = resolve_horizon(
                user_id,
                self._today(),
                self._future_data_days,
                self._sync_status,
            )
        except Exception as exc:
            self._logger.exception(f"Cannot resolve horizon for {user_id}: {exc}")
            return BatchResult(errors=[f"{self._kind.name}: {exc}"])
        return self._materializer.run(self._kind, user_id, horizon)


__all__ = [
    "LoanRecipeKind",
    "LoanTextBuilder",
    "RunLoanBatchUseCase",
    "next_payment_date_after",
]
