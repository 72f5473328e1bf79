"""Use cases managing loan contracts and their payment schedules."""

from dataclasses import replace
from decimal import Decimal
import uuid

from src.application.ports.ledger_repository import LedgerRepositoryPort
from src.application.ports.loan_store import LoanStorePort
from src.application.use_cases.run_loan_batch import next_payment_date_after
from src.domain.constants import COMPLETED
from src.domain.errors import NotFoundError, ValidationError
from src.domain.models import (
    LoanContract,
    LoanContractData,
    LoanPayment,
    NewLoanPayment,
    ResetPaymentsResult,
)
from src.domain.services.amortization import calculate_schedule
from src.domain.services.recurrence import payment_date_for_period
from src.domain.services.validation import loan_contract_errors
from src.infrastructure.logging.logger import get_app_logger
from src.utils.decimal_utils import coerce_decimal, round_minor


def build_payments(
    contract: LoanContract,
    principal: Decimal,
    first_period: int,
) -> list[NewLoanPayment]:
    """Compute PENDING payments from ``first_period`` to the last period.

    Args:
        contract: Contract providing rate, term, and calendar.
        principal: Balance still owed before ``first_period``.
        first_period: First period to schedule.

    Returns:
        list[NewLoanPayment]: One row per remaining period.
    """
    remaining_periods = contract.total_periods - first_period + 1
    calculation = calculate_schedule(
        principal,
        contract.interest_rate,
        remaining_periods,
        contract.repayment_type,
    )
    offset = first_period - 1
    return [
        NewLoanPayment(
            loan_contract_id=contract.id,
            user_id=contract.user_id,
            period=item.period + offset,
            payment_date=payment_date_for_period(
                contract.start_date,
                contract.payment_day,
                item.period + offset,
            ),
            principal_amount=item.principal_amount,
            interest_amount=item.interest_amount,
            total_amount=item.total_amount,
            remaining_balance=item.remaining_balance,
        )
        for item in calculation.schedule
    ]


class LoanContractService:
    """Create and edit loan contracts, and undo processed payments."""

    def __init__(
        self,
        store: LoanStorePort,
        ledger_repository: LedgerRepositoryPort,
        logger=None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Port persisting contracts and payments.
            ledger_repository: Port used to resolve accounts and currencies.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._store = store
        self._ledger = ledger_repository
        self._logger = logger or get_app_logger()

    def create(self, user_id: str, data: LoanContractData) -> LoanContract:
        """Validate a contract and store it with its full PENDING schedule.

        Raises:
            ValidationError: If the contract is rejected.
        """
        currency_id = self._validate(data)
        contract = LoanContract(
            id=uuid.uuid4().hex,
            user_id=user_id,
            account_id=data.account_id,
            currency_id=currency_id,
            contract_name=data.contract_name.strip(),
            loan_amount=round_minor(data.loan_amount),
            interest_rate=coerce_decimal(data.interest_rate),
            total_periods=data.total_periods,
            repayment_type=data.repayment_type,
            start_date=data.start_date,
            payment_day=data.payment_day,
            payment_account_id=data.payment_account_id,
            transaction_description=data.transaction_description,
            transaction_notes=data.transaction_notes,
            is_active=data.is_active,
            current_period=0,
            next_payment_date=data.start_date,
        )
        payments = build_payments(contract, contract.loan_amount, 1)
        with self._store.begin() as uow:
            uow.insert_contract(contract)
            uow.insert_payments(payments)
        self._logger.info(
            f"Created loan contract {contract.id} ({contract.contract_name}) "
            f"with {len(payments)} scheduled payments"
        )
        return contract

    def update_terms(
        self,
        contract_id: str,
        data: LoanContractData,
    ) -> LoanContract:
        """Store new terms and regenerate every PENDING payment.

        Completed payments are kept. The regenerated schedule starts from
        the remaining balance of the last completed period.

        Raises:
            NotFoundError: If the contract does not exist.
            ValidationError: If the new terms are rejected.
        """
        existing = self._get(contract_id)
        payments = self._store.fetch_payments(contract_id)
        completed = [p for p in payments if p.status == COMPLETED]
        last_completed = max(completed, key=lambda p: p.period, default=None)
        last_period = last_completed.period if last_completed else 0

        extra_errors = []
        if isinstance(data.total_periods, int) and data.total_periods <= last_period:
            extra_errors.append(
                f"Total periods must exceed the last completed period "
                f"({last_period})"
            )
        currency_id = self._validate(data, extra_errors)

        principal = (
            last_completed.remaining_balance
            if last_completed
            else round_minor(data.loan_amount)
        )
        current_period = max(existing.current_period, last_period)
        updated = replace(
            existing,
            account_id=data.account_id,
            currency_id=currency_id,
            contract_name=data.contract_name.strip(),
            loan_amount=round_minor(data.loan_amount),
            interest_rate=coerce_decimal(data.interest_rate),
            total_periods=data.total_periods,
            repayment_type=data.repayment_type,
            start_date=data.start_date,
            payment_day=data.payment_day,
            payment_account_id=data.payment_account_id,
            transaction_description=data.transaction_description,
            transaction_notes=data.transaction_notes,
            current_period=current_period,
            is_active=data.is_active and current_period < data.total_periods,
        )
        updated = replace(
            updated,
            next_payment_date=next_payment_date_after(updated, current_period),
        )
        new_payments = build_payments(updated, principal, last_period + 1)
        with self._store.begin() as uow:
            removed = uow.delete_pending_payments(contract_id)
            uow.insert_payments(new_payments)
            uow.update_contract(updated)
        self._logger.info(
            f"Updated loan contract {contract_id}: replaced {removed} pending "
            f"payments with {len(new_payments)}"
        )
        return updated

    def reset_payments(
        self,
        contract_id: str,
        payment_ids: list[str] | None = None,
    ) -> ResetPaymentsResult:
        """Undo processed payments: COMPLETED back to PENDING.

        Linked transactions are deleted and the cursor rolls back to the
        last payment still completed. A contract that had finished is
        reactivated.

        Args:
            contract_id: Contract whose payments are reset.
            payment_ids: Payments to reset; all completed ones when None.

        Raises:
            NotFoundError: If the contract does not exist.
        """
        contract = self._get(contract_id)
        payments = self._store.fetch_payments(contract_id)
        wanted = set(payment_ids) if payment_ids is not None else None
        targets = [
            payment
            for payment in payments
            if payment.status == COMPLETED
            and (wanted is None or payment.id in wanted)
        ]
        if not targets:
            return ResetPaymentsResult(reset_count=0, deleted_transactions=0)

        target_ids = {payment.id for payment in targets}
        still_completed = [
            payment.period
            for payment in payments
            if payment.status == COMPLETED and payment.id not in target_ids
        ]
        current_period = max(still_completed, default=0)
        was_finished = contract.current_period >= contract.total_periods
        is_active = contract.is_active or (
            was_finished and current_period < contract.total_periods
        )

        with self._store.begin() as uow:
            linked = uow.existing_transactions(target_ids)
            transaction_ids = set()
            for payment in targets:
                transaction_ids.update(
                    value
                    for value in (
                        payment.principal_transaction_id,
                        payment.interest_transaction_id,
                        payment.balance_transaction_id,
                    )
                    if value
                )
                transaction_ids.update(linked.get(payment.id, {}).values())
            deleted = uow.delete_transactions(sorted(transaction_ids))
            for payment in targets:
                uow.reset_payment(payment.id)
            uow.save_cursor(
                contract_id,
                current_period,
                next_payment_date_after(contract, current_period),
                is_active,
            )
        self._logger.info(
            f"Reset {len(targets)} payments of loan contract {contract_id}; "
            f"deleted {deleted} transactions"
        )
        return ResetPaymentsResult(
            reset_count=len(targets),
            deleted_transactions=deleted,
        )

    def get_schedule(self, contract_id: str) -> list[LoanPayment]:
        """Return every payment of a contract ordered by period.

        Raises:
            NotFoundError: If the contract does not exist.
        """
        self._get(contract_id)
        return self._store.fetch_payments(contract_id)

    def _get(self, contract_id: str) -> LoanContract:
        contract = self._store.fetch_contract(contract_id)
        if contract is None:
            raise NotFoundError(f"Loan contract {contract_id} does not exist")
        return contract

    def _validate(
        self,
        data: LoanContractData,
        extra_errors: list[str] | None = None,
    ) -> str:
        currency_id = self._ledger.fetch_currency_id(data.currency_code)
        account = self._ledger.fetch_account(data.account_id)
        payment_account = (
            self._ledger.fetch_account(data.payment_account_id)
            if data.payment_account_id
            else None
        )
        errors = loan_contract_errors(
            data, account, payment_account, currency_id
        )
        errors.extend(extra_errors or [])
        if errors:
            raise ValidationError(errors)
        return currency_id


__all__ = ["LoanContractService", "build_payments"]
