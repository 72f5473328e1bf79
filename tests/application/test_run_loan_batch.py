"""Tests for the loan payments batch against a SQLite ledger."""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from src.application.use_cases.batch_materializer import BatchMaterializer
from src.application.use_cases.get_account_balance import (
    GetAccountBalanceUseCase,
)
from src.application.use_cases.manage_loan_contracts import LoanContractService
from src.application.use_cases.run_loan_batch import (
    LoanRecipeKind,
    RunLoanBatchUseCase,
)
from src.domain.errors import ConcurrencyConflictError
from src.domain.models import LoanContractData, NewTransaction
from src.infrastructure.translation import CatalogTranslator


def _create(ledger_db, **overrides):
    fields = dict(
        account_id=ledger_db.mortgage,
        currency_code="USD",
        contract_name="Home loan",
        loan_amount=Decimal("12000"),
        interest_rate=Decimal("0.12"),
        total_periods=3,
        repayment_type="INTEREST_ONLY",
        start_date=date(2024, 1, 15),
        payment_day=15,
        payment_account_id=ledger_db.rent,
    )
    fields.update(overrides)
    service = LoanContractService(
        ledger_db.loan_store, ledger_db.ledger, logger=MagicMock()
    )
    return service.create("user-1", LoanContractData(**fields))


def _run(ledger_db, today):
    return RunLoanBatchUseCase(
        ledger_db.loan_store,
        CatalogTranslator(),
        logger=MagicMock(),
        today=lambda: today,
    ).run("user-1")


def _balance(ledger_db, as_of):
    return GetAccountBalanceUseCase(ledger_db.ledger, logger=MagicMock()).execute(
        ledger_db.mortgage, as_of=as_of
    )


def test_interest_only_writes_balance_snapshot_every_period(ledger_db) -> None:
    """Periods without principal still anchor the liability balance."""
    contract = _create(ledger_db)

    result = _run(ledger_db, date(2024, 2, 20))

    assert result.processed == 2
    assert result.errors == []
    expenses = ledger_db.ledger.fetch_transactions([ledger_db.rent])
    assert [(tx.generated_role, tx.amount) for tx in expenses] == [
        ("INTEREST", Decimal("120.00")),
        ("INTEREST", Decimal("120.00")),
    ]
    snapshots = ledger_db.ledger.fetch_transactions([ledger_db.mortgage])
    assert [(tx.type, tx.amount, tx.date) for tx in snapshots] == [
        ("BALANCE", Decimal("12000.00"), date(2024, 1, 15)),
        ("BALANCE", Decimal("12000.00"), date(2024, 2, 15)),
    ]
    assert _balance(ledger_db, date(2024, 2, 20)) == {"USD": Decimal("12000.00")}

    payments = ledger_db.loan_store.fetch_payments(contract.id)
    assert [p.status for p in payments] == ["COMPLETED", "COMPLETED", "PENDING"]
    assert payments[0].principal_transaction_id is None
    assert payments[0].balance_transaction_id == snapshots[0].id
    assert payments[0].processed_at is not None

    stored = ledger_db.loan_store.fetch_contract(contract.id)
    assert stored.current_period == 2
    assert stored.next_payment_date == date(2024, 3, 15)
    assert stored.is_active is True


def test_last_period_repays_and_deactivates(ledger_db) -> None:
    contract = _create(ledger_db)
    _run(ledger_db, date(2024, 2, 20))

    again = _run(ledger_db, date(2024, 2, 20))
    final = _run(ledger_db, date(2024, 3, 31))

    assert again.processed == 0
    assert final.processed == 1
    roles = sorted(
        tx.generated_role
        for tx in ledger_db.ledger.fetch_transactions([ledger_db.rent])
        if tx.date == date(2024, 3, 15)
    )
    assert roles == ["INTEREST", "PRINCIPAL"]
    assert _balance(ledger_db, date(2024, 3, 31)) == {"USD": Decimal("0.00")}

    stored = ledger_db.loan_store.fetch_contract(contract.id)
    assert stored.current_period == 3
    assert stored.next_payment_date is None
    assert stored.is_active is False
    assert _run(ledger_db, date(2024, 12, 31)).processed == 0


def test_paused_contract_reports_due_payments_as_limited(ledger_db) -> None:
    """An inactive contract writes nothing and keeps its cursor."""
    contract = _create(ledger_db)
    paused = replace(
        ledger_db.loan_store.fetch_contract(contract.id), is_active=False
    )
    with ledger_db.loan_store.begin() as uow:
        uow.update_contract(paused)

    result = _run(ledger_db, date(2024, 2, 20))

    assert result.processed == 0
    assert result.skipped_limit == 2
    assert result.errors == []
    assert ledger_db.ledger.fetch_transactions(
        [ledger_db.rent, ledger_db.mortgage]
    ) == []
    payments = ledger_db.loan_store.fetch_payments(contract.id)
    assert [p.status for p in payments] == ["PENDING"] * 3
    stored = ledger_db.loan_store.fetch_contract(contract.id)
    assert stored.is_active is False
    assert stored.current_period == 0
    assert stored.next_payment_date == date(2024, 1, 15)


def test_default_texts_come_from_catalog(ledger_db) -> None:
    _create(ledger_db)

    _run(ledger_db, date(2024, 1, 15))

    [interest] = ledger_db.ledger.fetch_transactions([ledger_db.rent])
    [snapshot] = ledger_db.ledger.fetch_transactions([ledger_db.mortgage])
    assert interest.description == "Home loan - Period 1 Interest"
    assert interest.notes == "Loan contract: Home loan"
    assert snapshot.description == "Home loan - Period 1 Balance Update"
    assert snapshot.notes == (
        "Loan contract: Home loan, remaining balance: 12,000.00"
    )


def test_user_templates_override_catalog(ledger_db) -> None:
    _create(
        ledger_db,
        transaction_description="{contractName} #{period}",
        transaction_notes="left {remainingBalance}",
    )

    _run(ledger_db, date(2024, 1, 15))

    [snapshot] = ledger_db.ledger.fetch_transactions([ledger_db.mortgage])
    assert snapshot.description == "Home loan #1"
    assert snapshot.notes == "left 12,000.00"


def test_without_payment_account_only_snapshots_are_written(ledger_db) -> None:
    _create(ledger_db, payment_account_id=None)

    result = _run(ledger_db, date(2024, 3, 15))

    assert result.processed == 3
    assert ledger_db.ledger.fetch_transactions([ledger_db.rent]) == []
    assert len(ledger_db.ledger.fetch_transactions([ledger_db.mortgage])) == 3


def test_payment_with_existing_entries_is_linked_not_duplicated(ledger_db) -> None:
    contract = _create(ledger_db)
    first = ledger_db.loan_store.fetch_payments(contract.id)[0]
    existing_id = ledger_db.ledger.add_transaction(
        NewTransaction(
            user_id="user-1",
            account_id=ledger_db.mortgage,
            currency_id=ledger_db.usd,
            type="BALANCE",
            amount=Decimal("12000"),
            date=first.payment_date,
            description="Imported",
            loan_contract_id=contract.id,
            loan_payment_id=first.id,
            generated_role="BALANCE",
        )
    )

    result = _run(ledger_db, date(2024, 2, 20))

    assert result.processed == 1
    assert result.skipped_existing == 1
    payments = ledger_db.loan_store.fetch_payments(contract.id)
    assert payments[0].status == "COMPLETED"
    assert payments[0].balance_transaction_id == existing_id
    assert len(ledger_db.ledger.fetch_transactions([ledger_db.mortgage])) == 2
    assert ledger_db.loan_store.fetch_contract(contract.id).current_period == 2


def test_concurrent_loan_run_is_rejected(ledger_db) -> None:
    contract = _create(ledger_db)
    kind = LoanRecipeKind(ledger_db.loan_store, CatalogTranslator())
    materializer = BatchMaterializer(logger=MagicMock())
    horizon = date(2024, 1, 31)

    plan_b = materializer.plan(
        kind, ledger_db.loan_store.fetch_contract(contract.id), horizon
    )
    materializer.run(kind, "user-1", horizon)

    with pytest.raises(ConcurrencyConflictError):
        materializer.apply(kind, plan_b)

    assert len(ledger_db.ledger.fetch_transactions([ledger_db.mortgage])) == 1
