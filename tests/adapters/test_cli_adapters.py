"""Tests for the CLI adapters."""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock

from src.adapters import init_schema_cli, print_balances_cli, run_sync_cli
from src.domain.models import NewTransaction, SyncRunResult
from src.infrastructure import container
from src.infrastructure.schema import SCHEMA_STATEMENTS


def test_run_sync_requires_user(monkeypatch, capsys):
    fake_logger = MagicMock()
    monkeypatch.setattr(run_sync_cli, "get_app_logger", lambda: fake_logger)
    monkeypatch.delenv("LEDGER_USER_ID", raising=False)

    assert run_sync_cli.main() == 2
    fake_logger.error.assert_called_once()
    assert capsys.readouterr().out == ""


def test_run_sync_prints_outcome_and_errors(monkeypatch, capsys):
    """The CLI should forward force and print the orchestrator result."""
    fake_sync = MagicMock()
    fake_sync.trigger.return_value = SyncRunResult(
        status="failed",
        processed_recurring=2,
        processed_loans=1,
        errors=["loan c1: boom"],
    )
    monkeypatch.setattr(run_sync_cli, "get_app_logger", lambda: MagicMock())
    monkeypatch.setattr(run_sync_cli, "build_ledger_sync", lambda: fake_sync)
    monkeypatch.setenv("LEDGER_USER_ID", "user-1")
    monkeypatch.setenv("LEDGER_SYNC_FORCE", "Yes")

    exit_code = run_sync_cli.main()

    assert exit_code == 1
    fake_sync.trigger.assert_called_once_with("user-1", force=True)
    out = capsys.readouterr().out
    assert "Ledger sync failed: recurring=2, loans=1" in out
    assert "  error: loan c1: boom" in out


def test_run_sync_success_exit_code(monkeypatch, capsys):
    fake_sync = MagicMock()
    fake_sync.trigger.return_value = SyncRunResult(status="already_synced")
    monkeypatch.setattr(run_sync_cli, "get_app_logger", lambda: MagicMock())
    monkeypatch.setattr(run_sync_cli, "build_ledger_sync", lambda: fake_sync)
    monkeypatch.setenv("LEDGER_USER_ID", "user-1")
    monkeypatch.delenv("LEDGER_SYNC_FORCE", raising=False)

    assert run_sync_cli.main() == 0
    fake_sync.trigger.assert_called_once_with("user-1", force=False)


def test_init_schema_checks_connection_and_applies_ddl(
    monkeypatch, capsys, ledger_db
):
    log_messages: list[str] = []
    fake_logger = SimpleNamespace(
        info=log_messages.append,
        debug=lambda msg: None,
    )
    adapter = SimpleNamespace(get_ledger_engine=lambda: ledger_db.engine)
    monkeypatch.setattr(init_schema_cli, "build_database_adapter", lambda: adapter)
    monkeypatch.setattr(init_schema_cli, "get_app_logger", lambda: fake_logger)

    init_schema_cli.main()

    assert "sqlite" in log_messages[0]
    assert capsys.readouterr().out == (
        f"Applied {len(SCHEMA_STATEMENTS)} schema statements "
        "to the ledger database.\n"
    )


def test_print_balances_renders_accounts_and_net_worth(
    monkeypatch, capsys, ledger_db
):
    ledger_db.ledger.add_transaction(
        NewTransaction(
            user_id="user-1",
            account_id=ledger_db.checking,
            currency_id=ledger_db.usd,
            type="BALANCE",
            amount=Decimal("1234.5"),
            date=date(2024, 1, 1),
            description="Opening balance",
        )
    )
    monkeypatch.setattr(
        print_balances_cli, "build_database_adapter", lambda: ledger_db.db_port
    )
    monkeypatch.setattr(print_balances_cli, "get_app_logger", lambda: MagicMock())
    monkeypatch.setattr(container, "get_app_logger", lambda: MagicMock())
    monkeypatch.setattr(
        print_balances_cli.LedgerSettings,
        "from_env",
        classmethod(lambda cls: cls(base_currency="USD")),
    )
    monkeypatch.setenv("LEDGER_USER_ID", "user-1")
    monkeypatch.setenv("LEDGER_AS_OF", "2024-01-31")

    assert print_balances_cli.main() == 0

    out = capsys.readouterr().out
    assert "Balances as of 2024-01-31" in out
    assert "  [ASSET] Checking: 1,234.50 USD" in out
    assert "  [EXPENSE] Rent: 0.00" in out
    assert "Net worth (USD): 1,234.50" in out


def test_print_balances_ignores_invalid_date(monkeypatch):
    logger = MagicMock()

    assert print_balances_cli._parse_date("31/01/2024", logger) is None
    assert print_balances_cli._parse_date("2024-01-31", logger) == date(
        2024, 1, 31
    )
    logger.warning.assert_called_once()
