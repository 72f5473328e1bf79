"""Tests for infrastructure settings."""

from unittest.mock import MagicMock

import pytest

from src.infrastructure import settings as settings_module
from src.infrastructure.settings import LedgerSettings

ENV_NAMES = (
    "LEDGER_FUTURE_DATA_DAYS",
    "LEDGER_BATCH_TIMEOUT_SECONDS",
    "LEDGER_SYNC_INTERVAL_HOURS",
    "LEDGER_BASE_CURRENCY",
)


@pytest.fixture
def logger(monkeypatch):
    """Isolate settings from .env files and capture warnings."""
    fake = MagicMock()
    monkeypatch.setattr(settings_module.dotenv, "load_dotenv", lambda: None)
    monkeypatch.setattr(settings_module, "get_app_logger", lambda: fake)
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    return fake


def test_from_env_defaults(logger) -> None:
    """Unset variables should fall back to defaults."""
    settings = LedgerSettings.from_env()

    assert settings == LedgerSettings()
    logger.warning.assert_not_called()


def test_from_env_reads_values(monkeypatch, logger) -> None:
    monkeypatch.setenv("LEDGER_FUTURE_DATA_DAYS", "30")
    monkeypatch.setenv("LEDGER_BATCH_TIMEOUT_SECONDS", "12.5")
    monkeypatch.setenv("LEDGER_SYNC_INTERVAL_HOURS", "1")
    monkeypatch.setenv("LEDGER_BASE_CURRENCY", " eur ")

    settings = LedgerSettings.from_env()

    assert settings.future_data_days == 30
    assert settings.batch_timeout_seconds == 12.5
    assert settings.sync_interval_hours == 1.0
    assert settings.base_currency == "EUR"


def test_from_env_rejects_invalid_values(monkeypatch, logger) -> None:
    """Invalid or negative values should warn and fall back."""
    monkeypatch.setenv("LEDGER_FUTURE_DATA_DAYS", "-3")
    monkeypatch.setenv("LEDGER_BATCH_TIMEOUT_SECONDS", "soon")

    settings = LedgerSettings.from_env()

    assert settings.future_data_days == 0
    assert settings.batch_timeout_seconds == 300.0
    assert logger.warning.call_count == 2
