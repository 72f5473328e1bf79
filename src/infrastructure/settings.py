"""Settings helpers for infrastructure adapters."""

from dataclasses import dataclass
import os

import dotenv

from src.infrastructure.logging.logger import get_app_logger


@dataclass(frozen=True)
class LedgerSettings:
    """Runtime settings of the ledger batch and orchestrator.

    Attributes:
        future_data_days: Default look-ahead of the batch horizon in days.
        batch_timeout_seconds: Wall-clock bound of one orchestrator run.
        sync_interval_hours: Minimum age of the last sync before a new run.
        base_currency: Default currency for converted totals.
    """

    future_data_days: int = 0
    batch_timeout_seconds: float = 300.0
    sync_interval_hours: float = 6.0
    base_currency: str = "USD"

    @classmethod
    def from_env(cls) -> "LedgerSettings":
        """Build settings from environment variables.

        Returns:
            LedgerSettings: Settings sourced from environment variables,
            falling back to defaults for missing or invalid values.
        """
        dotenv.load_dotenv()
        logger = get_app_logger()
        defaults = cls()
        future_days = cls._parse_number(
            "LEDGER_FUTURE_DATA_DAYS",
            defaults.future_data_days,
            int,
            logger,
        )
        if future_days < 0:
            logger.warning(
                "LEDGER_FUTURE_DATA_DAYS cannot be negative; using 0"
            )
            future_days = 0
        base_currency = (
            os.getenv("LEDGER_BASE_CURRENCY", defaults.base_currency)
            .strip()
            .upper()
        ) or defaults.base_currency
        return cls(
            future_data_days=future_days,
            batch_timeout_seconds=cls._parse_number(
                "LEDGER_BATCH_TIMEOUT_SECONDS",
                defaults.batch_timeout_seconds,
                float,
                logger,
            ),
            sync_interval_hours=cls._parse_number(
                "LEDGER_SYNC_INTERVAL_HOURS",
                defaults.sync_interval_hours,
                float,
                logger,
            ),
            base_currency=base_currency,
        )

    @staticmethod
    def _parse_number(name: str, default, cast, logger):
        """Parse a numeric environment variable.

        Args:
            name: Environment variable name.
            default: Value used when the variable is unset or invalid.
            cast: ``int`` or ``float``.
            logger: Logger used for warnings.

        Returns:
            The parsed value or ``default``.
        """
        raw = os.getenv(name)
        if raw is None or not raw.strip():
            return default
        try:
            return cast(raw.strip())
        except ValueError:
            logger.warning(f"Invalid value for {name}: {raw!r}; using {default}")
            return default


__all__ = ["LedgerSettings"]
