"""Currency conversion backed by the stored exchange-rate table."""

from datetime import date
from decimal import Decimal

from sqlalchemy import text

from src.application.ports.currency import CurrencyConverterPort
from src.application.ports.database import DatabaseEnginePort
from src.domain.models import ConversionResult
from src.domain.services.normalization import normalize_currency_code
from src.infrastructure.logging.logger import get_app_logger
from src.infrastructure.row_utils import new_id, to_db_date
from src.utils.decimal_utils import round_minor, try_coerce_decimal


SELECT_RATE_SQL = text(
    """
    SELECT rate
    FROM exchange_rates
    WHERE from_currency = :from_currency
      AND to_currency = :to_currency
      AND effective_date <= :as_of
    ORDER BY effective_date DESC
    LIMIT 1
    """
)

INSERT_RATE_SQL = text(
    """
    INSERT INTO exchange_rates (
        id, from_currency, to_currency, rate, effective_date
    )
    VALUES (:id, :from_currency, :to_currency, :rate, :effective_date)
    """
)


class SqlAlchemyRateTableConverter(CurrencyConverterPort):
    """Convert amounts with the latest stored rate effective on a date.

    A missing direct pair falls back to the inverse of the opposite pair.
    Rates are never fetched from the network.
    """

    def __init__(self, db_port: DatabaseEnginePort, logger=None) -> None:
        """Initialize the converter.

        Args:
            db_port: Port providing access to the ledger engine.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._db_port = db_port
        self._logger = logger or get_app_logger()

    def convert(
        self,
        amount: Decimal,
        from_currency: str,
        to_currency: str,
        as_of: date | None = None,
    ) -> ConversionResult:
        source = normalize_currency_code(from_currency)
        target = normalize_currency_code(to_currency)
        if source is None or target is None:
            return ConversionResult(
                converted_amount=None,
                rate=None,
                success=False,
                error="Missing currency code",
            )
        if source == target:
            return ConversionResult(
                converted_amount=amount,
                rate=Decimal("1"),
                success=True,
            )
        rate = self.find_rate(source, target, as_of or date.today())
        if rate is None:
            message = f"No exchange rate for {source}->{target}"
            self._logger.warning(message)
            return ConversionResult(
                converted_amount=None,
                rate=None,
                success=False,
                error=message,
            )
        return ConversionResult(
            converted_amount=round_minor(amount * rate),
            rate=rate,
            success=True,
        )

    def find_rate(
        self,
        source: str,
        target: str,
        as_of: date,
    ) -> Decimal | None:
        """Return the rate effective on ``as_of``, or None when unknown."""
        engine = self._db_port.get_ledger_engine()
        with engine.connect() as conn:
            direct = conn.execute(
                SELECT_RATE_SQL,
                {
                    "from_currency": source,
                    "to_currency": target,
                    "as_of": to_db_date(as_of),
                },
            ).first()
            if direct is not None:
                return try_coerce_decimal(direct.rate)
            inverse = conn.execute(
                SELECT_RATE_SQL,
                {
                    "from_currency": target,
                    "to_currency": source,
                    "as_of": to_db_date(as_of),
                },
            ).first()
        if inverse is None:
            return None
        inverse_rate = try_coerce_decimal(inverse.rate)
        if not inverse_rate:
            return None
        return Decimal("1") / inverse_rate

    def add_rate(
        self,
        from_currency: str,
        to_currency: str,
        rate,
        effective_date: date,
    ) -> str:
        """Store a rate and return its identifier.

        Raises:
            ValueError: If a currency code is blank or the rate is not
                positive.
        """
        source = normalize_currency_code(from_currency)
        target = normalize_currency_code(to_currency)
        value = try_coerce_decimal(rate)
        if source is None or target is None:
            raise ValueError("Both currency codes are required")
        if value is None or value <= 0:
            raise ValueError(f"Exchange rate must be positive: {rate!r}")
        rate_id = new_id()
        engine = self._db_port.get_ledger_engine()
        with engine.begin() as conn:
            conn.execute(
                INSERT_RATE_SQL,
                {
                    "id": rate_id,
                    "from_currency": source,
                    "to_currency": target,
                    "rate": str(value),
                    "effective_date": to_db_date(effective_date),
                },
            )
        return rate_id


__all__ = ["SqlAlchemyRateTableConverter"]
