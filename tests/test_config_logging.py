"""Tests for configuration and logging setup."""

import io
import json
import logging
import os
import sys
from decimal import Decimal
from unittest.mock import patch

import pytest

from smarta.config import BillingConfig, MpesaConfig, PostgresConfig, SmartaConfig
from smarta.exceptions import ConfigurationError
from smarta.logging import JsonFormatter, setup_logging


class TestPostgresConfig:
    """Tests for PostgresConfig."""

    def test_default_values(self) -> None:
        """Test default connection settings."""
        config = PostgresConfig()

        assert config.host == "localhost"
        assert config.port == 5432
        assert config.database == "smarta"

    def test_connection_string(self) -> None:
        """Test libpq URL assembly."""
        config = PostgresConfig(host="db", port=6543, database="landlords", user="app", password="secret")

        assert config.connection_string == "postgresql://app:secret@db:6543/landlords"


class TestMpesaConfig:
    """Tests for MpesaConfig."""

    def test_function_urls(self) -> None:
        """Test initiate and status URLs are derived from the functions URL."""
        config = MpesaConfig(functions_url="https://project.example.co/functions/v1/")

        assert config.initiate_url == "https://project.example.co/functions/v1/mpesa-payment/initiate"
        assert config.status_url == "https://project.example.co/functions/v1/mpesa-payment/status"

    def test_default_timeout(self) -> None:
        """Test default HTTP timeout."""
        assert MpesaConfig().timeout == 30.0


class TestBillingConfig:
    """Tests for BillingConfig."""

    def test_default_values(self) -> None:
        """Test billing defaults."""
        config = BillingConfig()

        assert config.currency == "KES"
        assert config.default_rate_per_unit == Decimal("150.00")
        assert config.default_service_charge == Decimal("200.00")
        assert config.stats_window_days == 30


class TestSmartaConfig:
    """Tests for SmartaConfig."""

    def test_default_values(self) -> None:
        """Test top-level defaults."""
        config = SmartaConfig()

        assert config.seed is None
        assert config.log_level == "INFO"
        assert config.log_format == "standard"
        assert isinstance(config.postgres, PostgresConfig)

    def test_from_env_defaults(self) -> None:
        """Test from_env with an empty environment."""
        with patch.dict(os.environ, {}, clear=True):
            config = SmartaConfig.from_env()

        assert config.postgres.host == "localhost"
        assert config.mpesa.api_key == ""
        assert config.billing.stats_window_days == 30
        assert config.seed is None

    def test_from_env_custom(self) -> None:
        """Test from_env reads every setting."""
        env = {
            "POSTGRES_HOST": "db.internal",
            "POSTGRES_PORT": "6432",
            "POSTGRES_DB": "rentals",
            "POSTGRES_USER": "landlord",
            "POSTGRES_PASSWORD": "pw",
            "SMARTA_FUNCTIONS_URL": "https://fn.example.com/functions/v1",
            "SMARTA_ANON_KEY": "anon-key",
            "MPESA_TIMEOUT": "12.5",
            "CURRENCY": "UGX",
            "DEFAULT_RATE_PER_UNIT": "99.50",
            "DEFAULT_SERVICE_CHARGE": "150",
            "STATS_WINDOW_DAYS": "7",
            "SEED": "42",
            "LOG_LEVEL": "DEBUG",
            "LOG_FORMAT": "json",
        }
        with patch.dict(os.environ, env, clear=True):
            config = SmartaConfig.from_env()

        assert config.postgres.connection_string == "postgresql://landlord:pw@db.internal:6432/rentals"
        assert config.mpesa.functions_url == "https://fn.example.com/functions/v1"
        assert config.mpesa.api_key == "anon-key"
        assert config.mpesa.timeout == 12.5
        assert config.billing.currency == "UGX"
        assert config.billing.default_rate_per_unit == Decimal("99.50")
        assert config.billing.default_service_charge == Decimal("150")
        assert config.billing.stats_window_days == 7
        assert config.seed == 42
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    @pytest.mark.parametrize(
        "name,value",
        [
            ("POSTGRES_PORT", "not-a-port"),
            ("MPESA_TIMEOUT", "soon"),
            ("DEFAULT_RATE_PER_UNIT", "cheap"),
            ("STATS_WINDOW_DAYS", "7.5"),
            ("SEED", "abc"),
        ],
    )
    def test_from_env_invalid_number(self, name: str, value: str) -> None:
        """Test invalid numeric settings raise ConfigurationError."""
        with patch.dict(os.environ, {name: value}, clear=True):
            with pytest.raises(ConfigurationError, match=name):
                SmartaConfig.from_env()

    def test_from_env_invalid_log_format(self) -> None:
        """Test an unknown log format is rejected."""
        with patch.dict(os.environ, {"LOG_FORMAT": "xml"}, clear=True):
            with pytest.raises(ConfigurationError, match="LOG_FORMAT"):
                SmartaConfig.from_env()


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_default(self) -> None:
        """Test default logging setup."""
        setup_logging()

        assert logging.getLogger("smarta").level == logging.INFO
        assert logging.getLogger().level == logging.INFO

    def test_setup_logging_debug(self) -> None:
        """Test debug level logging setup."""
        setup_logging(level="debug")

        assert logging.getLogger().level == logging.DEBUG

    def test_setup_logging_invalid_level(self) -> None:
        """Test an unknown level is rejected."""
        with pytest.raises(ConfigurationError, match="log level"):
            setup_logging(level="LOUD")

    def test_setup_logging_invalid_format(self) -> None:
        """Test an unknown format is rejected."""
        with pytest.raises(ConfigurationError, match="log format"):
            setup_logging(format_type="xml")

    def test_single_handler(self) -> None:
        """Test repeated setup replaces the handler instead of stacking."""
        setup_logging()
        handler = setup_logging()

        assert logging.getLogger().handlers == [handler]

    def test_json_format_handler(self) -> None:
        """Test the json format installs JsonFormatter."""
        handler = setup_logging(format_type="json")

        assert isinstance(handler.formatter, JsonFormatter)

    def test_writes_to_stream(self) -> None:
        """Test records reach the given stream."""
        stream = io.StringIO()
        setup_logging(stream=stream)

        logging.getLogger("smarta.test").info("Meter %s assigned", "WM-1")

        assert "Meter WM-1 assigned" in stream.getvalue()
        assert "smarta.test" in stream.getvalue()

    def test_external_loggers_quieted(self) -> None:
        """Test library loggers are raised to WARNING."""
        setup_logging(level="DEBUG")

        assert logging.getLogger("urllib3").level == logging.WARNING
        assert logging.getLogger("psycopg").level == logging.WARNING
        assert logging.getLogger("faker").level == logging.WARNING


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def _record(self, **kwargs) -> logging.LogRecord:
        record = logging.LogRecord(
            name="smarta.payments",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="Payment %s recorded",
            args=("PAY_1",),
            exc_info=kwargs.pop("exc_info", None),
        )
        for key, value in kwargs.items():
            setattr(record, key, value)
        return record

    def test_format_basic(self) -> None:
        """Test basic log formatting."""
        data = json.loads(JsonFormatter().format(self._record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "smarta.payments"
        assert data["message"] == "Payment PAY_1 recorded"
        assert "timestamp" in data
        assert "pathname" not in data

    def test_format_extra_fields(self) -> None:
        """Test fields passed through extra are kept."""
        data = json.loads(JsonFormatter().format(self._record(billing_id="bill-1", amount=Decimal("10.50"))))

        assert data["billing_id"] == "bill-1"
        assert data["amount"] == "10.50"

    def test_format_with_exception(self) -> None:
        """Test exception info is included."""
        try:
            raise ValueError("boom")
        except ValueError:
            exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(self._record(exc_info=exc_info)))

        assert "ValueError: boom" in data["exception"]
