"""Configuration management for smarta."""

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from smarta.exceptions import ConfigurationError


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = "localhost"
    port: int = 5432
    database: str = "smarta"
    user: str = "postgres"
    password: str = "postgres"

    @property
    def connection_string(self) -> str:
        """Get connection string."""
        return f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class MpesaConfig:
    """Hosted M-Pesa payment function configuration."""

    functions_url: str = "http://localhost:54321/functions/v1"
    api_key: str = ""
    timeout: float = 30.0

    @property
    def initiate_url(self) -> str:
        """URL of the payment initiation function."""
        return f"{self.functions_url.rstrip('/')}/mpesa-payment/initiate"

    @property
    def status_url(self) -> str:
        """URL of the payment status function."""
        return f"{self.functions_url.rstrip('/')}/mpesa-payment/status"


@dataclass
class BillingConfig:
    """Billing defaults."""

    currency: str = "KES"
    default_rate_per_unit: Decimal = Decimal("150.00")
    default_service_charge: Decimal = Decimal("200.00")
    stats_window_days: int = 30


@dataclass
class SmartaConfig:
    """Main configuration for smarta."""

    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    mpesa: MpesaConfig = field(default_factory=MpesaConfig)
    billing: BillingConfig = field(default_factory=BillingConfig)
    seed: int | None = None
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "SmartaConfig":
        """Create config from environment variables."""
        postgres = PostgresConfig(
            host=os.getenv("POSTGRES_HOST", "localhost"),
            port=_env_int("POSTGRES_PORT", 5432),
            database=os.getenv("POSTGRES_DB", "smarta"),
            user=os.getenv("POSTGRES_USER", "postgres"),
            password=os.getenv("POSTGRES_PASSWORD", "postgres"),
        )

        mpesa = MpesaConfig(
            functions_url=os.getenv("SMARTA_FUNCTIONS_URL", "http://localhost:54321/functions/v1"),
            api_key=os.getenv("SMARTA_ANON_KEY", ""),
            timeout=_env_float("MPESA_TIMEOUT", 30.0),
        )

        billing = BillingConfig(
            currency=os.getenv("CURRENCY", "KES"),
            default_rate_per_unit=_env_decimal("DEFAULT_RATE_PER_UNIT", "150.00"),
            default_service_charge=_env_decimal("DEFAULT_SERVICE_CHARGE", "200.00"),
            stats_window_days=_env_int("STATS_WINDOW_DAYS", 30),
        )

        log_format = os.getenv("LOG_FORMAT", "standard")
        if log_format not in ("standard", "json"):
            raise ConfigurationError(f"LOG_FORMAT must be 'standard' or 'json', got {log_format!r}")

        return cls(
            postgres=postgres,
            mpesa=mpesa,
            billing=billing,
            seed=_env_int("SEED", None),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=log_format,
        )


def _env_int(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


def _env_decimal(name: str, default: str) -> Decimal:
    raw = os.getenv(name) or default
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise ConfigurationError(f"{name} must be a decimal amount, got {raw!r}") from None
