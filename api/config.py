"""
SmartHome BOQ API Configuration
Environment variable loading with validation and safe defaults
"""
import os
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

STORE_BACKENDS = ("memory", "supabase")


class ConfigError(Exception):
    """Configuration validation error"""
    pass


class Config:
    """Application configuration with environment variable validation"""

    # Application configuration
    APP_ENV: str = "development"
    APP_LOG_LEVEL: str = "INFO"

    # Store configuration
    STORE_BACKEND: str = "memory"
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""

    # Pricing configuration
    DEFAULT_TAX_PERCENT: Decimal = Decimal("18")
    DEFAULT_UNIT_PRICE: Decimal = Decimal("500")

    # Quotation configuration
    DOCUMENT_NUMBER_PREFIX: str = "PI"
    DOCUMENT_NUMBER_MAX_ATTEMPTS: int = 5
    QUOTATION_VALIDITY_DAYS: int = 30

    # HTTP configuration
    RATE_LIMIT: str = "100/minute"
    ALLOWED_ORIGINS: list = ["http://localhost:3000", "http://localhost:8000", "http://127.0.0.1:3000"]

    def __init__(self):
        """Initialize and validate configuration"""
        self._load_env_vars()
        self._load_required_env_vars()
        self._validate_config()

    @staticmethod
    def _decimal(name: str, default: Decimal) -> Decimal:
        raw = os.getenv(name)
        if raw is None:
            return default
        try:
            return Decimal(raw)
        except InvalidOperation:
            raise ConfigError(f"Invalid {name}: {raw!r} is not a number")

    @staticmethod
    def _int(name: str, default: int) -> int:
        raw = os.getenv(name)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            raise ConfigError(f"Invalid {name}: {raw!r} is not an integer")

    def _load_env_vars(self) -> None:
        """Load environment variables with defaults"""
        self.APP_ENV = os.getenv("APP_ENV", self.APP_ENV)
        self.APP_LOG_LEVEL = os.getenv("APP_LOG_LEVEL", self.APP_LOG_LEVEL).upper()

        self.STORE_BACKEND = os.getenv("STORE_BACKEND", self.STORE_BACKEND).lower()

        self.DEFAULT_TAX_PERCENT = self._decimal("DEFAULT_TAX_PERCENT", self.DEFAULT_TAX_PERCENT)
        self.DEFAULT_UNIT_PRICE = self._decimal("DEFAULT_UNIT_PRICE", self.DEFAULT_UNIT_PRICE)

        self.DOCUMENT_NUMBER_PREFIX = os.getenv("DOCUMENT_NUMBER_PREFIX", self.DOCUMENT_NUMBER_PREFIX)
        self.DOCUMENT_NUMBER_MAX_ATTEMPTS = self._int(
            "DOCUMENT_NUMBER_MAX_ATTEMPTS", self.DOCUMENT_NUMBER_MAX_ATTEMPTS
        )
        self.QUOTATION_VALIDITY_DAYS = self._int("QUOTATION_VALIDITY_DAYS", self.QUOTATION_VALIDITY_DAYS)

        self.RATE_LIMIT = os.getenv("RATE_LIMIT", self.RATE_LIMIT)
        origins = os.getenv("ALLOWED_ORIGINS")
        if origins:
            self.ALLOWED_ORIGINS = [o.strip() for o in origins.split(",") if o.strip()]

    def _load_required_env_vars(self) -> None:
        """Supabase credentials are required only for the supabase backend"""
        if self.STORE_BACKEND != "supabase":
            return

        required_vars = {
            "SUPABASE_URL": "Supabase project URL",
            "SUPABASE_SERVICE_ROLE_KEY": "Supabase service role key",
        }

        missing_vars = []
        for var_name, description in required_vars.items():
            value = os.getenv(var_name)
            if not value:
                missing_vars.append(f"{var_name} ({description})")
            else:
                setattr(self, var_name, value)

        if missing_vars:
            raise ConfigError(
                "Missing required environment variables:\n"
                + "\n".join(f"  - {var}" for var in missing_vars)
            )

    def _validate_config(self) -> None:
        """Validate configuration values"""
        if self.STORE_BACKEND not in STORE_BACKENDS:
            raise ConfigError(
                f"Invalid STORE_BACKEND: {self.STORE_BACKEND!r}, expected one of {STORE_BACKENDS}"
            )

        if self.STORE_BACKEND == "supabase" and not self.SUPABASE_URL.startswith(("http://", "https://")):
            raise ConfigError(
                "Invalid SUPABASE_URL: must start with http:// or https://"
            )

        if self.DEFAULT_TAX_PERCENT < 0:
            raise ConfigError("DEFAULT_TAX_PERCENT must be non-negative")

        if self.DEFAULT_UNIT_PRICE <= 0:
            raise ConfigError("DEFAULT_UNIT_PRICE must be positive")

        if self.DOCUMENT_NUMBER_MAX_ATTEMPTS < 1:
            raise ConfigError("DOCUMENT_NUMBER_MAX_ATTEMPTS must be at least 1")

        if self.QUOTATION_VALIDITY_DAYS < 1:
            raise ConfigError("QUOTATION_VALIDITY_DAYS must be at least 1")

        if not self.DOCUMENT_NUMBER_PREFIX:
            raise ConfigError("DOCUMENT_NUMBER_PREFIX must not be empty")

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.APP_ENV.lower() == "development"


# Global configuration instance
try:
    config = Config()
except ConfigError as e:
    print(f"Configuration Error: {e}")
    print("\nPlease ensure all required environment variables are set.")
    raise
