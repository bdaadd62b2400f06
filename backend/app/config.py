# backend/app/config.py
"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- ENVIRONMENT: Runtime mode (development, test, production)
- LOG_LEVEL / LOG_FORMAT: Logging verbosity and output format
- RATE_LIMIT_ENABLED: Toggle for the slowapi limiter
- BASE_CURRENCY / DEFAULT_USD_TO_COP_RATE: Common unit for portfolio rollups

Environment-specific behavior:
- test: Plain-text logs by default, suitable for pytest output
- development: Text logs, debug allowed
- production: JSON logs, DEBUG must be off

Configuration is validated on application startup. Invalid configuration
will raise a ValueError with a descriptive message.

Usage:
    from app.config import settings

    if settings.is_production:
        # Production-specific logic
        ...
"""
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Find the .env file in project root (parent of backend/)
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_PROJECT_ROOT = _BACKEND_DIR.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables:
        - ENVIRONMENT: Runtime environment (development, test, production)
        - APP_NAME: Application name (default: "Portfolio Analytics")
        - DEBUG: Enable debug mode (default: False)
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "json" or "text" (default: json in production)

    Analytics Settings:
        - BASE_CURRENCY: Common unit for rollups (default: "COP")
        - DEFAULT_USD_TO_COP_RATE: Fallback rate when none is supplied (default: 3000)
    """

    # Environment mode - determines validation strictness
    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment (development, test, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: Literal["json", "text"] | None = Field(
        default=None,
        description="Log output format (json in production, text otherwise)"
    )

    # Optional - safe defaults
    app_name: str = "Portfolio Analytics"
    debug: bool = False

    # =========================================================================
    # ANALYTICS
    # =========================================================================
    base_currency: str = Field(
        default="COP",
        min_length=3,
        max_length=3,
        description="Common unit every rollup is expressed in"
    )
    default_usd_to_cop_rate: float = Field(
        default=3000.0,
        gt=0,
        description="USD→COP rate used when a request supplies none"
    )

    # =========================================================================
    # RATE LIMITING
    # =========================================================================
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable per-client rate limiting"
    )

    # =========================================================================
    # CORS
    # =========================================================================
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Allowed CORS origins (comma-separated in env var)"
    )
    cors_allow_credentials: bool = Field(
        default=True,
        description="Allow credentials in CORS requests"
    )
    cors_allow_methods: list[str] = Field(
        default=["*"],
        description="Allowed HTTP methods for CORS"
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        description="Allowed HTTP headers for CORS"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("base_currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        """Currency codes are stored upper-case."""
        return v.upper()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Reject unknown logging levels early."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid LOG_LEVEL: {v}")
        return level

    @model_validator(mode="after")
    def validate_environment_config(self) -> "Settings":
        """
        Apply environment-specific defaults and checks.

        Rules:
        - LOG_FORMAT defaults to json in production, text elsewhere
        - production: DEBUG must be disabled
        """
        if self.log_format is None:
            object.__setattr__(
                self, "log_format", "json" if self.environment == "production" else "text"
            )

        if self.environment == "production" and self.debug:
            raise ValueError(
                "DEBUG must be disabled in production environment. "
                "Unset DEBUG or set it to false."
            )

        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"

    @property
    def json_logs(self) -> bool:
        """Check if logs should be emitted as JSON."""
        return self.log_format == "json"


# Create single instance
settings = Settings()
