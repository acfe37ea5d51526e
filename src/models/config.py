"""Application configuration model using pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Config(BaseSettings):
    """Application configuration loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    competitors_file: str = "config/competitors.json"
    database_path: str = "data/snapshots.db"
    results_path: str = "scrape-results.json"
    webhook_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("webhook_url", "apps_script_webhook_url"),
    )
    log_level: str = "INFO"
    max_fetch_attempts: int = 3
    fetch_timeout_seconds: float = 30.0
    backoff_multiplier: float = 2.0
    page_delay_seconds: float = 2.0
    delivery_delay_seconds: float = 0.5
    max_workers: int = 1
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator("webhook_url")
    @classmethod
    def validate_webhook_url(cls, value: str | None) -> str | None:
        """Webhook URL must be http(s); blank means delivery is disabled."""
        if value is None or not value.strip():
            return None
        stripped = value.strip()
        if not stripped.startswith(("http://", "https://")):
            msg = "webhook_url must start with http:// or https://"
            raise ValueError(msg)
        return stripped

    @field_validator("database_path", "results_path")
    @classmethod
    def validate_output_path(cls, value: str) -> str:
        """Ensure parent directory exists, creating it if necessary."""
        parent = Path(value).parent
        parent.mkdir(parents=True, exist_ok=True)
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Log level must be a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            msg = f"log_level must be one of {', '.join(sorted(valid_levels))}"
            raise ValueError(msg)
        return upper_value

    @field_validator("max_fetch_attempts")
    @classmethod
    def validate_max_fetch_attempts(cls, value: int) -> int:
        """Max fetch attempts must be between 1 and 10."""
        if value < 1 or value > 10:
            msg = "max_fetch_attempts must be between 1 and 10"
            raise ValueError(msg)
        return value

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, value: int) -> int:
        """Max workers must be between 1 and 16."""
        if value < 1 or value > 16:
            msg = "max_workers must be between 1 and 16"
            raise ValueError(msg)
        return value

    @field_validator(
        "fetch_timeout_seconds",
        "backoff_multiplier",
        "page_delay_seconds",
        "delivery_delay_seconds",
    )
    @classmethod
    def validate_non_negative(cls, value: float) -> float:
        """Timeouts and delays must not be negative."""
        if value < 0:
            msg = "timeouts and delays must not be negative"
            raise ValueError(msg)
        return value
