"""Shared configuration for all services."""
from enum import Enum
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class ConfigurationError(Exception):
    """Raised at startup when a required setting is missing."""


class CheckMode(str, Enum):
    """Which message counts a deployment watches."""
    SINGLE = "single"
    BIDIRECTIONAL = "bidirectional"
    OUTGOING = "outgoing"

    @property
    def needs_counterparty(self) -> bool:
        return self is not CheckMode.SINGLE


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # MongoDB Configuration
    mongo_url: str = "mongodb://localhost:27017"
    mongo_db_name: str = "message_monitor"

    # Redis Configuration
    redis_url: str = "redis://localhost:6379"
    redis_status_channel: str = "job_updates"

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    run_scheduler_in_api: bool = True

    # Warning email addresses (required)
    email_from: Optional[str] = None
    email_to: Optional[str] = None

    # Check Configuration
    check_mode: str = "bidirectional"
    counterparty_identity: Optional[str] = None
    business_day_start_hour: int = Field(8, ge=0, le=23)
    check_timezone: str = "Europe/Brussels"
    first_check_cron: str = "0 12 * * *"
    second_check_cron: str = "0 17 * * *"

    # WebSocket Configuration
    ws_heartbeat_interval: int = 30

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()


def validate_required_settings(config: Settings = None) -> Settings:
    """Fail fast when the service cannot run with the given settings."""
    config = config or settings

    if not config.email_from or not config.email_to:
        raise ConfigurationError(
            "For this service to work the environment variables "
            "EMAIL_FROM and EMAIL_TO should be configured."
        )

    try:
        mode = CheckMode(config.check_mode)
    except ValueError:
        valid = ", ".join(m.value for m in CheckMode)
        raise ConfigurationError(
            f"Unknown CHECK_MODE '{config.check_mode}', expected one of: {valid}"
        )

    if mode.needs_counterparty and not config.counterparty_identity:
        raise ConfigurationError(
            f"CHECK_MODE '{mode.value}' requires COUNTERPARTY_IDENTITY to be configured."
        )

    return config
