"""
Settings and configuration for the Meetings calendar engine.
"""

from typing import Optional

from services.common.logging_config import setup_service_logging
from services.common.settings import (
    AliasChoices,
    BaseSettings,
    Field,
    SettingsConfigDict,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    ics_prod_id: str = Field(
        default="-//Linux Foundation//LFX Meeting Service//EN",
        description="PRODID written into every generated calendar document",
        validation_alias=AliasChoices("ICS_PROD_ID"),
    )

    ics_organizer_email: str = Field(
        default="itx@linuxfoundation.org",
        description="Organizer mailbox used in ORGANIZER properties",
        validation_alias=AliasChoices("ICS_ORGANIZER_EMAIL"),
    )

    ics_organizer_name: str = Field(
        default="ITX",
        description="Organizer display name (CN parameter)",
        validation_alias=AliasChoices("ICS_ORGANIZER_NAME"),
    )

    ics_reminder_minutes: int = Field(
        default=10,
        description="Minutes before start for the VALARM reminder",
        validation_alias=AliasChoices("ICS_REMINDER_MINUTES"),
    )

    ics_max_line_octets: int = Field(
        default=75,
        description="Content line length in octets before folding",
        validation_alias=AliasChoices("ICS_MAX_LINE_OCTETS"),
    )

    dial_in_numbers_url: str = Field(
        default="https://zoom.us/zoomconference",
        description="Page listing local dial-in numbers, shown in descriptions",
        validation_alias=AliasChoices("DIAL_IN_NUMBERS_URL"),
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias=AliasChoices("LOG_LEVEL"),
    )
    log_format: str = Field(
        default="json",
        description="Log format (json or text)",
        validation_alias=AliasChoices("LOG_FORMAT"),
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog for the meetings service from LOG_LEVEL/LOG_FORMAT."""
    settings = settings or get_settings()
    setup_service_logging(
        service_name="meetings",
        log_level=settings.log_level,
        log_format=settings.log_format,
    )
