"""Application and logging configuration models."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from tenderdesk import __version__

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = Field(default="TenderDesk", description="Application name")
    version: str = Field(default=__version__, description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    currency: str = Field(default="ZAR", description="Currency used for amounts")
    locale: str = Field(default="en-ZA", description="Locale used for dates and amounts")


class LoggingSettings(BaseModel):
    """Logging configuration.

    Console output goes through rich; the optional file receives one JSON
    object per record.
    """

    level: str = Field(default="INFO", description="Logging level")
    file: str | None = Field(default=None, description="JSON log file path")
    console_output: bool = Field(default=True, description="Use rich console output")

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            msg = f"Invalid log level '{value}', expected one of {', '.join(_LOG_LEVELS)}"
            raise ValueError(msg)
        return level


__all__ = ["AppSettings", "LoggingSettings"]
