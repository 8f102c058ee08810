"""TenderDesk Settings Configuration Model.

Main Settings class that consolidates all configuration domains.
"""

from __future__ import annotations

import logging
from pathlib import Path

import toml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tenderdesk.config.models.api_settings import APISettings
from tenderdesk.config.models.app_settings import AppSettings, LoggingSettings
from tenderdesk.config.models.billing_settings import BillingSettings
from tenderdesk.config.models.cache_settings import CacheSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Unified configuration for the TenderDesk client.

    Values come from (highest precedence first) init arguments, environment
    variables such as ``TENDERDESK_API__SUPABASE_URL``, then defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="TENDERDESK_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    api: APISettings = Field(default_factory=APISettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    billing: BillingSettings = Field(default_factory=BillingSettings)

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from TOML file with environment variable overrides."""
        file_path = Path(file_path)
        if not file_path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        raw_config = toml.load(file_path)
        return cls(**raw_config)

    def to_toml_file(self, file_path: str | Path) -> None:
        """Save settings to TOML file.

        The Supabase key is written too: the file is configuration, not a
        log, and the client cannot connect without it.
        """
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(exclude_none=True)
        with open(file_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)
        logger.debug("Settings written to %s", file_path)


__all__ = ["Settings"]
