"""Settings loader and singleton manager.

This module handles:
- Environment variable loading from .env files
- Configuration file loading from TOML
- Thread-safe singleton pattern for Settings instance
- Configuration update and save operations
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable

from dotenv import load_dotenv
from pydantic import ValidationError

from tenderdesk.config.models.settings import Settings
from tenderdesk.shared.errors import (
    ApplicationError,
    ErrorCode,
    ErrorContext,
    create_config_error,
)

logger = logging.getLogger(__name__)

HOME_DIR = ".tenderdesk"
DEFAULT_CONFIG_PATH = Path("config/config.toml")


class SettingsLoader:
    """Thread-safe singleton manager for Settings.

    Uses double-checked locking so that the common path (settings already
    loaded) takes no lock.
    """

    def __init__(self) -> None:
        self._instance: Settings | None = None
        self._lock = threading.RLock()

    def get_config(self) -> Settings:
        """Get the global settings instance, loading it on first use."""
        if self._instance is None:
            with self._lock:
                if self._instance is None:
                    self._instance = load_settings()

        return self._instance

    def reload_config(self) -> Settings:
        """Reload the global settings instance from configuration files."""
        with self._lock:
            self._instance = load_settings()

        return self._instance

    def update_and_save_config(
        self,
        updater: Callable[[Settings], None],
        config_path: Path | str = DEFAULT_CONFIG_PATH,
    ) -> None:
        """Update configuration, validate, save to file, and reload global cache.

        Args:
            updater: Callable that modifies Settings object in-place
            config_path: Path to save the configuration file

        Raises:
            ApplicationError: If validation fails or save operation fails
        """
        config_path = Path(config_path)

        with self._lock:
            try:
                updated = self.get_config().model_copy(deep=True)
                updater(updated)
                updated = Settings.model_validate(updated.model_dump())
                updated.to_toml_file(config_path)
                self._instance = updated
                logger.info("Configuration updated and saved successfully to %s", config_path)

            except (ValidationError, OSError, ValueError, TypeError) as e:
                logger.exception("Failed to update and save configuration")
                raise ApplicationError(
                    code=ErrorCode.CONFIG_ERROR,
                    message=f"Configuration update failed: {e}",
                    context=ErrorContext(
                        operation="update_and_save_config",
                        additional_data={"config_path": str(config_path)},
                    ),
                    original_error=e,
                ) from e


def _load_env_file(env_file: Path = Path(".env")) -> None:
    """Load environment variables from a .env file when one exists."""
    if not env_file.exists():
        return
    load_dotenv(env_file, override=False)
    logger.debug("Loaded environment from %s", env_file)


def default_config_paths() -> list[Path]:
    return [
        DEFAULT_CONFIG_PATH,
        Path("config.toml"),
        Path.home() / HOME_DIR / "config.toml",
    ]


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from a TOML configuration file or the environment.

    Args:
        config_path: Optional path to a TOML file. When None the default
            locations are tried in order, falling back to environment
            variables and defaults.

    Raises:
        ApplicationError: If the file is invalid
        FileNotFoundError: If an explicit ``config_path`` does not exist
    """
    _load_env_file()

    candidates = [Path(config_path)] if config_path else [p for p in default_config_paths() if p.exists()]

    try:
        if candidates:
            logger.debug("Loading settings from %s", candidates[0])
            return Settings.from_toml_file(candidates[0])
        return Settings()
    except ValidationError as e:
        raise create_config_error(
            f"Invalid configuration: {e.error_count()} validation error(s)",
            config_key=str(candidates[0]) if candidates else None,
            operation="load_settings",
            original_error=e,
        ) from e


_loader = SettingsLoader()


def get_config() -> Settings:
    """Get the global settings instance (thread-safe)."""
    return _loader.get_config()


def reload_config() -> Settings:
    """Reload the global settings instance from configuration files."""
    return _loader.reload_config()


def update_and_save_config(
    updater: Callable[[Settings], None],
    config_path: Path | str = DEFAULT_CONFIG_PATH,
) -> None:
    """Update configuration, validate, save to file, and reload global cache."""
    _loader.update_and_save_config(updater, config_path)


__all__ = [
    "SettingsLoader",
    "get_config",
    "load_settings",
    "reload_config",
    "update_and_save_config",
]
