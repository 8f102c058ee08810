"""
Client state storage for TenderDesk

A small TOML key/value file holding state that outlives a session, such as
the selected company and notification preferences.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any

import toml

from tenderdesk.shared.errors import ApplicationError, ErrorCode, ErrorContext

logger = logging.getLogger(__name__)

DEFAULT_STATE_PATH = Path.home() / ".tenderdesk" / "state.toml"


class StateStorage:
    """TOML-backed key/value store with a backup of the previous file.

    Keys support dot notation (``preferences.email_reminders``) for nested
    tables.
    """

    def __init__(self, state_path: Path | str = DEFAULT_STATE_PATH) -> None:
        self.state_path = Path(state_path)
        self.backup_path = self.state_path.with_suffix(".toml.backup")

    def load(self) -> dict[str, Any]:
        """Return the whole state; an absent file is an empty state.

        Raises:
            ApplicationError: If the file exists but cannot be parsed
        """
        if not self.state_path.exists():
            return {}
        try:
            return dict(toml.load(self.state_path))
        except (OSError, toml.TomlDecodeError) as e:
            raise ApplicationError(
                ErrorCode.STORAGE_READ_FAILED,
                f"Failed to read state file: {e}",
                ErrorContext(
                    operation="load_state",
                    additional_data={"file_path": str(self.state_path)},
                ),
                original_error=e,
            ) from e

    def get(self, key: str, default: Any = None) -> Any:
        current: Any = self.load()
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def set(self, key: str, value: Any) -> None:
        """Set ``key`` to ``value``; None removes the key."""
        self.update({key: value})

    def update(self, values: dict[str, Any]) -> None:
        """Apply several key updates in one write.

        Raises:
            ApplicationError: If the file cannot be written
        """
        state = self.load()
        for key, value in values.items():
            parts = key.split(".")
            current = state
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            if value is None:
                current.pop(parts[-1], None)
            else:
                current[parts[-1]] = value
        self._save(state)

    def _save(self, state: dict[str, Any]) -> None:
        try:
            if self.state_path.exists():
                self._create_backup()
            self.state_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.state_path, "w", encoding="utf-8") as f:
                toml.dump(state, f)
            logger.debug("State saved to: %s", self.state_path)

        except OSError as e:
            logger.exception("Failed to save state")
            self._restore_backup()
            raise ApplicationError(
                ErrorCode.STORAGE_WRITE_FAILED,
                f"Failed to save state: {e}",
                ErrorContext(
                    operation="save_state",
                    additional_data={"file_path": str(self.state_path)},
                ),
                original_error=e,
            ) from e

    def _create_backup(self) -> None:
        try:
            shutil.copy2(self.state_path, self.backup_path)
        except OSError as e:
            logger.warning("Failed to create backup: %s", e)

    def _restore_backup(self) -> None:
        try:
            if self.backup_path.exists():
                shutil.copy2(self.backup_path, self.state_path)
                logger.info("Restored state from backup")
        except OSError as e:
            logger.warning("Failed to restore backup: %s", e)


__all__ = ["DEFAULT_STATE_PATH", "StateStorage"]
