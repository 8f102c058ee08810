"""Notification preferences, persisted in the local state file."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from tenderdesk.config.storage import StateStorage

logger = logging.getLogger(__name__)

PREFERENCES_KEY = "notification_preferences"


class NotificationPreferences(BaseModel):
    deadline_reminders: bool = True
    bid_opening_reminders: bool = True
    weekly_summary: bool = False
    new_tender_alerts: bool = False


class PreferenceStore:
    """Reads and writes ``NotificationPreferences``.

    Stored values are merged over the defaults, so preferences added later
    get their default until the user changes them.
    """

    def __init__(self, storage: StateStorage) -> None:
        self.storage = storage
        self._preferences = NotificationPreferences()
        self._loaded = False

    @property
    def preferences(self) -> NotificationPreferences:
        if not self._loaded:
            self.load()
        return self._preferences

    def load(self) -> NotificationPreferences:
        stored = self.storage.get(PREFERENCES_KEY, {}) or {}
        known = {k: v for k, v in stored.items() if k in NotificationPreferences.model_fields}
        self._preferences = NotificationPreferences(**{**NotificationPreferences().model_dump(), **known})
        self._loaded = True
        return self._preferences

    def set_preference(self, name: str, value: bool) -> NotificationPreferences:
        return self.set_preferences({name: value})

    def set_preferences(self, values: dict[str, Any]) -> NotificationPreferences:
        """Apply several changes and persist them in one write.

        Raises:
            KeyError: If a name is not a known preference
        """
        unknown = set(values) - set(NotificationPreferences.model_fields)
        if unknown:
            raise KeyError(f"Unknown preference(s): {', '.join(sorted(unknown))}")

        updated = self.preferences.model_copy(update=values)
        self.storage.set(PREFERENCES_KEY, updated.model_dump())
        self._preferences = updated
        logger.debug("Preferences saved: %s", values)
        return updated
