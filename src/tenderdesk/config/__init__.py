"""TenderDesk Configuration Module

Unified access to configuration models and settings management:
- Settings: Main configuration facade
- Loader functions: get_config, load_settings, reload_config, update_and_save_config
- StateStorage: persisted client state (selected company, preferences)
"""

from __future__ import annotations

from .models import APISettings, AppSettings, BillingSettings, CacheSettings, LoggingSettings, Settings
from .loader import get_config, load_settings, reload_config, update_and_save_config
from .storage import StateStorage

__all__ = [
    "APISettings",
    "AppSettings",
    "BillingSettings",
    "CacheSettings",
    "LoggingSettings",
    "Settings",
    "StateStorage",
    "get_config",
    "load_settings",
    "reload_config",
    "update_and_save_config",
]
