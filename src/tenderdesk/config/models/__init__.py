"""Configuration domain models."""

from __future__ import annotations

from .api_settings import APISettings
from .app_settings import AppSettings, LoggingSettings
from .billing_settings import BillingSettings
from .cache_settings import CacheSettings
from .settings import Settings

__all__ = [
    "APISettings",
    "AppSettings",
    "BillingSettings",
    "CacheSettings",
    "LoggingSettings",
    "Settings",
]
