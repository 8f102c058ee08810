"""
TenderDesk Constants Module

Centralized constants: cache defaults, backend table names, tender
statuses and user-facing messages.
"""

from .cache import CacheDefaults
from .messages import Messages
from .tables import RPC, Tables, TenderStatuses

__all__ = [
    "RPC",
    "CacheDefaults",
    "Messages",
    "Tables",
    "TenderStatuses",
]
