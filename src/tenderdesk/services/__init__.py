"""External collaborators: backend data client, dashboard HTTP API, notifiers."""

from .api_client import DashboardAPIClient
from .backend import SupabaseDataClient
from .http_session import HTTPSessionManager
from .notifier import ConsoleNotifier, LoggingNotifier

__all__ = [
    "ConsoleNotifier",
    "DashboardAPIClient",
    "HTTPSessionManager",
    "LoggingNotifier",
    "SupabaseDataClient",
]
