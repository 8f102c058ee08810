"""Notification collaborators.

``ConsoleNotifier`` prints toast-style lines with rich; ``LoggingNotifier``
routes messages to a logger for headless runs.
"""

from __future__ import annotations

import logging

from rich.console import Console


class ConsoleNotifier:
    """Render notifications on a rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def notify_success(self, message: str) -> None:
        self.console.print(f"[bold green]✓[/bold green] {message}", highlight=False)

    def notify_failure(self, message: str) -> None:
        self.console.print(f"[bold red]✗[/bold red] {message}", highlight=False)

    def notify_info(self, message: str) -> None:
        self.console.print(f"[bold blue]i[/bold blue] {message}", highlight=False)


class LoggingNotifier:
    """Send notifications to a logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("tenderdesk.notifications")

    def notify_success(self, message: str) -> None:
        self.logger.info(message)

    def notify_failure(self, message: str) -> None:
        self.logger.error(message)

    def notify_info(self, message: str) -> None:
        self.logger.info(message)
