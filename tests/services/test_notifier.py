"""Tests for the notification collaborators."""

from __future__ import annotations

import io
import logging

from rich.console import Console

from tenderdesk.services.notifier import ConsoleNotifier, LoggingNotifier


class TestConsoleNotifier:
    def test_prints_marked_lines(self) -> None:
        buffer = io.StringIO()
        notifier = ConsoleNotifier(Console(file=buffer, no_color=True, width=120))

        notifier.notify_success("Tender created successfully")
        notifier.notify_failure("No company selected")
        notifier.notify_info("No pending reminders to send")

        lines = buffer.getvalue().splitlines()
        assert lines == [
            "✓ Tender created successfully",
            "✗ No company selected",
            "i No pending reminders to send",
        ]


class TestLoggingNotifier:
    def test_levels(self, caplog) -> None:
        notifier = LoggingNotifier(logging.getLogger("tests.notifier"))

        with caplog.at_level(logging.INFO, logger="tests.notifier"):
            notifier.notify_success("saved")
            notifier.notify_failure("failed")

        assert [(r.levelno, r.getMessage()) for r in caplog.records] == [
            (logging.INFO, "saved"),
            (logging.ERROR, "failed"),
        ]
