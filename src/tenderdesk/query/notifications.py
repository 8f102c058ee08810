"""Isolated calls into the notification collaborator."""

from __future__ import annotations

import logging

from tenderdesk.shared.protocols import NotifierProtocol

logger = logging.getLogger(__name__)


def notify_success(notifier: NotifierProtocol | None, message: str | None) -> None:
    if notifier is None or not message:
        return
    try:
        notifier.notify_success(message)
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("Notifier failed to deliver success message: %s", message)


def notify_failure(notifier: NotifierProtocol | None, message: str | None) -> None:
    if notifier is None or not message:
        return
    try:
        notifier.notify_failure(message)
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("Notifier failed to deliver failure message: %s", message)


def notify_info(notifier: NotifierProtocol | None, message: str | None) -> None:
    if notifier is None or not message:
        return
    try:
        notifier.notify_info(message)
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("Notifier failed to deliver info message: %s", message)
