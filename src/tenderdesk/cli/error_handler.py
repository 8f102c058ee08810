"""
CLI Error Handling Utilities

Turns exceptions escaping a command into one red line on the console and
an exit code, logging the details with structured context.
"""

from __future__ import annotations

import logging

from rich.console import Console

from tenderdesk.shared.error_handling import error_message, log_error_with_context
from tenderdesk.shared.errors import CliError, PreconditionError, TenderDeskError

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_PRECONDITION = 2


def exit_code_for(error: Exception) -> int:
    if isinstance(error, CliError):
        return error.exit_code
    if isinstance(error, PreconditionError):
        return EXIT_PRECONDITION
    return EXIT_ERROR


def handle_cli_error(error: Exception, command: str, console: Console | None = None) -> int:
    """Report ``error`` raised by ``command`` and return the exit code."""
    console = console or Console(stderr=True)

    if isinstance(error, TenderDeskError):
        log_error_with_context(error, command)
    else:
        logger.exception("Unexpected error in command %s", command)

    console.print(f"[bold red]Error:[/bold red] {error_message(error)}", highlight=False)
    return exit_code_for(error)
