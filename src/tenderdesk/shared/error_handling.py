"""Shared error handling utilities for TenderDesk.

This module provides the functions the query layer, the feature services and
the CLI use to turn arbitrary exceptions into TenderDeskError instances and
to log them consistently.

Design Principles:
- One Source of Truth for error mapping logic
- Consistent logging with structured context
- Original exceptions are always preserved on ``original_error``
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp
from pydantic import ValidationError

from tenderdesk.shared.errors import (
    ApplicationError,
    DataProcessingError,
    ErrorCode,
    ErrorContextModel,
    InfrastructureError,
    TenderDeskError,
    create_type_coercion_error,
)

logger = logging.getLogger(__name__)


def map_exception_to_error(
    error: BaseException,
    operation: str,
    default_code: ErrorCode = ErrorCode.QUERY_FAILED,
    query_key: str | None = None,
) -> TenderDeskError:
    """Map a generic exception to a TenderDeskError.

    Args:
        error: The exception to map
        operation: Operation name where error occurred
        default_code: Error code used when no specific mapping applies
        query_key: Rendered query key, when the error belongs to a query

    Returns:
        TenderDeskError instance; TenderDeskErrors are returned unchanged

    Example:
        >>> try:
        ...     await fetch_tenders()
        ... except Exception as e:
        ...     error = map_exception_to_error(e, "fetch_tenders")
    """
    if isinstance(error, TenderDeskError):
        return error

    context = ErrorContextModel(
        operation=operation,
        query_key=query_key,
        additional_data={"original_error_type": type(error).__name__},
    )
    original = error if isinstance(error, Exception) else None

    if isinstance(error, ValidationError):
        return create_type_coercion_error(
            message=f"Unexpected data shape: {error.error_count()} validation error(s)",
            model_name=error.title,
            validation_errors=error.errors(),
            operation=operation,
            original_error=error,
        )

    if isinstance(error, asyncio.TimeoutError):
        return InfrastructureError(
            code=ErrorCode.API_TIMEOUT,
            message="Request timed out",
            context=context,
            original_error=original,
        )

    if isinstance(error, (aiohttp.ClientError, ConnectionError, OSError)):
        return InfrastructureError(
            code=ErrorCode.NETWORK_ERROR,
            message=f"Network error: {error}",
            context=context,
            original_error=original,
        )

    if isinstance(error, (ValueError, KeyError, TypeError, AttributeError)):
        return DataProcessingError(
            code=ErrorCode.DATA_PROCESSING_ERROR,
            message=str(error) or type(error).__name__,
            context=context,
            original_error=original,
        )

    return ApplicationError(
        code=default_code,
        message=str(error) or type(error).__name__,
        context=context,
        original_error=original,
    )


def error_message(error: BaseException) -> str:
    """Return the user-facing message of any exception.

    TenderDeskErrors carry a clean ``message``; other exceptions fall back
    to ``str(error)``.
    """
    if isinstance(error, TenderDeskError):
        return error.message
    return str(error) or type(error).__name__


def log_error_with_context(
    error: TenderDeskError,
    operation: str,
    additional_context: dict[str, Any] | None = None,
) -> None:
    """Log a TenderDeskError with structured context.

    Args:
        error: TenderDeskError instance to log
        operation: Operation name where error occurred
        additional_context: Additional context data for logging
    """
    log_context: dict[str, Any] = {
        "operation": operation,
        "error_code": error.code.value,
        "error_type": type(error).__name__,
    }

    if additional_context:
        log_context.update(additional_context)

    if isinstance(error, ApplicationError):
        logger.warning(
            "Application error in %s: %s",
            operation,
            error.message,
            extra={"context": log_context},
        )
    elif isinstance(error, InfrastructureError):
        logger.error(
            "Infrastructure error in %s: %s",
            operation,
            error.message,
            extra={"context": log_context},
        )
    else:
        logger.warning(
            "TenderDesk error in %s: %s",
            operation,
            error.message,
            extra={"context": log_context},
        )
