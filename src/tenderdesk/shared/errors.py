"""TenderDesk Error Handling Module

This module defines the error handling system for TenderDesk, providing
structured error classes with context information and user-facing messages.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- User-facing Messages: ``message`` is what a notification shows verbatim
- Proper Exception Chaining: Original exceptions are preserved
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]

# Default keys to mask in safe_dict for PII protection
SAFE_DICT_MASK_KEYS: tuple[str, ...] = ("user_id",)


class ErrorCode(str, Enum):
    """Error codes for TenderDesk.

    This enum serves as the single source of truth for all error codes
    used throughout the application.
    """

    # Network and API Errors
    NETWORK_ERROR = "NETWORK_ERROR"
    API_REQUEST_FAILED = "API_REQUEST_FAILED"
    API_AUTHENTICATION_FAILED = "API_AUTHENTICATION_FAILED"
    API_TIMEOUT = "API_TIMEOUT"
    API_SERVER_ERROR = "API_SERVER_ERROR"
    PAYMENT_REQUIRED = "PAYMENT_REQUIRED"

    # Backend (data collaborator) Errors
    BACKEND_ERROR = "BACKEND_ERROR"
    BACKEND_NO_ROWS = "BACKEND_NO_ROWS"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"

    # Precondition Errors
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    NO_COMPANY_SELECTED = "NO_COMPANY_SELECTED"
    PLAN_FEATURE_UNAVAILABLE = "PLAN_FEATURE_UNAVAILABLE"

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    TYPE_COERCION_ERROR = "TYPE_COERCION_ERROR"

    # Query/Mutation Errors
    QUERY_FAILED = "QUERY_FAILED"
    MUTATION_FAILED = "MUTATION_FAILED"
    QUERY_CANCELLED = "QUERY_CANCELLED"
    STORE_DISPOSED = "STORE_DISPOSED"

    # Configuration Errors
    CONFIG_ERROR = "CONFIG_ERROR"
    MISSING_CONFIG = "MISSING_CONFIG"
    INVALID_CONFIG = "INVALID_CONFIG"

    # Storage Errors
    STORAGE_READ_FAILED = "STORAGE_READ_FAILED"
    STORAGE_WRITE_FAILED = "STORAGE_WRITE_FAILED"

    # Application Errors
    APPLICATION_ERROR = "APPLICATION_ERROR"
    DATA_PROCESSING_ERROR = "DATA_PROCESSING_ERROR"
    CLI_UNEXPECTED_ERROR = "CLI_UNEXPECTED_ERROR"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Enum and Decimal to primitive types.

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Enum):
            coerced[key] = val.value
        elif isinstance(val, Decimal):
            coerced[key] = float(val)
        elif val is None:
            coerced[key] = "None"
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Enum, Decimal are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContextModel:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are allowed in
    additional_data to ensure safe serialization and prevent sensitive
    data leakage.

    Attributes:
        operation: Optional operation name that caused the error
        query_key: Optional rendered query key the error belongs to
        user_id: Optional user ID (masked in logs)
        additional_data: Optional dict with primitive values only
    """

    operation: str | None = None
    query_key: str | None = None
    user_id: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self, *, mask_keys: tuple[str, ...] | None = None) -> dict[str, Any]:
        """Export context as dict with PII masking.

        Args:
            mask_keys: Fields to exclude from output. Defaults to SAFE_DICT_MASK_KEYS.

        Returns:
            Dictionary with masked sensitive fields and guaranteed additional_data key.

        Example:
            >>> context = ErrorContextModel(user_id="12345", operation="fetch")
            >>> context.safe_dict()
            {'operation': 'fetch', 'additional_data': {}}
        """
        if mask_keys is None:
            mask_keys = SAFE_DICT_MASK_KEYS

        data: dict[str, Any] = {}
        if self.operation is not None and "operation" not in mask_keys:
            data["operation"] = self.operation
        if self.query_key is not None and "query_key" not in mask_keys:
            data["query_key"] = self.query_key
        if self.user_id is not None and "user_id" not in mask_keys:
            data["user_id"] = self.user_id

        if self.additional_data is not None and "additional_data" not in mask_keys:
            data["additional_data"] = self.additional_data
        else:
            data["additional_data"] = {}

        return data


ErrorContext = ErrorContextModel


class TenderDeskError(Exception):
    """Base exception class for all TenderDesk errors.

    ``message`` is kept free of the code prefix so that it can be shown to
    the user as-is by a notifier.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize TenderDeskError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error

        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging with PII masking."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(TenderDeskError):
    """Domain-specific errors.

    Raised when business rules are violated or domain preconditions are
    not met (no company selected, invalid top-up amount).
    """


class PreconditionError(DomainError):
    """A required input for a write is missing.

    Queries absorb missing preconditions by staying disabled; mutations
    cannot, so they raise this error and the message is shown to the user.
    """


class InfrastructureError(TenderDeskError):
    """Infrastructure-related errors.

    These errors occur when talking to external systems: the data
    collaborator, the dashboard HTTP API, or the local file system.
    """


class BackendError(InfrastructureError):
    """Structured error reported by the data collaborator.

    Attributes:
        backend_code: Machine-readable code reported by the backend
            (for PostgREST, e.g. ``23505`` or ``PGRST116``).
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        backend_code: str | None = None,
    ) -> None:
        super().__init__(code, message, context, original_error)
        self.backend_code = backend_code


class RecordNotFoundError(BackendError):
    """A single-row read matched zero rows.

    Callers that treat "no rows" as a valid empty answer catch this
    explicitly instead of comparing backend-specific codes.
    """


class APIRequestError(InfrastructureError):
    """Non-2xx response from the dashboard HTTP API."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(code, message, context, original_error)
        self.status = status


class ApplicationError(TenderDeskError):
    """Application-level errors.

    Configuration problems, storage failures, misuse of a disposed store.
    """


class DataProcessingError(TenderDeskError):
    """Data processing errors raised while shaping backend rows."""


class CliError(ApplicationError):
    """CLI-specific error with the exit code to use."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        command: str | None = None,
        exit_code: int = 1,
    ):
        super().__init__(code, message, context, original_error)
        self.command = command
        self.exit_code = exit_code


def create_no_company_error(operation: str | None = None) -> PreconditionError:
    """Create the error raised when a write needs the active company."""
    return PreconditionError(
        ErrorCode.NO_COMPANY_SELECTED,
        "No company selected",
        ErrorContext(operation=operation),
    )


def create_not_authenticated_error(operation: str | None = None) -> PreconditionError:
    """Create the error raised when a write needs the signed-in user."""
    return PreconditionError(
        ErrorCode.NOT_AUTHENTICATED,
        "Not authenticated",
        ErrorContext(operation=operation),
    )


def create_plan_feature_error(feature: str, operation: str | None = None) -> PreconditionError:
    """Create the error raised when the subscription plan lacks a feature."""
    return PreconditionError(
        ErrorCode.PLAN_FEATURE_UNAVAILABLE,
        f"Your plan does not include {feature}. Upgrade to unlock it.",
        ErrorContext(operation=operation, additional_data={"feature": feature}),
    )


def create_validation_error(
    message: str,
    field: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> DomainError:
    """Create a validation error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"field": field} if field else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return DomainError(
        ErrorCode.VALIDATION_ERROR,
        message,
        context,
        original_error,
    )


def create_backend_error(
    message: str,
    backend_code: str | None = None,
    table: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> BackendError:
    """Create a backend error with context."""
    additional_data: dict[str, PrimitiveContextValue] = {}
    if table is not None:
        additional_data["table"] = table
    if backend_code is not None:
        additional_data["backend_code"] = backend_code

    context = ErrorContext(
        operation=operation,
        additional_data=additional_data or None,
    )
    return BackendError(
        ErrorCode.BACKEND_ERROR,
        message,
        context,
        original_error,
        backend_code=backend_code,
    )


def create_api_error(
    message: str,
    status: int | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> APIRequestError:
    """Create a dashboard API error with context."""
    code = ErrorCode.API_REQUEST_FAILED
    if status == 401:
        code = ErrorCode.API_AUTHENTICATION_FAILED
    elif status == 402:
        code = ErrorCode.PAYMENT_REQUIRED
    elif status is not None and status >= 500:
        code = ErrorCode.API_SERVER_ERROR

    context = ErrorContext(
        operation=operation,
        additional_data={"status": status} if status is not None else None,
    )
    return APIRequestError(
        code,
        message,
        context,
        original_error,
        status=status,
    )


def create_config_error(
    message: str,
    config_key: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> ApplicationError:
    """Create a configuration error with context."""
    additional_data: dict[str, PrimitiveContextValue] | None = (
        {"config_key": config_key} if config_key else None
    )
    context = ErrorContext(
        operation=operation,
        additional_data=additional_data,
    )
    return ApplicationError(
        ErrorCode.CONFIG_ERROR,
        message,
        context,
        original_error,
    )


class TypeCoercionError(DomainError):
    """Exception raised when backend rows fail pydantic validation.

    Attributes:
        model_name: Name of the target Pydantic model
        validation_errors: List of field-level validation errors
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        model_name: str | None = None,
        validation_errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(code, message, context, original_error)
        self.model_name = model_name
        self.validation_errors = validation_errors or []


def create_type_coercion_error(
    message: str,
    model_name: str,
    validation_errors: list[dict[str, Any]] | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> TypeCoercionError:
    """Create a type coercion error with context.

    Example:
        >>> from pydantic import ValidationError
        >>> try:
        ...     Tender.model_validate(row)
        ... except ValidationError as e:
        ...     error = create_type_coercion_error(
        ...         message="Invalid tender row",
        ...         model_name="Tender",
        ...         validation_errors=e.errors(),
        ...         original_error=e,
        ...     )
    """
    additional_data: dict[str, PrimitiveContextValue] = {
        "model_name": model_name,
        "validation_error_count": len(validation_errors) if validation_errors else 0,
    }
    context = ErrorContext(
        operation=operation or "type_conversion",
        additional_data=additional_data,
    )
    return TypeCoercionError(
        code=ErrorCode.TYPE_COERCION_ERROR,
        message=message,
        context=context,
        original_error=original_error,
        model_name=model_name,
        validation_errors=validation_errors,
    )
