"""Error classification utilities for store and service failures."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ValidationError


class ErrorCategory(Enum):
    """Categories of errors that can occur while serving a request."""

    RECORD_NOT_FOUND = "record_not_found"
    PERMISSION_DENIED = "permission_denied"
    VALIDATION_FAILED = "validation_failed"
    AUTHENTICATION_FAILED = "authentication_failed"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    NETWORK_ERROR = "network_error"
    STORE_UNAVAILABLE = "store_unavailable"
    INVALID_RECORD = "invalid_record"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Record errors
    ERR_TASK_NOT_FOUND = "ERR_TASK_NOT_FOUND"
    ERR_CATEGORY_NOT_FOUND = "ERR_CATEGORY_NOT_FOUND"
    ERR_WORKSPACE_NOT_FOUND = "ERR_WORKSPACE_NOT_FOUND"
    ERR_RECORD_NOT_FOUND = "ERR_RECORD_NOT_FOUND"

    # Request errors
    ERR_PERMISSION_DENIED = "ERR_PERMISSION_DENIED"
    ERR_VALIDATION_FAILED = "ERR_VALIDATION_FAILED"

    # Service errors
    ERR_AUTHENTICATION_FAILED = "ERR_AUTHENTICATION_FAILED"
    ERR_RATE_LIMIT_EXCEEDED = "ERR_RATE_LIMIT_EXCEEDED"
    ERR_NETWORK_ERROR = "ERR_NETWORK_ERROR"
    ERR_STORE_UNAVAILABLE = "ERR_STORE_UNAVAILABLE"
    ERR_INVALID_RECORD = "ERR_INVALID_RECORD"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging.

    ``retryable`` tells the client whether offering a "Try again" action makes sense.
    """

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity
    retryable: bool = False


_ERROR_PATTERNS: dict[
    Literal["rate_limit", "auth", "network"],
    dict[str, list[str] | set[str]],
] = {
    "rate_limit": {
        "phrases": [
            "rate limit",
            "too many requests",
            "429",
        ],
        "exception_types": set(),
    },
    "auth": {
        "phrases": [
            "authentication failed",
            "unauthorized",
            "invalid token",
            "401",
        ],
        "exception_types": {"AuthenticationError"},
    },
    "network": {
        "phrases": [
            "connection",
            "timeout",
            "network",
            "503",
            "502",
            "504",
            "unreachable",
        ],
        "exception_types": {"ConnectionError", "TimeoutError", "ConnectError", "ReadTimeout"},
    },
}

_NOT_FOUND_CODES = {
    "tasks": ErrorCode.ERR_TASK_NOT_FOUND,
    "categories": ErrorCode.ERR_CATEGORY_NOT_FOUND,
    "workspaces": ErrorCode.ERR_WORKSPACE_NOT_FOUND,
}


def _match_error_pattern(
    *,
    error_str: str,
    exception_type: str,
    pattern_type: Literal["rate_limit", "auth", "network"],
) -> bool:
    """Return True if the error matches the configured pattern type."""
    patterns = _ERROR_PATTERNS[pattern_type]
    return any(phrase in error_str for phrase in patterns["phrases"]) or exception_type in patterns["exception_types"]


def _exception_lineage(exception: Exception) -> set[str]:
    return {cls.__name__ for cls in type(exception).__mro__}


def classify_error(exception: Exception) -> ErrorCategory:
    """Map an exception raised by the store or services onto an ErrorCategory."""
    error_str = str(exception).lower()
    lineage = _exception_lineage(exception)
    exception_type = type(exception).__name__

    if "RecordNotFoundError" in lineage:
        return ErrorCategory.RECORD_NOT_FOUND
    if "PermissionError" in lineage:
        return ErrorCategory.PERMISSION_DENIED
    # Request bodies are validated before reaching services; a model error here is a malformed stored row
    if isinstance(exception, ValidationError):
        return ErrorCategory.INVALID_RECORD
    if "ValueError" in lineage:
        return ErrorCategory.VALIDATION_FAILED

    # Store failures wrap the underlying SDK error; inspect the cause too
    cause = exception.__cause__
    if cause is not None:
        error_str = f"{error_str} {str(cause).lower()}"
        exception_type = type(cause).__name__

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="rate_limit"):
        return ErrorCategory.RATE_LIMIT_EXCEEDED
    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="auth"):
        return ErrorCategory.AUTHENTICATION_FAILED
    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="network"):
        return ErrorCategory.NETWORK_ERROR
    if "DatabaseError" in lineage:
        return ErrorCategory.STORE_UNAVAILABLE

    return ErrorCategory.UNKNOWN


def classify_error_with_response(exception: Exception, *, collection: str | None = None) -> ErrorResponse:  # noqa: PLR0911
    """Classify an error and return a structured response with recovery suggestions.

    Args:
        exception: The exception raised during execution
        collection: Collection the failing operation targeted, used to pick a specific not-found code

    Returns:
        ErrorResponse with code, message, suggestion, severity and retry hint
    """
    category = classify_error(exception)

    if category is ErrorCategory.RECORD_NOT_FOUND:
        return ErrorResponse(
            code=_NOT_FOUND_CODES.get(collection or "", ErrorCode.ERR_RECORD_NOT_FOUND),
            message="The requested item could not be found.",
            suggestion="It may have been deleted. Refresh the list and try again.",
            severity=ErrorSeverity.LOW,
        )

    if category is ErrorCategory.PERMISSION_DENIED:
        return ErrorResponse(
            code=ErrorCode.ERR_PERMISSION_DENIED,
            message="You don't have permission for this action.",
            suggestion="Ask the workspace owner if you think this is an error.",
            severity=ErrorSeverity.MEDIUM,
        )

    if category is ErrorCategory.VALIDATION_FAILED:
        return ErrorResponse(
            code=ErrorCode.ERR_VALIDATION_FAILED,
            message=str(exception) or "The request was invalid.",
            suggestion="Check the submitted fields and try again.",
            severity=ErrorSeverity.LOW,
        )

    if category is ErrorCategory.RATE_LIMIT_EXCEEDED:
        return ErrorResponse(
            code=ErrorCode.ERR_RATE_LIMIT_EXCEEDED,
            message="Too many requests.",
            suggestion="Please wait a moment and try again.",
            severity=ErrorSeverity.MEDIUM,
            retryable=True,
        )

    if category is ErrorCategory.AUTHENTICATION_FAILED:
        return ErrorResponse(
            code=ErrorCode.ERR_AUTHENTICATION_FAILED,
            message="Storage authentication failed.",
            suggestion="Please contact support.",
            severity=ErrorSeverity.CRITICAL,
        )

    if category is ErrorCategory.NETWORK_ERROR:
        return ErrorResponse(
            code=ErrorCode.ERR_NETWORK_ERROR,
            message="Network error occurred.",
            suggestion="Please check your connection and try again.",
            severity=ErrorSeverity.MEDIUM,
            retryable=True,
        )

    if category is ErrorCategory.STORE_UNAVAILABLE:
        return ErrorResponse(
            code=ErrorCode.ERR_STORE_UNAVAILABLE,
            message="Your tasks could not be loaded right now.",
            suggestion="Try again in a moment.",
            severity=ErrorSeverity.HIGH,
            retryable=True,
        )

    if category is ErrorCategory.INVALID_RECORD:
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_RECORD,
            message="Some of your stored data could not be read.",
            suggestion="Please contact support if this keeps happening.",
            severity=ErrorSeverity.HIGH,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again later. If the problem persists, contact support.",
        severity=ErrorSeverity.MEDIUM,
        retryable=True,
    )
