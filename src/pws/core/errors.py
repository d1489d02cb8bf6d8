"""Error taxonomy for workspace operations and classification of HTTP failures."""

from enum import Enum
from typing import Optional

import httpx


class ErrorType(Enum):
    """Classification of error types for appropriate handling."""
    RATE_LIMIT = "rate_limit"      # 429 errors
    NETWORK = "network"            # Connection, timeout - transient
    API_ERROR = "api_error"        # 4xx/5xx errors
    NOT_FOUND = "not_found"        # 404 - resource does not exist yet
    PARSE_ERROR = "parse_error"    # Malformed response body
    VALIDATION = "validation"      # Invalid input - never sent
    UNKNOWN = "unknown"


class WorkspaceError(Exception):
    """Base class for every failure surfaced by the workspace core."""

    retryable: bool = False
    error_type: ErrorType = ErrorType.UNKNOWN

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(WorkspaceError):
    """The requested resource does not exist (yet)."""

    error_type = ErrorType.NOT_FOUND


class ValidationError(WorkspaceError):
    """Input rejected before any request was made."""

    error_type = ErrorType.VALIDATION


class UploadRejected(ValidationError):
    """File type or size outside the upload allow-list."""


class PermissionDenied(WorkspaceError):
    """The session's role may not perform the operation."""

    error_type = ErrorType.VALIDATION


class OperationInProgress(WorkspaceError):
    """The same logical operation is already awaiting a response."""

    error_type = ErrorType.VALIDATION


class NetworkOrServerError(WorkspaceError):
    """Transport failure or non-2xx response."""

    retryable = True

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_type: ErrorType = ErrorType.UNKNOWN,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_type = error_type


def classify_error(error: Exception) -> ErrorType:
    """
    Classify an exception raised while talking to the API.

    Args:
        error: Exception to classify

    Returns:
        ErrorType enum value
    """
    if isinstance(error, WorkspaceError):
        return error.error_type

    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status == 429:
            return ErrorType.RATE_LIMIT
        if status == 404:
            return ErrorType.NOT_FOUND
        return ErrorType.API_ERROR

    if isinstance(error, (httpx.TimeoutException, httpx.NetworkError)):
        return ErrorType.NETWORK

    if isinstance(error, (ValueError, KeyError, TypeError)):
        return ErrorType.PARSE_ERROR

    return ErrorType.UNKNOWN


def to_workspace_error(error: Exception, action: str) -> WorkspaceError:
    """Wrap a low-level exception into the workspace taxonomy."""
    if isinstance(error, WorkspaceError):
        return error
    error_type = classify_error(error)
    if error_type == ErrorType.NOT_FOUND:
        return NotFoundError(f"{action}: not found")
    status_code = None
    if isinstance(error, httpx.HTTPStatusError):
        status_code = error.response.status_code
        message = f"{action} failed with HTTP {status_code}"
    elif error_type == ErrorType.NETWORK:
        message = f"{action} failed: {error.__class__.__name__}"
    elif error_type == ErrorType.PARSE_ERROR:
        message = f"{action} returned an unexpected response: {error}"
    else:
        message = f"{action} failed: {error}"
    return NetworkOrServerError(message, status_code=status_code, error_type=error_type)
