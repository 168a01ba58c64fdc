"""
Error taxonomy for API calls and client-side validation.

Every failure a view can see is a TcrsError. Views only ever show the
sanitised display message; the full detail goes to the log.
"""

from typing import Any, Mapping, Optional

import structlog

logger = structlog.get_logger(__name__)

NETWORK_ERROR_MESSAGE = "Network error. Please check your connection."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


class TcrsError(Exception):
    """Base class for all client errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NetworkError(TcrsError):
    """The request never reached the server (connect failure, timeout, ...)."""

    def __init__(self, message: str = NETWORK_ERROR_MESSAGE):
        super().__init__(message)


class ApiError(TcrsError):
    """The server answered with a failure envelope or an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ConflictError(ApiError):
    """The server rejected the call as conflicting with current state (HTTP 409)."""


class AuthenticationError(ApiError):
    """The server rejected our credentials and no refresh was possible."""


class ValidationError(TcrsError):
    """Client-side check failed before anything was sent."""


class RequestCancelled(TcrsError):
    """The owning view was disposed while the request was in flight."""

    def __init__(self, message: str = "Request cancelled"):
        super().__init__(message)


def extract_server_message(body: Any, fallback: str) -> str:
    """
    Pick the most useful message out of a failure envelope.

    Precedence: joined validationErrors values, then message, then fallback.
    """
    if not isinstance(body, Mapping):
        return fallback

    validation_errors = body.get("validationErrors")
    if isinstance(validation_errors, Mapping) and validation_errors:
        return ", ".join(str(value) for value in validation_errors.values())

    message = body.get("message")
    if isinstance(message, str) and message.strip():
        return message
    return fallback


def error_for_status(status_code: int, message: str) -> ApiError:
    """Map an HTTP status onto the matching ApiError subclass."""
    if status_code == 409:
        return ConflictError(message, status_code=status_code)
    if status_code == 401:
        return AuthenticationError(message, status_code=status_code)
    return ApiError(message, status_code=status_code)


def display_message(error: BaseException, operation: str = "Operation") -> str:
    """
    Generate a safe message for an inline error banner.

    Args:
        error: The exception raised by a service call
        operation: Description of what was being attempted

    Returns:
        Display string; internal details of unexpected errors are logged only
    """
    if isinstance(error, TcrsError):
        return error.message

    logger.error(
        f"{operation} failed",
        error_type=type(error).__name__,
        error_message=str(error),
        operation=operation,
    )
    return UNEXPECTED_ERROR_MESSAGE
