"""Custom exceptions for the prompt versions service."""

from typing import Optional


class VersioningError(Exception):
    """Base exception for versioning errors.

    Every subclass carries the wire ``error_code`` and the HTTP status it is
    rendered with by the exception handlers.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str = None,
        status_code: Optional[int] = None,
        details: dict = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "SERVER_ERROR"
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}


class ValidationError(VersioningError):
    """Exception raised for malformed or missing request parameters."""

    status_code = 400

    def __init__(self, message: str, field: str = None):
        super().__init__(message, error_code="INVALID_INPUT", details={"field": field})
        self.field = field


class AuthenticationError(VersioningError):
    """Exception raised for missing or invalid credentials."""

    status_code = 401

    def __init__(self, message: str, error_code: str = "AUTH_INVALID"):
        super().__init__(message, error_code=error_code)


class ClientError(VersioningError):
    """Base for errors the persistence layer attributes to the caller."""

    status_code = 400

    def __init__(self, message: str, resource: str = None):
        super().__init__(message, error_code="CLIENT_ERROR", details={"resource": resource})
        self.resource = resource


class NotFoundError(ClientError):
    """Exception raised when a prompt or version does not exist."""


class ConflictError(ClientError):
    """Exception raised when a write collides with existing data."""


class ForbiddenError(ClientError):
    """Exception raised when the caller may not touch a prompt."""


class RequestTimeoutError(VersioningError):
    """Exception raised when the request deadline elapses."""

    status_code = 504

    def __init__(self, message: str = "Request timeout", timeout_seconds: float = None):
        super().__init__(
            message,
            error_code="TIMEOUT",
            details={"timeout_seconds": timeout_seconds},
        )
        self.timeout_seconds = timeout_seconds


class InternalError(VersioningError):
    """Exception raised for unclassified server-side failures."""

    status_code = 500

    def __init__(self, message: str, operation: str = None):
        super().__init__(message, error_code="SERVER_ERROR", details={"operation": operation})
        self.operation = operation


# Message fragments raised by the stored procedures, checked in order.
_CLIENT_ERROR_MARKERS = (
    ("not found", NotFoundError),
    ("Not authorized", ForbiddenError),
    ("already exists", ConflictError),
)


def classify_collaborator_error(exc: Exception) -> VersioningError:
    """Translate an untyped persistence error into the service taxonomy.

    The stored procedures only report failures through their message text, so
    the category is recovered by substring matching.
    """
    if isinstance(exc, VersioningError):
        return exc

    message = str(exc) or "Unknown error"
    for marker, error_class in _CLIENT_ERROR_MARKERS:
        if marker in message:
            return error_class(message)
    return InternalError(message)
