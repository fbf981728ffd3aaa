"""
Shared exceptions for service layer operations.

Every service failure carries an ErrorKind. The API layer maps kinds to HTTP
status codes in one place (api/main.py), so services never deal with HTTP.
"""
from enum import StrEnum


class ErrorKind(StrEnum):
    """Failure categories surfaced to the API boundary."""

    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    INTERNAL = "internal"


class ServiceError(Exception):
    """Base class for failures raised by services."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UnauthorizedError(ServiceError):
    """Raised when a protected operation has no valid caller identity."""

    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(ServiceError):
    """
    Raised when the caller is known but has no rights over the resource.

    Used for ownership mismatches on visible prompts and for asset paths
    outside the caller's folder.
    """

    kind = ErrorKind.FORBIDDEN


class NotFoundError(ServiceError):
    """
    Raised when a resource is absent or not visible to the caller.

    The two cases share one error (and one message) so callers cannot probe
    for the existence of private records.
    """

    kind = ErrorKind.NOT_FOUND


class InputValidationError(ServiceError):
    """Raised for missing, blank, malformed, oversized or disallowed input."""

    kind = ErrorKind.VALIDATION


class FieldLimitExceededError(InputValidationError):
    """Raised when a field exceeds its configured maximum length."""

    def __init__(self, field: str, length: int, limit: int) -> None:
        self.field = field
        self.length = length
        self.limit = limit
        super().__init__(f"{field} exceeds maximum length of {limit} characters (got {length})")


class StorageBackendError(ServiceError):
    """Raised when the object store fails. The message never includes backend details."""

    kind = ErrorKind.INTERNAL
