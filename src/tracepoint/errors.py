from abc import ABC
from enum import StrEnum
from typing import ClassVar


class ErrorKind(StrEnum):
    """Machine-readable error kinds returned to API clients."""

    UNAUTHENTICATED = "auth/unauthenticated"
    INVALID_TOKEN = "auth/invalid-token"
    USER_NOT_FOUND = "auth/user-not-found"
    WRONG_PASSWORD = "auth/wrong-password"
    EMAIL_EXISTS = "auth/email-exists"
    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    MALFORMED_PAYLOAD = "location/malformed-payload"
    TOO_FREQUENT = "location/too-frequent"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    SERVER_ERROR = "server_error"


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information.
    """

    status_code: ClassVar[int] = 400
    kind: ClassVar[ErrorKind] = ErrorKind.VALIDATION


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    status_code = 401
    kind = ErrorKind.UNAUTHENTICATED

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    """Raised when a session token is malformed, tampered with or expired."""

    kind = ErrorKind.INVALID_TOKEN

    def __init__(self, message: str = "Invalid or expired session token") -> None:
        super().__init__(message)


class UserNotFoundError(AuthenticationError):
    """Raised when logging in with an email that is not registered."""

    kind = ErrorKind.USER_NOT_FOUND

    def __init__(self, message: str = "Email is not registered") -> None:
        super().__init__(message)


class WrongPasswordError(AuthenticationError):
    kind = ErrorKind.WRONG_PASSWORD

    def __init__(self, message: str = "Password does not match") -> None:
        super().__init__(message)


class NotFoundError(UserError):
    """Raised when a requested resource is not found."""

    status_code = 404
    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str = "Document not found") -> None:
        super().__init__(message)


class ValidationError(UserError):
    """Raised when user input fails validation."""


class MalformedPayloadError(ValidationError):
    """Raised when a location payload is missing fields or has wrong types."""

    kind = ErrorKind.MALFORMED_PAYLOAD


class ConflictError(UserError):
    """Raised when creating a resource that already exists."""

    status_code = 409
    kind = ErrorKind.EMAIL_EXISTS


class RateLimitExceededError(UserError):
    """Raised by the sliding-window rate limiter when a key is over its limit."""

    status_code = 429
    kind = ErrorKind.RATE_LIMIT_EXCEEDED

    def __init__(self, message: str = "Rate limit exceeded") -> None:
        super().__init__(message)


class TooManyRequestsError(UserError):
    """Raised when a location update arrives before the minimum interval has elapsed."""

    status_code = 429
    kind = ErrorKind.TOO_FREQUENT


class StoreError(Exception):
    """Raised when the user store fails to read or write a record.

    Never shown to the user; rendered as a generic server error.
    """
