"""
Error taxonomy for Coursehub.

Every failure raised by the core carries a human readable message and an
ErrorKind so the HTTP layer can map it to a status code.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Kinds of errors surfaced to callers."""
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    VALIDATION_FAILED = "validation_failed"
    TRANSIENT = "transient"
    UNAUTHENTICATED = "unauthenticated"


class CoursehubError(Exception):
    """Base class for all errors raised by the core."""

    kind: ErrorKind = ErrorKind.VALIDATION_FAILED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(kind='{self.kind.value}', message='{self.message}')>"


class NotFoundError(CoursehubError):
    """An entity, or a link in an ownership chain, does not exist."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, message: str, entity: Optional[str] = None, entity_id: Optional[str] = None):
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id


class ForbiddenError(CoursehubError):
    """Authenticated, but the wrong role or not the owning teacher."""

    kind = ErrorKind.FORBIDDEN


class ConflictError(CoursehubError):
    """
    Duplicate ordinal, enrollment, follow or e-mail.

    retryable is set when the conflict was detected at write time, which
    happens when two requests allocate the same ordinal concurrently.
    """

    kind = ErrorKind.CONFLICT

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


class ValidationFailedError(CoursehubError):
    """Malformed input shape."""

    kind = ErrorKind.VALIDATION_FAILED


class TransientError(CoursehubError):
    """The data store is unavailable or the request deadline expired."""

    kind = ErrorKind.TRANSIENT


class AuthenticationError(CoursehubError):
    """Credentials could not be verified."""

    kind = ErrorKind.UNAUTHENTICATED
