"""
Core module for the Coursehub backend.

This module contains core functionality including:
- Configuration management
- Database engine, sessions and transactions
- Error taxonomy
- Security utilities (JWT, password hashing)
"""

from .config import Settings
from .database import Base, Database
from .deadline import with_deadline
from .errors import (
    AuthenticationError,
    ConflictError,
    CoursehubError,
    ErrorKind,
    ForbiddenError,
    NotFoundError,
    TransientError,
    ValidationFailedError,
)
from .security import (
    Identity,
    create_access_token,
    create_identity_token,
    identity_from_token,
    verify_password,
    get_password_hash,
    verify_token
)

__all__ = [
    "Settings",
    "Base",
    "Database",
    "with_deadline",
    "AuthenticationError",
    "ConflictError",
    "CoursehubError",
    "ErrorKind",
    "ForbiddenError",
    "NotFoundError",
    "TransientError",
    "ValidationFailedError",
    "Identity",
    "create_access_token",
    "create_identity_token",
    "identity_from_token",
    "verify_password",
    "get_password_hash",
    "verify_token"
]
