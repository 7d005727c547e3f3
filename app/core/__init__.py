"""Core utilities and security modules."""

from app.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DatesNotAvailable,
    InternalError,
    InvalidBookingStatus,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "DatesNotAvailable",
    "InternalError",
    "InvalidBookingStatus",
    "InvalidTokenError",
    "NotFoundError",
    "ValidationError",
]
