"""Core utilities and security modules."""

from hallbook.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    HallNotAvailable,
    InvalidBookingStatus,
    NotFoundError,
    TransitionFailed,
    ValidationError,
)
from hallbook.core.security import create_access_token, verify_token

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "HallNotAvailable",
    "InvalidBookingStatus",
    "NotFoundError",
    "TransitionFailed",
    "ValidationError",
    "create_access_token",
    "verify_token",
]
