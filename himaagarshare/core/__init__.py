"""Core utilities: errors, identity tokens, middleware, logging."""

from himaagarshare.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    ExceedsAvailableCapacity,
    ExceedsTotalCapacity,
    Forbidden,
    InvalidDateRange,
    InvalidStatus,
    InvalidTransition,
    ListingUnavailable,
    MissingField,
    NotFoundError,
    StartDateInPast,
    ValidationError,
)
from himaagarshare.core.security import (
    ActingUser,
    Role,
    acting_user_from_token,
    create_access_token,
    verify_token,
)

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "ExceedsAvailableCapacity",
    "ExceedsTotalCapacity",
    "Forbidden",
    "InvalidDateRange",
    "InvalidStatus",
    "InvalidTransition",
    "ListingUnavailable",
    "MissingField",
    "NotFoundError",
    "StartDateInPast",
    "ValidationError",
    "ActingUser",
    "Role",
    "acting_user_from_token",
    "create_access_token",
    "verify_token",
]
