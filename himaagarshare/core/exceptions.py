"""Custom application exceptions.

Every error the booking core raises carries a ``kind`` (stable,
machine-readable) and a human ``detail``. The exception handler in
``himaagarshare.main`` renders them as ``{"detail", "kind", **extra}``.
"""

from decimal import Decimal
from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    kind: str = "Unexpected"

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: str = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.extra = extra or {}
        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def to_content(self) -> dict[str, Any]:
        """Response body for this error."""
        return {"detail": self.detail, "kind": self.kind, **self.extra}


class ValidationError(AppException):
    """Booking request rejected before admission."""

    kind = "ValidationError"

    def __init__(self, detail: str = "Validation failed", extra: dict[str, Any] | None = None) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail, extra=extra)


class MissingField(ValidationError):
    kind = "MissingField"

    def __init__(self, fields: list[str]) -> None:
        self.fields = fields
        super().__init__(
            f"Please provide all required fields: {', '.join(fields)}",
            extra={"fields": fields},
        )


class StartDateInPast(ValidationError):
    kind = "StartDateInPast"

    def __init__(self, detail: str = "Start date cannot be in the past") -> None:
        super().__init__(detail)


class InvalidDateRange(ValidationError):
    kind = "InvalidDateRange"

    def __init__(self, detail: str = "End date must be after start date") -> None:
        super().__init__(detail)


class ExceedsTotalCapacity(ValidationError):
    kind = "ExceedsTotalCapacity"

    def __init__(self, total_capacity: Decimal) -> None:
        self.total_capacity = total_capacity
        super().__init__(
            f"Only {total_capacity:.2f} cubic feet available",
            extra={"totalCapacity": f"{total_capacity:.2f}"},
        )


class ExceedsAvailableCapacity(ValidationError):
    """Not enough unallocated capacity over the requested period."""

    kind = "ExceedsAvailableCapacity"

    def __init__(self, remaining: Decimal) -> None:
        self.remaining = remaining
        super().__init__(
            f"Only {remaining:.2f} cubic feet available for this period",
            extra={"remaining": f"{remaining:.2f}"},
        )


class InvalidStatus(ValidationError):
    kind = "InvalidStatus"

    def __init__(self, detail: str = 'Invalid status. Must be "approved" or "rejected"') -> None:
        super().__init__(detail)


class InvalidTransition(AppException):
    """Booking status does not allow the requested transition."""

    kind = "InvalidTransition"

    def __init__(self, current_status: str, target_status: str) -> None:
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot move booking from {current_status} to {target_status}",
            extra={"currentStatus": current_status},
        )


class NotFoundError(AppException):
    """Resource not found exception."""

    kind = "NotFound"

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ListingUnavailable(AppException):
    """Listing missing or not active."""

    kind = "ListingUnavailable"

    def __init__(self, detail: str = "Listing not found or not available") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Forbidden(AppException):
    """Ownership guard failed; reported as not found so existence is not leaked."""

    kind = "Forbidden"

    def __init__(
        self,
        detail: str = "Booking not found or you do not have permission to update it",
    ) -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuthenticationError(AppException):
    """Authentication failed exception."""

    kind = "Unauthorized"

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(AppException):
    """Acting user does not have the role an endpoint requires."""

    kind = "RoleRequired"

    def __init__(self, detail: str = "You don't have permission to access this resource") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class PaymentError(AppException):
    """Payment stub reported a failure."""

    kind = "PaymentFailed"

    def __init__(self, detail: str = "Payment processing failed") -> None:
        super().__init__(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=detail)


class RateLimitExceeded(AppException):
    """Rate limit exceeded exception."""

    kind = "RateLimited"

    def __init__(self, detail: str = "Too many requests. Please try again later.") -> None:
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=detail)
