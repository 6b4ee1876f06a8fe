"""Pydantic schemas for API validation."""

from himaagarshare.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingQuoteRequest,
    BookingQuoteResponse,
    BookingResponse,
    BookingStatusUpdate,
    ListingSummary,
)

__all__ = [
    "BookingCreate",
    "BookingListResponse",
    "BookingQuoteRequest",
    "BookingQuoteResponse",
    "BookingResponse",
    "BookingStatusUpdate",
    "ListingSummary",
]
