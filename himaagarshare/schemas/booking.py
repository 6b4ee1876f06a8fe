"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from himaagarshare.domain.pricing import quantize_money

# Money and capacity leave the API as strings with exactly two decimals
TwoPlaces = Annotated[
    Decimal,
    PlainSerializer(lambda v: str(quantize_money(v)), return_type=str, when_used="json"),
]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case accepted on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BookingCreate(CamelModel):
    """Schema for creating a booking.

    Required fields are optional here on purpose: their absence is reported
    by the validator as a ``MissingField`` error, not a schema error.
    """

    listing_id: UUID | None = None
    # Stored as Numeric(10, 2): at most 8 whole digits and 2 decimals
    capacity_required: Annotated[Decimal, Field(gt=0, max_digits=10, decimal_places=2)] | None = None
    start_date: date | None = None
    end_date: date | None = None
    notes: str | None = Field(None, max_length=1000)


class BookingStatusUpdate(CamelModel):
    """Schema for a host decision on a pending booking."""

    status: str | None = None
    rejection_reason: str | None = Field(None, max_length=1000)


class ListingSummary(CamelModel):
    """Listing context shown alongside a booking."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: UUID
    title: str
    location: str | None
    storage_type: str | None
    price_per_unit_day: TwoPlaces


class BookingResponse(CamelModel):
    """Schema for booking response."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: UUID
    listing_id: UUID
    renter_id: UUID
    listing: ListingSummary

    capacity_required: TwoPlaces
    start_date: date
    end_date: date
    days: int
    total_price: TwoPlaces

    status: str
    payment_status: str
    payment_id: str | None

    notes: str | None
    rejection_reason: str | None

    created_at: datetime
    updated_at: datetime
    approved_at: datetime | None
    rejected_at: datetime | None
    cancelled_at: datetime | None
    completed_at: datetime | None


class BookingListResponse(CamelModel):
    """Schema for booking list."""

    bookings: list[BookingResponse]
    total: int


class BookingQuoteRequest(BookingCreate):
    """Schema for checking capacity and price without creating a booking."""


class BookingQuoteResponse(CamelModel):
    """Schema for a capacity and price quote."""

    available: bool
    remaining_capacity: TwoPlaces | None = None
    days: int | None = None
    total_price: TwoPlaces | None = None
    unavailable_reason: str | None = None
    unavailable_kind: str | None = None

