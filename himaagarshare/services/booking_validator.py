"""Booking request admission checks."""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from himaagarshare.core.exceptions import (
    ExceedsAvailableCapacity,
    ExceedsTotalCapacity,
    InvalidDateRange,
    ListingUnavailable,
    MissingField,
    StartDateInPast,
)
from himaagarshare.domain.pricing import to_decimal
from himaagarshare.schemas.booking import BookingCreate
from himaagarshare.services.capacity_ledger import CapacityLedger, capacity_ledger
from himaagarshare.services.listing_accessor import (
    ListingCapacity,
    ListingCapacityAccessor,
    listing_accessor,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    ("listing_id", "listingId"),
    ("capacity_required", "capacityRequired"),
    ("start_date", "startDate"),
    ("end_date", "endDate"),
)


@dataclass(frozen=True)
class ValidatedRequest:
    """Normalized booking request that passed every admission check."""

    listing_id: UUID
    capacity_required: Decimal
    start_date: date
    end_date: date
    notes: str | None
    listing: ListingCapacity
    remaining_capacity: Decimal


def check_required_fields(request: BookingCreate) -> None:
    missing = [alias for name, alias in REQUIRED_FIELDS if getattr(request, name) is None]
    if missing:
        raise MissingField(missing)


class BookingRequestValidator:
    """Runs the admission checks in order; the first failure is raised."""

    def __init__(
        self,
        accessor: ListingCapacityAccessor | None = None,
        ledger: CapacityLedger | None = None,
    ):
        self.accessor = accessor or listing_accessor
        self.ledger = ledger or capacity_ledger

    async def validate(
        self,
        db: AsyncSession,
        request: BookingCreate,
        today: date,
        *,
        lock_listing: bool = False,
    ) -> ValidatedRequest:
        """Validate a booking request against the catalog and the ledger.

        Args:
            db: Session the whole admission runs in
            request: Incoming request, fields possibly missing
            today: Caller's calendar date
            lock_listing: Take the listing row lock for the transaction

        Raises:
            MissingField, ListingUnavailable, StartDateInPast,
            InvalidDateRange, ExceedsTotalCapacity, ExceedsAvailableCapacity
        """
        check_required_fields(request)

        listing = await self.accessor.get_active_listing(
            db, request.listing_id, lock=lock_listing
        )
        if listing is None or not listing.is_active:
            raise ListingUnavailable()

        if request.start_date < today:
            raise StartDateInPast()

        if request.end_date <= request.start_date:
            raise InvalidDateRange()

        capacity = to_decimal(request.capacity_required)
        if capacity > listing.total_capacity:
            raise ExceedsTotalCapacity(listing.total_capacity)

        remaining = await self.ledger.remaining_capacity(
            db,
            listing.id,
            request.start_date,
            request.end_date,
            total_capacity=listing.total_capacity,
        )
        if capacity > remaining:
            logger.info(
                f"Rejecting {capacity} cu ft on listing {listing.id} "
                f"for {request.start_date}..{request.end_date}: {remaining} remaining"
            )
            raise ExceedsAvailableCapacity(max(remaining, Decimal("0")))

        return ValidatedRequest(
            listing_id=listing.id,
            capacity_required=capacity,
            start_date=request.start_date,
            end_date=request.end_date,
            notes=request.notes,
            listing=listing,
            remaining_capacity=remaining,
        )


booking_validator = BookingRequestValidator()
