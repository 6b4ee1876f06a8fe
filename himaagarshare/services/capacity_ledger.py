"""Capacity ledger.

Remaining capacity is derived from the booking rows on every call. There is
no stored counter on the listing: approvals, cancellations and rejections
change which intervals overlap a given window, so only a fresh sum over the
active bookings is correct.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from himaagarshare.core.exceptions import ListingUnavailable
from himaagarshare.domain.booking_state import ACTIVE_STATUSES
from himaagarshare.domain.pricing import to_decimal
from himaagarshare.models.booking import Booking
from himaagarshare.services.listing_accessor import ListingCapacityAccessor, listing_accessor

ZERO = Decimal("0")


def dates_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Inclusive overlap: ranges sharing a single calendar day conflict."""
    return a_start <= b_end and b_start <= a_end


class CapacityLedger:
    """Answers how much of a listing is still free over a date range."""

    def __init__(self, accessor: ListingCapacityAccessor | None = None):
        self.accessor = accessor or listing_accessor

    async def committed_capacity(
        self,
        db: AsyncSession,
        listing_id: UUID,
        start_date: date,
        end_date: date,
        exclude_booking_id: UUID | None = None,
    ) -> Decimal:
        """Sum of capacity held by active bookings overlapping the range."""
        query = select(func.coalesce(func.sum(Booking.capacity_required), 0)).where(
            Booking.listing_id == listing_id,
            Booking.status.in_([s.value for s in ACTIVE_STATUSES]),
            Booking.start_date <= end_date,
            Booking.end_date >= start_date,
        )
        if exclude_booking_id is not None:
            query = query.where(Booking.id != exclude_booking_id)

        result = await db.execute(query)
        return to_decimal(result.scalar_one() or ZERO)

    async def remaining_capacity(
        self,
        db: AsyncSession,
        listing_id: UUID,
        start_date: date,
        end_date: date,
        exclude_booking_id: UUID | None = None,
        total_capacity: Decimal | None = None,
    ) -> Decimal:
        """Total listing capacity minus what active overlapping bookings hold.

        ``total_capacity`` may be passed when the caller already read the
        listing inside the same transaction.
        """
        if total_capacity is None:
            listing = await self.accessor.get_active_listing(db, listing_id)
            if listing is None:
                raise ListingUnavailable()
            total_capacity = listing.total_capacity

        committed = await self.committed_capacity(
            db, listing_id, start_date, end_date, exclude_booking_id
        )
        return to_decimal(total_capacity) - committed


capacity_ledger = CapacityLedger()
