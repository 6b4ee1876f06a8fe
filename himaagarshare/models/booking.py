"""Booking model."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Index, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from himaagarshare.database import Base
from himaagarshare.domain.booking_state import BookingStatus, PaymentStatus
from himaagarshare.utils.clock import utcnow

if TYPE_CHECKING:
    from himaagarshare.models.listing import Listing


class Booking(Base):
    """Capacity reservation on a listing for a date range.

    Rows are never deleted; rejected, cancelled and completed bookings stay
    for history and drop out of capacity accounting by status alone.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("capacity_required > 0", name="ck_bookings_capacity_positive"),
        CheckConstraint("end_date > start_date", name="ck_bookings_date_order"),
        CheckConstraint("total_price >= 0", name="ck_bookings_price_non_negative"),
        Index("ix_bookings_listing_dates", "listing_id", "start_date", "end_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    listing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("listings.id"), nullable=False, index=True
    )
    renter_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Cubic feet
    capacity_required: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Dates (inclusive range, calendar days)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Fixed at creation, never recomputed
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    # Status
    status: Mapped[str] = mapped_column(
        String(20), default=BookingStatus.PENDING.value, nullable=False, index=True
    )  # pending, approved, rejected, completed, cancelled
    payment_status: Mapped[str] = mapped_column(
        String(20), default=PaymentStatus.PENDING.value, nullable=False
    )  # pending, paid, refunded
    payment_id: Mapped[str | None] = mapped_column(String(64))  # MOCK_PAY_XXXXXXXXXXXX

    notes: Mapped[str | None] = mapped_column(Text)
    rejection_reason: Mapped[str | None] = mapped_column(Text)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    listing: Mapped["Listing"] = relationship("Listing", back_populates="bookings")

    @property
    def days(self) -> int:
        """Number of billed calendar days."""
        return (self.end_date - self.start_date).days
