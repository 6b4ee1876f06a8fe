"""Listing model.

Listings belong to the catalog service; this table mirrors the columns the
booking core reads. The booking core never writes to it.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from himaagarshare.database import Base
from himaagarshare.utils.clock import utcnow

if TYPE_CHECKING:
    from himaagarshare.models.booking import Booking


class Listing(Base):
    """Cold-storage listing offered by a host."""

    __tablename__ = "listings"
    __table_args__ = (
        CheckConstraint("total_capacity > 0", name="ck_listings_total_capacity_positive"),
        CheckConstraint("price_per_unit_day >= 0", name="ck_listings_price_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Identity provider user id; no local users table
    owner_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    location: Mapped[str | None] = mapped_column(String(255))
    storage_type: Mapped[str | None] = mapped_column(
        String(30)
    )  # Freezer, Chiller, Dry Cold Room

    # Capacity in cubic feet, price per cubic foot per day
    total_capacity: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    price_per_unit_day: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    status: Mapped[str] = mapped_column(
        String(20), default="active", nullable=False, index=True
    )  # active, inactive, deleted

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="listing")
