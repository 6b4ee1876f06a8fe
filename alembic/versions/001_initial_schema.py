"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2024-01-19

Creates the tables for the HimaagarShare booking core:
- Listings (read-only mirror of the catalog columns bookings depend on)
- Bookings
"""

from typing import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # ==================== LISTINGS ====================
    op.create_table(
        "listings",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("owner_id", sa.Uuid, nullable=False, index=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("location", sa.String(255)),
        sa.Column("storage_type", sa.String(30)),
        sa.Column("total_capacity", sa.Numeric(10, 2), nullable=False),
        sa.Column("price_per_unit_day", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active", index=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("total_capacity > 0", name="ck_listings_total_capacity_positive"),
        sa.CheckConstraint("price_per_unit_day >= 0", name="ck_listings_price_non_negative"),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("listing_id", sa.Uuid, sa.ForeignKey("listings.id"), nullable=False, index=True),
        sa.Column("renter_id", sa.Uuid, nullable=False, index=True),
        sa.Column("capacity_required", sa.Numeric(10, 2), nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=False),
        sa.Column("total_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("payment_id", sa.String(64)),
        sa.Column("notes", sa.Text),
        sa.Column("rejection_reason", sa.Text),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("approved_at", sa.DateTime(timezone=True)),
        sa.Column("rejected_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        sa.CheckConstraint("capacity_required > 0", name="ck_bookings_capacity_positive"),
        sa.CheckConstraint("end_date > start_date", name="ck_bookings_date_order"),
        sa.CheckConstraint("total_price >= 0", name="ck_bookings_price_non_negative"),
    )

    # Capacity ledger scans overlapping bookings per listing
    op.create_index(
        "ix_bookings_listing_dates",
        "bookings",
        ["listing_id", "start_date", "end_date"],
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("ix_bookings_listing_dates", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("listings")
