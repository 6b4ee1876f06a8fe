"""
Tests for the booking lifecycle service
"""
import asyncio
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import update

from conftest import TODAY, make_booking, make_listing
from himaagarshare.core.exceptions import (
    AuthorizationError,
    ExceedsAvailableCapacity,
    Forbidden,
    InvalidStatus,
    InvalidTransition,
    MissingField,
    NotFoundError,
    PaymentError,
)
from himaagarshare.models import Booking
from himaagarshare.schemas.booking import BookingCreate


def request_for(listing, capacity="10", start=date(2026, 1, 2), end=date(2026, 1, 5)):
    return BookingCreate(
        listing_id=listing.id,
        capacity_required=Decimal(capacity),
        start_date=start,
        end_date=end,
    )


class TestCreateBooking:

    @pytest.mark.asyncio
    async def test_creates_pending_booking(self, db, service, listing, renter):
        booking = await service.create_booking(db, renter, request_for(listing), TODAY)

        assert booking.status == "pending"
        assert booking.payment_status == "pending"
        assert booking.renter_id == renter.id
        assert booking.total_price == Decimal("75.00")
        assert booking.payment_id == f"MOCK_PAY_{booking.id.hex[:12].upper()}"
        assert booking.days == 3

    @pytest.mark.asyncio
    async def test_host_cannot_book(self, db, service, listing, host):
        with pytest.raises(AuthorizationError):
            await service.create_booking(db, host, request_for(listing), TODAY)

    @pytest.mark.asyncio
    async def test_missing_fields_leave_no_row(self, db, service, listing, renter):
        with pytest.raises(MissingField):
            await service.create_booking(db, renter, BookingCreate(listing_id=listing.id), TODAY)

        result = await db.execute(Booking.__table__.select())
        assert result.all() == []

    @pytest.mark.asyncio
    async def test_capacity_example(self, db, service, listing, renter, other_renter):
        await make_booking(db, listing, other_renter, date(2026, 1, 1), date(2026, 1, 10), "60", "approved")

        with pytest.raises(ExceedsAvailableCapacity) as exc_info:
            await service.create_booking(
                db, renter, request_for(listing, "50", date(2026, 1, 5), date(2026, 1, 7)), TODAY
            )
        assert exc_info.value.remaining == Decimal("40")

        booking = await service.create_booking(
            db, renter, request_for(listing, "40", date(2026, 1, 5), date(2026, 1, 7)), TODAY
        )
        assert booking.status == "pending"

    @pytest.mark.asyncio
    async def test_lock_released_after_failure(self, db, service, listing, renter):
        await make_booking(db, listing, renter, date(2026, 1, 1), date(2026, 1, 10), "100", "pending")

        with pytest.raises(ExceedsAvailableCapacity):
            await service.create_booking(db, renter, request_for(listing), TODAY)

        assert service.locks.is_locked(listing.id) is False

    @pytest.mark.asyncio
    async def test_concurrent_requests_cannot_oversell(self, session_factory, service, listing, renter, other_renter):
        async def attempt(user):
            async with session_factory() as session:
                return await service.create_booking(
                    session, user, request_for(listing, "60", date(2026, 1, 2), date(2026, 1, 8)), TODAY
                )

        results = await asyncio.gather(attempt(renter), attempt(other_renter), return_exceptions=True)

        created = [r for r in results if isinstance(r, Booking)]
        rejected = [r for r in results if isinstance(r, ExceedsAvailableCapacity)]
        assert len(created) == 1
        assert len(rejected) == 1
        assert rejected[0].remaining == Decimal("40")


class TestHostDecision:

    @pytest.mark.asyncio
    async def test_approve(self, db, service, payment, listing, host, renter):
        booking = await service.create_booking(db, renter, request_for(listing), TODAY)

        approved = await service.decide(db, host, booking.id, "approved", payment)

        assert approved.status == "approved"
        assert approved.payment_status == "paid"
        assert approved.approved_at is not None

    @pytest.mark.asyncio
    async def test_approve_twice(self, db, service, payment, listing, host, renter):
        booking = await service.create_booking(db, renter, request_for(listing), TODAY)
        await service.decide(db, host, booking.id, "approved", payment)

        with pytest.raises(InvalidTransition) as exc_info:
            await service.decide(db, host, booking.id, "approved", payment)
        assert exc_info.value.current_status == "approved"

    @pytest.mark.asyncio
    async def test_reject_frees_capacity(self, db, service, payment, listing, host, renter, other_renter):
        booking = await service.create_booking(db, renter, request_for(listing, "60"), TODAY)

        rejected = await service.decide(
            db, host, booking.id, "rejected", payment, rejection_reason="Unit under maintenance"
        )
        assert rejected.status == "rejected"
        assert rejected.rejection_reason == "Unit under maintenance"
        assert rejected.rejected_at is not None

        full = await service.create_booking(db, other_renter, request_for(listing, "100"), TODAY)
        assert full.status == "pending"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [None, "pending", "completed", "cancelled", "maybe"])
    async def test_only_approve_or_reject(self, db, service, payment, listing, host, renter, status):
        booking = await service.create_booking(db, renter, request_for(listing), TODAY)

        with pytest.raises(InvalidStatus):
            await service.decide(db, host, booking.id, status, payment)

    @pytest.mark.asyncio
    async def test_other_host_is_forbidden(self, db, service, payment, listing, other_host, renter):
        booking = await service.create_booking(db, renter, request_for(listing), TODAY)

        with pytest.raises(Forbidden) as exc_info:
            await service.decide(db, other_host, booking.id, "approved", payment)
        assert exc_info.value.status_code == 404

        await db.refresh(booking)
        assert booking.status == "pending"

    @pytest.mark.asyncio
    async def test_renter_cannot_decide(self, db, service, payment, listing, renter):
        booking = await service.create_booking(db, renter, request_for(listing), TODAY)

        with pytest.raises(AuthorizationError):
            await service.decide(db, renter, booking.id, "approved", payment)

    @pytest.mark.asyncio
    async def test_unknown_booking(self, db, service, payment, host):
        with pytest.raises(NotFoundError):
            await service.decide(db, host, uuid4(), "approved", payment)


class TestCancelBooking:

    @pytest.mark.asyncio
    async def test_cancel_pending(self, db, service, payment, listing, renter):
        booking = await service.create_booking(db, renter, request_for(listing), TODAY)

        cancelled = await service.cancel_booking(db, renter, booking.id, payment)

        assert cancelled.status == "cancelled"
        assert cancelled.payment_status == "pending"
        assert cancelled.cancelled_at is not None

    @pytest.mark.asyncio
    async def test_cancel_approved_refunds(self, db, service, payment, listing, host, renter):
        booking = await service.create_booking(db, renter, request_for(listing), TODAY)
        await service.decide(db, host, booking.id, "approved", payment)

        cancelled = await service.cancel_booking(db, renter, booking.id, payment)

        assert cancelled.status == "cancelled"
        assert cancelled.payment_status == "refunded"

    @pytest.mark.asyncio
    async def test_cancel_rejected(self, db, service, payment, listing, host, renter):
        booking = await service.create_booking(db, renter, request_for(listing), TODAY)
        await service.decide(db, host, booking.id, "rejected", payment)

        with pytest.raises(InvalidTransition) as exc_info:
            await service.cancel_booking(db, renter, booking.id, payment)
        assert exc_info.value.to_content()["currentStatus"] == "rejected"

    @pytest.mark.asyncio
    async def test_other_renter_is_forbidden(self, db, service, payment, listing, renter, other_renter):
        booking = await service.create_booking(db, renter, request_for(listing), TODAY)

        with pytest.raises(Forbidden):
            await service.cancel_booking(db, other_renter, booking.id, payment)

    @pytest.mark.asyncio
    async def test_cancelled_capacity_is_released(self, db, service, payment, listing, renter, other_renter):
        booking = await service.create_booking(db, renter, request_for(listing, "80"), TODAY)
        await service.cancel_booking(db, renter, booking.id, payment)

        again = await service.create_booking(db, other_renter, request_for(listing, "80"), TODAY)
        assert again.status == "pending"


class TestCompletion:

    @pytest.mark.asyncio
    async def test_complete_finished_bookings(self, db, service, listing, renter):
        ended = await make_booking(db, listing, renter, date(2025, 12, 1), date(2025, 12, 10), "10", "approved")
        ends_today = await make_booking(db, listing, renter, date(2025, 12, 20), TODAY, "10", "approved")
        pending = await make_booking(db, listing, renter, date(2025, 12, 1), date(2025, 12, 5), "10", "pending")

        completed = await service.complete_finished_bookings(db, TODAY)

        assert completed == [ended.id]
        for booking in (ended, ends_today, pending):
            await db.refresh(booking)
        assert ended.status == "completed"
        assert ended.completed_at is not None
        assert ends_today.status == "approved"
        assert pending.status == "pending"

    @pytest.mark.asyncio
    async def test_pending_cannot_complete(self, db, service, listing, renter):
        booking = await make_booking(db, listing, renter, date(2025, 12, 1), date(2025, 12, 5))

        with pytest.raises(InvalidTransition):
            await service.complete_booking(db, booking.id)


class TestReads:

    @pytest.mark.asyncio
    async def test_renter_bookings_newest_first_with_history(self, db, service, listing, renter, other_renter):
        base = datetime(2025, 12, 1, tzinfo=timezone.utc)
        oldest = await make_booking(db, listing, renter, date(2026, 1, 2), date(2026, 1, 3), status="cancelled", created_at=base)
        middle = await make_booking(db, listing, renter, date(2026, 1, 2), date(2026, 1, 3), status="rejected", created_at=base + timedelta(hours=1))
        newest = await make_booking(db, listing, renter, date(2026, 1, 2), date(2026, 1, 3), created_at=base + timedelta(hours=2))
        await make_booking(db, listing, other_renter, date(2026, 1, 2), date(2026, 1, 3))

        bookings = await service.list_renter_bookings(db, renter)

        assert [b.id for b in bookings] == [newest.id, middle.id, oldest.id]

    @pytest.mark.asyncio
    async def test_host_requests_pending_first(self, db, service, listing, host, other_host, renter):
        base = datetime(2025, 12, 1, tzinfo=timezone.utc)
        old_pending = await make_booking(db, listing, renter, date(2026, 1, 2), date(2026, 1, 3), created_at=base)
        approved = await make_booking(db, listing, renter, date(2026, 1, 2), date(2026, 1, 3), status="approved", created_at=base + timedelta(hours=1))
        new_pending = await make_booking(db, listing, renter, date(2026, 1, 2), date(2026, 1, 3), created_at=base + timedelta(hours=2))
        cancelled = await make_booking(db, listing, renter, date(2026, 1, 2), date(2026, 1, 3), status="cancelled", created_at=base + timedelta(hours=3))
        foreign = await make_listing(db, other_host)
        await make_booking(db, foreign, renter, date(2026, 1, 2), date(2026, 1, 3))

        bookings = await service.list_host_requests(db, host)

        assert [b.id for b in bookings] == [new_pending.id, old_pending.id, cancelled.id, approved.id]

    @pytest.mark.asyncio
    async def test_get_booking_visibility(self, db, service, listing, host, other_host, renter, other_renter):
        booking = await make_booking(db, listing, renter, date(2026, 1, 2), date(2026, 1, 3))

        assert (await service.get_booking(db, renter, booking.id)).id == booking.id
        assert (await service.get_booking(db, host, booking.id)).id == booking.id
        for stranger in (other_host, other_renter):
            with pytest.raises(NotFoundError):
                await service.get_booking(db, stranger, booking.id)


class TestCapacityPrecision:
    """Capacity must fit the two-decimal column it is stored in"""

    @pytest.mark.parametrize("capacity", ["0.004", "10.125", "100000000"])
    def test_rejected_by_schema(self, capacity):
        with pytest.raises(SchemaValidationError):
            BookingCreate(capacity_required=Decimal(capacity))

    @pytest.mark.asyncio
    async def test_cent_precision_is_kept(self, db, service, listing, renter):
        booking = await service.create_booking(db, renter, request_for(listing, "0.01"), TODAY)

        await db.refresh(booking)
        assert booking.capacity_required == Decimal("0.01")
        # 3 days * 0.01 * 2.50
        assert booking.total_price == Decimal("0.08")


class TestPaymentFailure:
    """A declined payment call leaves status and payment status untouched"""

    @pytest.mark.asyncio
    async def test_declined_charge_keeps_booking_pending(
        self, db, session_factory, service, declining_payment, listing, host, renter
    ):
        booking = await service.create_booking(db, renter, request_for(listing), TODAY)

        with pytest.raises(PaymentError) as exc_info:
            await service.decide(db, host, booking.id, "approved", declining_payment)
        assert exc_info.value.status_code == 402
        assert exc_info.value.detail == "Card declined"

        async with session_factory() as fresh:
            stored = await fresh.get(Booking, booking.id)
        assert (stored.status, stored.payment_status) == ("pending", "pending")
        assert stored.approved_at is None

    @pytest.mark.asyncio
    async def test_declined_refund_keeps_booking_approved(
        self, db, session_factory, service, payment, declining_payment, listing, host, renter
    ):
        booking = await service.create_booking(db, renter, request_for(listing), TODAY)
        await service.decide(db, host, booking.id, "approved", payment)

        with pytest.raises(PaymentError):
            await service.cancel_booking(db, renter, booking.id, declining_payment)

        async with session_factory() as fresh:
            stored = await fresh.get(Booking, booking.id)
        assert (stored.status, stored.payment_status) == ("approved", "paid")
        assert stored.cancelled_at is None
        assert service.locks.is_locked(listing.id) is False


class TestCompletionBatch:

    @pytest.mark.asyncio
    async def test_cancelled_mid_batch_is_skipped(
        self, db, session_factory, service, payment, listing, renter, monkeypatch
    ):
        first = await make_booking(db, listing, renter, date(2025, 12, 1), date(2025, 12, 5), "10", "approved")
        second = await make_booking(db, listing, renter, date(2025, 12, 1), date(2025, 12, 10), "10", "approved")

        complete_booking = service.complete_booking

        async def cancel_first_then_complete(session, booking_id):
            if booking_id == first.id:
                async with session_factory() as other:
                    await other.execute(
                        update(Booking).where(Booking.id == first.id).values(status="cancelled")
                    )
                    await other.commit()
            return await complete_booking(session, booking_id)

        monkeypatch.setattr(service, "complete_booking", cancel_first_then_complete)

        completed = await service.complete_finished_bookings(db, TODAY)

        assert completed == [second.id]
        for booking in (first, second):
            await db.refresh(booking)
        assert first.status == "cancelled"
        assert second.status == "completed"
