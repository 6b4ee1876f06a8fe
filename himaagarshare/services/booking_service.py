"""Booking lifecycle service.

Every operation that changes booking state runs under the listing lock and
commits its own transaction before the lock is released, so the next
request for the same listing always sees the committed result.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from uuid import UUID, uuid4

from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from himaagarshare.core.exceptions import (
    AuthorizationError,
    Forbidden,
    InvalidStatus,
    InvalidTransition,
    ListingUnavailable,
    NotFoundError,
    PaymentError,
    ValidationError,
)
from himaagarshare.core.security import ActingUser
from himaagarshare.domain.booking_state import (
    BookingStatus,
    PaymentStatus,
    assert_booking_transition,
)
from himaagarshare.domain.pricing import billable_days, calculate_total_price
from himaagarshare.gateways.base import PaymentStub
from himaagarshare.models.booking import Booking
from himaagarshare.models.listing import Listing
from himaagarshare.schemas.booking import BookingCreate, BookingQuoteResponse
from himaagarshare.services.booking_validator import (
    BookingRequestValidator,
    booking_validator,
    check_required_fields,
)
from himaagarshare.services.listing_accessor import ListingCapacityAccessor, listing_accessor
from himaagarshare.services.listing_locks import ListingLockRegistry, listing_locks
from himaagarshare.utils.clock import utcnow
from himaagarshare.utils.payment_reference import generate_payment_reference

logger = logging.getLogger(__name__)

HOST_DECISIONS = (BookingStatus.APPROVED.value, BookingStatus.REJECTED.value)


class BookingService:
    """Create bookings and drive them through their lifecycle."""

    def __init__(
        self,
        validator: BookingRequestValidator | None = None,
        accessor: ListingCapacityAccessor | None = None,
        locks: ListingLockRegistry | None = None,
    ):
        self.validator = validator or booking_validator
        self.accessor = accessor or listing_accessor
        self.locks = locks or listing_locks

    @asynccontextmanager
    async def _listing_transaction(
        self, db: AsyncSession, listing_id: UUID
    ) -> AsyncIterator[None]:
        """Serialize on the listing and commit (or roll back) before unlocking."""
        async with self.locks.hold(listing_id):
            try:
                yield
                await db.commit()
            except Exception:
                await db.rollback()
                raise

    async def _load_booking(
        self, db: AsyncSession, booking_id: UUID, *, lock: bool = False
    ) -> Booking:
        query = (
            select(Booking)
            .options(selectinload(Booking.listing))
            .where(Booking.id == booking_id)
        )
        if lock:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await db.execute(query)
        booking = result.scalar_one_or_none()
        if booking is None:
            raise NotFoundError("Booking", str(booking_id))
        return booking

    async def _assert_listing_owner(
        self, db: AsyncSession, acting_user: ActingUser, booking: Booking
    ) -> None:
        if not acting_user.is_host:
            raise AuthorizationError("Host role required")
        listing = await self.accessor.get_active_listing(db, booking.listing_id, lock=True)
        if listing is None or listing.owner_id != acting_user.id:
            raise Forbidden()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_booking(
        self,
        db: AsyncSession,
        acting_user: ActingUser,
        request: BookingCreate,
        today: date,
    ) -> Booking:
        """Admit a renter's request as a pending booking.

        Validation, the capacity query and the insert share one transaction
        under the listing lock. A failed request leaves no row behind.
        """
        if not acting_user.is_renter:
            raise AuthorizationError("Renter role required")
        check_required_fields(request)

        async with self._listing_transaction(db, request.listing_id):
            try:
                validated = await self.validator.validate(db, request, today, lock_listing=True)
            except (ValidationError, ListingUnavailable) as exc:
                logger.info(
                    f"Booking request by {acting_user.id} on listing {request.listing_id} "
                    f"rejected: {exc.kind}"
                )
                raise

            booking_id = uuid4()
            booking = Booking(
                id=booking_id,
                listing_id=validated.listing_id,
                renter_id=acting_user.id,
                capacity_required=validated.capacity_required,
                start_date=validated.start_date,
                end_date=validated.end_date,
                total_price=calculate_total_price(
                    validated.capacity_required,
                    validated.start_date,
                    validated.end_date,
                    validated.listing.price_per_unit_day,
                ),
                notes=validated.notes,
                status=BookingStatus.PENDING.value,
                payment_status=PaymentStatus.PENDING.value,
                payment_id=generate_payment_reference(booking_id),
                created_at=utcnow(),
            )
            db.add(booking)
            await db.flush()
            await db.refresh(booking, attribute_names=["listing"])

        logger.info(
            f"Booking {booking.id} created: {booking.capacity_required} cu ft on "
            f"listing {booking.listing_id} for {booking.start_date}..{booking.end_date}"
        )
        return booking

    async def quote(
        self,
        db: AsyncSession,
        request: BookingCreate,
        today: date,
    ) -> BookingQuoteResponse:
        """Run the admission checks without creating anything."""
        try:
            validated = await self.validator.validate(db, request, today)
        except (ValidationError, ListingUnavailable) as exc:
            return BookingQuoteResponse(
                available=False,
                remaining_capacity=getattr(exc, "remaining", None),
                unavailable_reason=exc.detail,
                unavailable_kind=exc.kind,
            )

        return BookingQuoteResponse(
            available=True,
            remaining_capacity=validated.remaining_capacity,
            days=billable_days(validated.start_date, validated.end_date),
            total_price=calculate_total_price(
                validated.capacity_required,
                validated.start_date,
                validated.end_date,
                validated.listing.price_per_unit_day,
            ),
        )

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def decide(
        self,
        db: AsyncSession,
        acting_user: ActingUser,
        booking_id: UUID,
        status: str | None,
        payment: PaymentStub,
        rejection_reason: str | None = None,
    ) -> Booking:
        """Apply a host decision (approved or rejected)."""
        if status not in HOST_DECISIONS:
            raise InvalidStatus()
        if status == BookingStatus.APPROVED.value:
            return await self.approve_booking(db, acting_user, booking_id, payment)
        return await self.reject_booking(db, acting_user, booking_id, rejection_reason)

    async def approve_booking(
        self,
        db: AsyncSession,
        acting_user: ActingUser,
        booking_id: UUID,
        payment: PaymentStub,
    ) -> Booking:
        """pending -> approved; the payment stub marks the booking paid."""
        booking = await self._load_booking(db, booking_id)

        async with self._listing_transaction(db, booking.listing_id):
            booking = await self._load_booking(db, booking_id, lock=True)
            await self._assert_listing_owner(db, acting_user, booking)
            assert_booking_transition(booking.status, BookingStatus.APPROVED)

            result = await payment.charge(
                reference_id=booking.payment_id or generate_payment_reference(booking.id),
                amount=booking.total_price,
                description=f"Cold storage booking {booking.id}",
            )
            if not result.success:
                raise PaymentError(result.error_message or "Payment processing failed")

            booking.status = BookingStatus.APPROVED.value
            booking.payment_status = PaymentStatus.PAID.value
            booking.payment_id = result.transaction_id or booking.payment_id
            booking.approved_at = utcnow()
            await db.flush()

        logger.info(
            f"Booking {booking.id} on listing {booking.listing_id}: pending -> approved "
            f"(host {acting_user.id})"
        )
        return booking

    async def reject_booking(
        self,
        db: AsyncSession,
        acting_user: ActingUser,
        booking_id: UUID,
        rejection_reason: str | None = None,
    ) -> Booking:
        """pending -> rejected, frees the capacity the request held."""
        booking = await self._load_booking(db, booking_id)

        async with self._listing_transaction(db, booking.listing_id):
            booking = await self._load_booking(db, booking_id, lock=True)
            await self._assert_listing_owner(db, acting_user, booking)
            assert_booking_transition(booking.status, BookingStatus.REJECTED)

            booking.status = BookingStatus.REJECTED.value
            if rejection_reason:
                booking.rejection_reason = rejection_reason
            booking.rejected_at = utcnow()
            await db.flush()

        logger.info(
            f"Booking {booking.id} on listing {booking.listing_id}: pending -> rejected "
            f"(host {acting_user.id})"
        )
        return booking

    async def cancel_booking(
        self,
        db: AsyncSession,
        acting_user: ActingUser,
        booking_id: UUID,
        payment: PaymentStub,
    ) -> Booking:
        """pending|approved -> cancelled; a paid booking is refunded."""
        if not acting_user.is_renter:
            raise AuthorizationError("Renter role required")
        booking = await self._load_booking(db, booking_id)

        async with self._listing_transaction(db, booking.listing_id):
            booking = await self._load_booking(db, booking_id, lock=True)
            if booking.renter_id != acting_user.id:
                raise Forbidden("Booking not found")
            assert_booking_transition(booking.status, BookingStatus.CANCELLED)
            previous_status = booking.status

            if booking.payment_status == PaymentStatus.PAID.value:
                result = await payment.refund(
                    transaction_id=booking.payment_id or generate_payment_reference(booking.id),
                    amount=booking.total_price,
                    reason="Booking cancelled by renter",
                )
                if not result.success:
                    raise PaymentError(result.error_message or "Refund failed")
                booking.payment_status = PaymentStatus.REFUNDED.value

            booking.status = BookingStatus.CANCELLED.value
            booking.cancelled_at = utcnow()
            await db.flush()

        logger.info(
            f"Booking {booking.id} on listing {booking.listing_id}: {previous_status} -> cancelled "
            f"(renter {acting_user.id})"
        )
        return booking

    async def complete_booking(self, db: AsyncSession, booking_id: UUID) -> Booking:
        """approved -> completed. System trigger, no acting user."""
        booking = await self._load_booking(db, booking_id)

        async with self._listing_transaction(db, booking.listing_id):
            booking = await self._load_booking(db, booking_id, lock=True)
            assert_booking_transition(booking.status, BookingStatus.COMPLETED)
            booking.status = BookingStatus.COMPLETED.value
            booking.completed_at = utcnow()
            await db.flush()

        logger.info(
            f"Booking {booking.id} on listing {booking.listing_id}: approved -> completed"
        )
        return booking

    async def complete_finished_bookings(self, db: AsyncSession, today: date) -> list[UUID]:
        """Complete every approved booking whose last day is before ``today``.

        The candidates are read without a lock, so a booking may be cancelled
        before its turn comes. That booking is skipped and the batch goes on.
        """
        result = await db.execute(
            select(Booking.id)
            .where(
                Booking.status == BookingStatus.APPROVED.value,
                Booking.end_date < today,
            )
            .order_by(Booking.end_date, Booking.created_at)
        )
        booking_ids = list(result.scalars().all())
        completed = []
        for booking_id in booking_ids:
            try:
                await self.complete_booking(db, booking_id)
            except InvalidTransition as exc:
                logger.warning(
                    f"Skipping completion of booking {booking_id}: "
                    f"status changed to {exc.current_status}"
                )
                continue
            completed.append(booking_id)
        return completed

    # ------------------------------------------------------------------
    # Reads (unsynchronized, may be stale)
    # ------------------------------------------------------------------

    async def get_booking(
        self, db: AsyncSession, acting_user: ActingUser, booking_id: UUID
    ) -> Booking:
        """A booking visible to its renter or to the listing owner."""
        booking = await self._load_booking(db, booking_id)
        if booking.renter_id == acting_user.id:
            return booking
        listing = await self.accessor.get_active_listing(db, booking.listing_id)
        if listing is not None and listing.owner_id == acting_user.id:
            return booking
        raise NotFoundError("Booking", str(booking_id))

    async def list_renter_bookings(
        self, db: AsyncSession, acting_user: ActingUser
    ) -> list[Booking]:
        """All of a renter's bookings, newest first, terminal ones included."""
        if not acting_user.is_renter:
            raise AuthorizationError("Renter role required")
        result = await db.execute(
            select(Booking)
            .options(selectinload(Booking.listing))
            .where(Booking.renter_id == acting_user.id)
            .order_by(Booking.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_host_requests(
        self, db: AsyncSession, acting_user: ActingUser
    ) -> list[Booking]:
        """Bookings on the host's listings: pending first, then newest first."""
        if not acting_user.is_host:
            raise AuthorizationError("Host role required")
        pending_first = case(
            (Booking.status == BookingStatus.PENDING.value, 0),
            else_=1,
        )
        result = await db.execute(
            select(Booking)
            .options(selectinload(Booking.listing))
            .join(Listing, Listing.id == Booking.listing_id)
            .where(Listing.owner_id == acting_user.id)
            .order_by(pending_first, Booking.created_at.desc())
        )
        return list(result.scalars().all())


booking_service = BookingService()
