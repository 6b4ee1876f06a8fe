"""Booking endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from himaagarshare.api.deps import (
    get_acting_user,
    get_current_host,
    get_current_renter,
    get_db,
    get_payment_gateway,
    get_today,
)
from himaagarshare.core.security import ActingUser
from himaagarshare.gateways.base import PaymentStub
from himaagarshare.models.booking import Booking
from himaagarshare.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingQuoteRequest,
    BookingQuoteResponse,
    BookingResponse,
    BookingStatusUpdate,
)
from himaagarshare.services.booking_service import booking_service

router = APIRouter()


@router.post("/calculate", response_model=BookingQuoteResponse)
async def calculate_booking(
    request: BookingQuoteRequest,
    _: Annotated[ActingUser, Depends(get_acting_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    today: Annotated[date, Depends(get_today)],
) -> BookingQuoteResponse:
    """Check remaining capacity and price without creating a booking."""
    return await booking_service.quote(db, request, today)


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    current_user: Annotated[ActingUser, Depends(get_current_renter)],
    db: Annotated[AsyncSession, Depends(get_db)],
    today: Annotated[date, Depends(get_today)],
) -> Booking:
    """Create a new booking (renter only). Awaits host approval."""
    return await booking_service.create_booking(db, current_user, booking_data, today)


@router.get("/my-bookings", response_model=BookingListResponse)
async def get_my_bookings(
    current_user: Annotated[ActingUser, Depends(get_current_renter)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingListResponse:
    """Get the renter's bookings, newest first."""
    bookings = await booking_service.list_renter_bookings(db, current_user)
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=len(bookings),
    )


@router.get("/requests", response_model=BookingListResponse)
async def get_booking_requests(
    current_user: Annotated[ActingUser, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingListResponse:
    """Get booking requests on the host's listings, pending first."""
    bookings = await booking_service.list_host_requests(db, current_user)
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=len(bookings),
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: UUID,
    current_user: Annotated[ActingUser, Depends(get_acting_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Get a booking by ID (its renter or the listing owner)."""
    return await booking_service.get_booking(db, current_user, booking_id)


@router.put("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: UUID,
    request: BookingStatusUpdate,
    current_user: Annotated[ActingUser, Depends(get_current_host)],
    db: Annotated[AsyncSession, Depends(get_db)],
    payment: Annotated[PaymentStub, Depends(get_payment_gateway)],
) -> Booking:
    """Approve or reject a pending booking (listing owner only)."""
    return await booking_service.decide(
        db,
        current_user,
        booking_id,
        request.status,
        payment,
        rejection_reason=request.rejection_reason,
    )


@router.put("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: UUID,
    current_user: Annotated[ActingUser, Depends(get_current_renter)],
    db: Annotated[AsyncSession, Depends(get_db)],
    payment: Annotated[PaymentStub, Depends(get_payment_gateway)],
) -> Booking:
    """Cancel a pending or approved booking (its renter only)."""
    return await booking_service.cancel_booking(db, current_user, booking_id, payment)
