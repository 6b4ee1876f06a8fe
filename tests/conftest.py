"""
Pytest configuration for HimaagarShare tests
"""
import os

# Never reach PostgreSQL or Redis from the test run
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "development")

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from himaagarshare.api.deps import get_db, get_payment_gateway, get_today
from himaagarshare.core.security import ActingUser, Role, create_access_token
from himaagarshare.database import Base
from himaagarshare.gateways.base import PaymentResult, RefundResult
from himaagarshare.gateways.mock import MockPaymentGateway
from himaagarshare.main import app
from himaagarshare.models import Booking, Listing
from himaagarshare.services.booking_service import BookingService
from himaagarshare.services.listing_locks import ListingLockRegistry

TODAY = date(2026, 1, 1)


@pytest_asyncio.fixture
async def engine(tmp_path):
    """File-backed SQLite so concurrent sessions get their own connections"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def host():
    return ActingUser(id=uuid4(), role=Role.HOST)


@pytest.fixture
def other_host():
    return ActingUser(id=uuid4(), role=Role.HOST)


@pytest.fixture
def renter():
    return ActingUser(id=uuid4(), role=Role.RENTER)


@pytest.fixture
def other_renter():
    return ActingUser(id=uuid4(), role=Role.RENTER)


async def make_listing(db, owner, total_capacity="100", price="2.50", status="active"):
    listing = Listing(
        owner_id=owner.id,
        title="Azadpur Cold Room 3",
        location="Delhi",
        storage_type="Chiller",
        total_capacity=Decimal(total_capacity),
        price_per_unit_day=Decimal(price),
        status=status,
    )
    db.add(listing)
    await db.commit()
    return listing


async def make_booking(
    db,
    listing,
    renter,
    start_date,
    end_date,
    capacity="10",
    status="pending",
    created_at=None,
):
    """Insert a booking row directly, bypassing admission checks"""
    booking = Booking(
        listing_id=listing.id,
        renter_id=renter.id,
        capacity_required=Decimal(capacity),
        start_date=start_date,
        end_date=end_date,
        total_price=Decimal("0.00"),
        status=status,
        payment_status="paid" if status == "approved" else "pending",
        created_at=created_at or datetime.now(timezone.utc),
    )
    db.add(booking)
    await db.commit()
    return booking


@pytest_asyncio.fixture
async def listing(db, host):
    """Active listing: 100 cu ft at 2.50 per cu ft per day"""
    return await make_listing(db, host)


@pytest.fixture
def service():
    return BookingService(locks=ListingLockRegistry())


@pytest.fixture
def payment():
    return MockPaymentGateway()


def auth_headers(user: ActingUser, minutes: int = 15) -> dict:
    token = create_access_token(user.id, user.role, expires_delta=timedelta(minutes=minutes))
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTP client against the app with the test database and a fixed clock"""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    app.dependency_overrides[get_payment_gateway] = MockPaymentGateway

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


class DecliningPaymentGateway(MockPaymentGateway):
    """Payment stub whose charges and refunds are always declined"""

    async def charge(self, reference_id, amount, description):
        return PaymentResult(success=False, error_message="Card declined")

    async def refund(self, transaction_id, amount, reason):
        return RefundResult(success=False, error_message="Refund window closed")


@pytest.fixture
def declining_payment():
    return DecliningPaymentGateway()
