"""Shared test configuration and fixtures.

Uses a transactional rollback strategy per test for full isolation:
- Each test gets its own transaction that rolls back after the test.
- Tests run against ``TEST_DATABASE_URL`` when set (e.g. a Postgres
  ``beachvillas_test`` database), otherwise an in-memory SQLite database.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from beachvillas.auth.jwt import create_token_pair
from beachvillas.auth.passwords import hash_password
from beachvillas.database import Base, get_db
from beachvillas.main import app
from beachvillas.models.booking import Booking
from beachvillas.models.message import MessageThread
from beachvillas.models.user import User
from beachvillas.models.villa import Amenity, Villa, VillaPhoto

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")

TEST_PASSWORD = "testpass123"


def _make_engine():
    if not TEST_DATABASE_URL.startswith("sqlite"):
        return create_async_engine(TEST_DATABASE_URL, echo=False, pool_pre_ping=True)

    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # SQLite only enforces ON DELETE CASCADE with foreign keys switched on.
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


# ---------------------------------------------------------------------------
# Per-test: schema plus transactional rollback for isolation
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def test_engine():
    """Create an engine with every table in place."""
    engine = _make_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async session wrapped in a transaction that always rolls back."""
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)

        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Provide an httpx AsyncClient wired to use the test DB session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


async def make_user(db: AsyncSession, role: str = "guest", **overrides) -> User:
    """Create a user directly in the DB with password ``TEST_PASSWORD``."""
    unique = uuid.uuid4().hex[:8]
    fields = {
        "email": f"{role}-{unique}@test.com",
        "hashed_password": hash_password(TEST_PASSWORD),
        "name": f"Test {role.replace('_', ' ').title()}",
        "role": role,
        "is_active": True,
        "notification_settings": {},
    }
    fields.update(overrides)
    user = User(**fields)
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


def headers_for(user: User) -> dict[str, str]:
    tokens = create_token_pair(str(user.id), role=user.role)
    return {"Authorization": f"Bearer {tokens['access_token']}"}


async def make_villa(db: AsyncSession, host: User, **overrides) -> Villa:
    """Create an active villa for ``host`` directly in the DB."""
    fields = {
        "name": "Casa del Mar",
        "short_description": "Beachfront villa with a private pool",
        "long_description": "Four bedrooms steps from the sand.",
        "address": "1 Ocean Drive",
        "city": "Tulum",
        "country": "Mexico",
        "latitude": "20.2114",
        "longitude": "-87.4654",
        "max_occupancy": 4,
        "is_instant_book": False,
        "status": "active",
        "base_price_per_night": Decimal("200.00"),
        "minimum_stay_nights": 2,
        "security_deposit": Decimal("300.00"),
        "cleaning_fee": Decimal("50.00"),
        "service_fee": Decimal("25.00"),
    }
    fields.update(overrides)
    villa = Villa(host_id=host.id, **fields)
    db.add(villa)
    await db.flush()
    await db.refresh(villa)
    return villa


async def make_booking(
    db: AsyncSession,
    villa: Villa,
    guest: User,
    check_in: date,
    check_out: date,
    status: str = "confirmed",
    with_thread: bool = True,
    **overrides,
) -> Booking:
    """Create a booking directly in the DB, e.g. for stays that already happened."""
    fields = {
        "number_of_guests": 2,
        "status": status,
        "booking_type": "request",
        "nightly_subtotal": Decimal("400.00"),
        "cleaning_fee": Decimal("50.00"),
        "service_fee": Decimal("25.00"),
        "security_deposit": Decimal("300.00"),
        "total_price": Decimal("775.00"),
        "currency": "USD",
        "payment_status": "pending",
        "guest_full_name": guest.name,
        "guest_email": guest.email,
        "guest_phone": "+15550100",
    }
    fields.update(overrides)
    booking = Booking(
        villa_id=villa.id,
        guest_id=guest.id,
        host_id=villa.host_id,
        check_in=check_in,
        check_out=check_out,
        **fields,
    )
    db.add(booking)
    await db.flush()
    if with_thread:
        db.add(MessageThread(booking_id=booking.id, villa_id=villa.id, guest_id=guest.id, host_id=villa.host_id))
        await db.flush()
    await db.refresh(booking)
    return booking


# ---------------------------------------------------------------------------
# Convenience fixtures: users and their auth headers
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def guest_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "guest")


@pytest_asyncio.fixture
async def host_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "host", is_verified_host=True)


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "admin")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "guest_host")


@pytest_asyncio.fixture
async def guest_headers(guest_user: User) -> dict[str, str]:
    return headers_for(guest_user)


@pytest_asyncio.fixture
async def host_headers(host_user: User) -> dict[str, str]:
    return headers_for(host_user)


@pytest_asyncio.fixture
async def admin_headers(admin_user: User) -> dict[str, str]:
    return headers_for(admin_user)


@pytest_asyncio.fixture
async def other_headers(other_user: User) -> dict[str, str]:
    return headers_for(other_user)


# ---------------------------------------------------------------------------
# Convenience fixtures: reference data and listings
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def amenities(db_session: AsyncSession) -> dict[str, Amenity]:
    """Pool, WiFi and beach access amenities keyed by amenity key."""
    rows = [
        Amenity(name="Private Pool", key="pool"),
        Amenity(name="WiFi", key="wifi"),
        Amenity(name="Beach Access", key="beach_access"),
    ]
    db_session.add_all(rows)
    await db_session.flush()
    return {row.key: row for row in rows}


@pytest_asyncio.fixture
async def villa(db_session: AsyncSession, host_user: User, amenities: dict[str, Amenity]) -> Villa:
    """An active request-to-book villa with a photo, pool and WiFi."""
    villa = await make_villa(
        db_session,
        host_user,
        photos=[VillaPhoto(photo_url="https://img.test/casa-1.jpg", sort_order=0)],
        amenities=[amenities["pool"], amenities["wifi"]],
    )
    return villa


@pytest_asyncio.fixture
async def instant_villa(db_session: AsyncSession, host_user: User) -> Villa:
    return await make_villa(
        db_session,
        host_user,
        name="Villa Instant",
        city="Bali",
        country="Indonesia",
        is_instant_book=True,
        base_price_per_night=Decimal("120.00"),
        minimum_stay_nights=1,
    )


# ---------------------------------------------------------------------------
# Factory fixtures bound to the test session
# ---------------------------------------------------------------------------


@pytest.fixture
def create_user(db_session: AsyncSession):
    async def _create(role: str = "guest", **overrides) -> User:
        return await make_user(db_session, role, **overrides)

    return _create


@pytest.fixture
def create_villa(db_session: AsyncSession):
    async def _create(host: User, **overrides) -> Villa:
        return await make_villa(db_session, host, **overrides)

    return _create


@pytest.fixture
def create_booking(db_session: AsyncSession):
    async def _create(villa: Villa, guest: User, check_in: date, check_out: date, **overrides) -> Booking:
        return await make_booking(db_session, villa, guest, check_in, check_out, **overrides)

    return _create


@pytest.fixture
def auth_for():
    """Build Authorization headers for any user."""
    return headers_for
