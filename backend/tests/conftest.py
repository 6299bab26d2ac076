"""
Pytest fixtures for test database, client, booking policy and authentication.

Each test gets a fresh in-memory SQLite database (aiosqlite) and a booking
policy whose clock is pinned to 2025-06-20 (a Friday), so "today" never
depends on when the suite runs.
"""

import os

os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date, datetime, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.security import create_access_token
from app.db.base import Base
from app.db.session import get_db
from app.main import app
from app.models import Amenity, Venue
from app.scheduling import BookingPolicy, TimeReference, get_booking_policy

# Private in-memory database per test; StaticPool keeps the one connection alive
TEST_DATABASE_URL = "sqlite+aiosqlite://"

FLOOR_DATE = date(2025, 5, 8)
FIXED_NOW = datetime(2025, 6, 20, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def policy() -> BookingPolicy:
    """Booking policy with the production floor and a pinned clock."""
    return BookingPolicy(
        floor=FLOOR_DATE,
        time_ref=TimeReference(timezone.utc, clock=lambda: FIXED_NOW),
    )


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables in a private in-memory database and yield a session."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, policy: BookingPolicy) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the DB session and booking policy."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_booking_policy] = lambda: policy

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict:
    """Authorization headers for user "user-1"."""
    token = create_access_token(data={"sub": "user-1"})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_amenity(db_session: AsyncSession) -> Amenity:
    amenity = Amenity(name="Projector", icon="projector", category="technical")
    db_session.add(amenity)
    await db_session.commit()
    await db_session.refresh(amenity)
    return amenity


@pytest_asyncio.fixture
async def test_venue(db_session: AsyncSession, test_amenity: Amenity) -> Venue:
    """A bookable venue with an empty calendar."""
    venue = Venue(
        name="Grand Hall",
        description="A spacious hall for weddings and conferences",
        city="Lisbon",
        country="Portugal",
        image_url="https://example.com/grand-hall.jpg",
        daily_rate=500,
        capacity=200,
        rating=4.5,
        review_count=12,
        is_popular=True,
        availability=True,
        amenities=[test_amenity],
    )
    db_session.add(venue)
    await db_session.commit()
    await db_session.refresh(venue)
    return venue


@pytest_asyncio.fixture
async def other_venues(db_session: AsyncSession) -> list[Venue]:
    """Three more venues with different prices, capacities and ratings."""
    venues = [
        Venue(
            name="Rooftop Garden",
            description="Open-air terrace with city views",
            image_url="https://example.com/rooftop.jpg",
            daily_rate=300,
            capacity=80,
            rating=4.8,
        ),
        Venue(
            name="Warehouse Loft",
            description="Industrial loft for parties",
            image_url="https://example.com/loft.jpg",
            daily_rate=150,
            capacity=120,
            rating=3.9,
        ),
        Venue(
            name="Closed Chapel",
            description="Historic chapel, not taking bookings",
            image_url="https://example.com/chapel.jpg",
            daily_rate=250,
            capacity=60,
            rating=5.0,
            availability=False,
        ),
    ]
    db_session.add_all(venues)
    await db_session.commit()
    for venue in venues:
        await db_session.refresh(venue)
    return venues

