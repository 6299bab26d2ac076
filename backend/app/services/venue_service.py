"""
Venue read operations: listing, search, detail and available dates.
"""

from datetime import date
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import NotFound, ValidationError
from app.core.logging import get_logger
from app.models.venue import Venue
from app.scheduling import AvailableDates, BookingPolicy, get_available_dates
from app.services.booking_service import calendar_ranges, load_venue

logger = get_logger(__name__)

MIN_SEARCH_LENGTH = 3
SEARCH_LIMIT = 10

POPULAR_SORTS = {
    "rating": (Venue.rating.desc(),),
    "price": (Venue.daily_rate.asc(),),
    "capacity": (Venue.capacity.desc(),),
    "newest": (Venue.created_at.desc(),),
}


async def get_venue(db: AsyncSession, venue_id: int) -> Venue:
    return await load_venue(db, venue_id)


async def get_venue_version(db: AsyncSession, venue_id: int) -> int:
    """Committed calendar version of a venue. Cached availability is keyed on it."""
    result = await db.execute(select(Venue.version).where(Venue.id == venue_id))
    version = result.scalar_one_or_none()
    if version is None:
        raise NotFound("Venue not found")
    return version


async def list_venues(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Venue], int]:
    """List venues with pagination, ordered by id."""
    total = (await db.execute(select(func.count()).select_from(Venue))).scalar()
    result = await db.execute(
        select(Venue)
        .order_by(Venue.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


async def list_popular_venues(
    db: AsyncSession,
    sort_by: str = "rating",
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    min_capacity: Optional[int] = None,
    max_capacity: Optional[int] = None,
    limit: int = 6,
) -> list[Venue]:
    """Bookable venues with optional price/capacity filters. Unknown sorts fall back to rating."""
    query = select(Venue).where(Venue.availability.is_(True))
    if min_price is not None:
        query = query.where(Venue.daily_rate >= min_price)
    if max_price is not None:
        query = query.where(Venue.daily_rate <= max_price)
    if min_capacity is not None:
        query = query.where(Venue.capacity >= min_capacity)
    if max_capacity is not None:
        query = query.where(Venue.capacity <= max_capacity)

    ordering = POPULAR_SORTS.get(sort_by, POPULAR_SORTS["rating"])
    result = await db.execute(query.order_by(*ordering, Venue.id.asc()).limit(limit))
    return list(result.scalars().all())


async def search_venues(db: AsyncSession, term: Optional[str]) -> list[Venue]:
    """Case-insensitive match on name or description."""
    term = (term or "").strip()
    if len(term) < MIN_SEARCH_LENGTH:
        raise ValidationError(f"Search term must be at least {MIN_SEARCH_LENGTH} letters")

    pattern = f"%{term}%"
    result = await db.execute(
        select(Venue)
        .where(or_(Venue.name.ilike(pattern), Venue.description.ilike(pattern)))
        .order_by(Venue.id.asc())
        .limit(SEARCH_LIMIT)
    )
    venues = list(result.scalars().all())
    logger.info("venue_search", term=term, results=len(venues))
    return venues


def resolve_window(policy: BookingPolicy, start_value, end_value) -> tuple[date, date]:
    """
    Parse an availability window. Defaults to the next 30 days from today,
    cut short at the last representable day.
    A reversed window is allowed and simply has no days in it.
    """
    settings = get_settings()
    time_ref = policy.time_ref
    start = time_ref.to_date(start_value) if start_value else time_ref.today()
    if end_value:
        end = time_ref.to_date(end_value)
    else:
        end = date.fromordinal(min(start.toordinal() + 29, date.max.toordinal()))

    if (end - start).days + 1 > settings.MAX_AVAILABILITY_WINDOW_DAYS:
        raise ValidationError(
            f"Date window cannot exceed {settings.MAX_AVAILABILITY_WINDOW_DAYS} days"
        )
    return start, end


async def get_venue_available_dates(
    db: AsyncSession,
    policy: BookingPolicy,
    venue_id: int,
    window_start: date,
    window_end: date,
) -> AvailableDates:
    venue = await load_venue(db, venue_id)
    return get_available_dates(policy, calendar_ranges(venue), window_start, window_end)
