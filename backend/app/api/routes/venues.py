"""
Venue endpoints: listing, search, detail, available dates and calendar repair.
Available dates are cached in Redis per venue and window.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.db.session import get_db
from app.scheduling import BookingPolicy, format_date, get_booking_policy
from app.schemas.venue import (
    AvailableDateResponse,
    AvailableDatesResponse,
    CalendarEntryResponse,
    CalendarRebuildResponse,
    VenueDetailResponse,
    VenueListResponse,
    VenueResponse,
)
from app.services.booking_service import rebuild_venue_calendar
from app.services.cache_service import (
    get_cached_available_dates,
    invalidate_venue_cache,
    set_cached_available_dates,
)
from app.services.venue_service import (
    get_venue,
    get_venue_available_dates,
    get_venue_version,
    list_popular_venues,
    list_venues,
    resolve_window,
    search_venues,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/venues", tags=["Venues"])


@router.get("", response_model=VenueListResponse)
async def list_venues_endpoint(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    db: AsyncSession = Depends(get_db),
):
    venues, total = await list_venues(db, page, page_size)
    return VenueListResponse(
        venues=[VenueResponse.model_validate(v) for v in venues],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/popular", response_model=list[VenueResponse])
async def popular_venues_endpoint(
    sort_by: str = Query("rating", alias="sortBy"),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    min_capacity: Optional[int] = Query(None, alias="minCapacity", ge=0),
    max_capacity: Optional[int] = Query(None, alias="maxCapacity", ge=0),
    limit: int = Query(6, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
):
    """Bookable venues sorted by rating, price, capacity or newest."""
    return await list_popular_venues(
        db,
        sort_by=sort_by,
        min_price=min_price,
        max_price=max_price,
        min_capacity=min_capacity,
        max_capacity=max_capacity,
        limit=limit,
    )


@router.get("/search", response_model=list[VenueResponse])
async def search_venues_endpoint(
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Search venue names and descriptions (at least 3 letters)."""
    return await search_venues(db, search)


@router.get("/{venue_id}", response_model=VenueDetailResponse)
async def get_venue_endpoint(
    venue_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Venue detail with amenities and booked calendar."""
    return await get_venue(db, venue_id)


@router.get("/{venue_id}/available-dates", response_model=AvailableDatesResponse)
async def available_dates_endpoint(
    venue_id: int,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    policy: BookingPolicy = Depends(get_booking_policy),
    db: AsyncSession = Depends(get_db),
):
    """
    Bookable days in a window (default: the next 30 days).
    Days before the minimum bookable date, Mondays and booked days are left out.
    """
    window_start, window_end = resolve_window(policy, start_date, end_date)
    start_key, end_key = format_date(window_start), format_date(window_end)

    # Version first: the calendar read after it is never older than the key
    version = await get_venue_version(db, venue_id)
    cached = await get_cached_available_dates(venue_id, version, start_key, end_key)
    if cached:
        logger.info("available_dates_cache_hit", venue_id=venue_id)
        cached["cached"] = True
        return AvailableDatesResponse(**cached)

    available = await get_venue_available_dates(db, policy, venue_id, window_start, window_end)
    response = AvailableDatesResponse(
        venue_id=venue_id,
        start_date=window_start,
        end_date=window_end,
        dates=[
            AvailableDateResponse(date=day.date, date_string=day.date_string)
            for day in available
        ],
    )

    await set_cached_available_dates(venue_id, version, start_key, end_key, response.model_dump())
    return response


@router.post("/{venue_id}/calendar/rebuild", response_model=CalendarRebuildResponse)
async def rebuild_calendar_endpoint(
    venue_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Rebuild the venue calendar from confirmed bookings after a consistency fault."""
    venue, counts = await rebuild_venue_calendar(db, venue_id)
    await db.commit()
    await invalidate_venue_cache(venue_id)
    return CalendarRebuildResponse(
        venue_id=venue.id,
        calendar=[CalendarEntryResponse.model_validate(entry) for entry in venue.calendar],
        **counts,
    )
