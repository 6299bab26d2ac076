"""
Booking endpoints: create, check availability, cancel, reschedule, list.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ValidationError
from app.core.logging import get_logger
from app.core.metrics import booking_latency
from app.core.security import get_current_user_id, get_optional_user_id
from app.db.session import get_db
from app.scheduling import BookingPolicy, get_booking_policy
from app.schemas.booking import (
    AvailabilityResponse,
    BookingActionResponse,
    BookingCreate,
    BookingReschedule,
    BookingResponse,
    UserBookingResponse,
)
from app.services.booking_service import (
    cancel_booking,
    check_availability,
    create_booking,
    get_user_bookings,
    reschedule_booking,
)
from app.services.cache_service import invalidate_venue_cache

logger = get_logger(__name__)
router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    caller_id: Optional[str] = Depends(get_optional_user_id),
    policy: BookingPolicy = Depends(get_booking_policy),
    db: AsyncSession = Depends(get_db),
):
    """
    Book a venue for a range of days.

    The start day must be on or after the minimum bookable date and not a
    Monday; the range must not share a day with any existing booking.
    Concurrent requests for the same venue are serialized by optimistic
    locking on the venue and retried before returning 409.
    """
    with booking_latency.time():
        booking = await create_booking(
            db,
            policy,
            venue_id=booking_data.venue_id,
            start_value=booking_data.start_date,
            end_value=booking_data.end_date,
            user_id=booking_data.user_id or caller_id,
            guest_count=booking_data.guest_count,
        )
    await db.commit()
    await invalidate_venue_cache(booking.venue_id)
    return booking


@router.get("/check-availability", response_model=AvailabilityResponse)
async def check_availability_endpoint(
    venue_id: Optional[int] = Query(None, alias="venueId"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    policy: BookingPolicy = Depends(get_booking_policy),
    db: AsyncSession = Depends(get_db),
):
    """Whether a venue can be booked for the given range, with the reason if not."""
    if venue_id is None or not start_date or not end_date:
        raise ValidationError(
            "Missing required parameters: venueId, startDate, and endDate are required"
        )
    available, reason = await check_availability(db, policy, venue_id, start_date, end_date)
    return AvailabilityResponse(available=available, reason=reason)


@router.get("/user", response_model=list[UserBookingResponse])
async def list_user_bookings(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Get all bookings for the authenticated user."""
    bookings = await get_user_bookings(db, user_id)
    return [
        UserBookingResponse(
            id=booking.id,
            venue_id=booking.venue_id,
            venue_name=booking.venue.name,
            venue_image=booking.venue.image_url,
            start_date=booking.start_date,
            end_date=booking.end_date,
            guest_count=booking.guest_count,
            status=booking.status,
            created_at=booking.created_at,
        )
        for booking in bookings
    ]


@router.put("/{booking_id}/cancel", response_model=BookingActionResponse)
async def cancel_booking_endpoint(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Cancel a booking and free its days in the venue calendar."""
    booking = await cancel_booking(db, booking_id)
    await db.commit()
    await invalidate_venue_cache(booking.venue_id)
    return BookingActionResponse(
        message="Booking cancelled",
        booking=BookingResponse.model_validate(booking),
    )


@router.put("/{booking_id}/reschedule", response_model=BookingActionResponse)
async def reschedule_booking_endpoint(
    booking_id: int,
    reschedule_data: BookingReschedule,
    policy: BookingPolicy = Depends(get_booking_policy),
    db: AsyncSession = Depends(get_db),
):
    """Move a booking to new dates."""
    booking = await reschedule_booking(
        db,
        policy,
        booking_id,
        start_value=reschedule_data.start_date,
        end_value=reschedule_data.end_date,
    )
    await db.commit()
    await invalidate_venue_cache(booking.venue_id)
    return BookingActionResponse(
        message="Booking rescheduled successfully",
        booking=BookingResponse.model_validate(booking),
    )
