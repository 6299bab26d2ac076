"""
Pydantic schemas for booking-related request/response validation.

Dates arrive as strings and are parsed by the booking service against the
configured booking timezone, so "2025-06-03T23:30:00-05:00" lands on the
right calendar day.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import Field

from app.schemas.base import CamelModel


class BookingCreate(CamelModel):
    venue_id: int
    user_id: Optional[str] = Field(None, min_length=1, max_length=255)
    start_date: str
    end_date: str
    guest_count: Optional[int] = Field(None, gt=0, le=100000)


class BookingReschedule(CamelModel):
    start_date: str
    end_date: str


class BookingResponse(CamelModel):
    id: int
    venue_id: int
    user_id: str
    start_date: date
    end_date: date
    guest_count: int
    status: str
    created_at: datetime
    updated_at: datetime


class BookingActionResponse(CamelModel):
    message: str
    booking: BookingResponse


class UserBookingResponse(CamelModel):
    id: int
    venue_id: int
    venue_name: str
    venue_image: str
    start_date: date
    end_date: date
    guest_count: int
    status: str
    created_at: datetime


class AvailabilityResponse(CamelModel):
    available: bool
    reason: Optional[str] = None
