"""
Pydantic schemas for venue search, detail and availability responses.
"""

from datetime import date
from typing import Optional

from app.schemas.amenity import AmenityResponse
from app.schemas.base import CamelModel


class CalendarEntryResponse(CamelModel):
    booking_id: int
    start_date: date
    end_date: date


class VenueResponse(CamelModel):
    id: int
    name: str
    description: str
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    zip_code: Optional[str] = None
    formatted_address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image_url: str
    daily_rate: float
    capacity: int
    rating: float
    review_count: int
    is_popular: bool
    availability: bool
    amenities: list[AmenityResponse] = []


class VenueDetailResponse(VenueResponse):
    calendar: list[CalendarEntryResponse] = []


class VenueListResponse(CamelModel):
    venues: list[VenueResponse]
    total: int
    page: int
    page_size: int


class AvailableDateResponse(CamelModel):
    date: date
    date_string: str


class AvailableDatesResponse(CamelModel):
    venue_id: int
    start_date: date
    end_date: date
    dates: list[AvailableDateResponse]
    cached: bool = False


class CalendarRebuildResponse(CamelModel):
    venue_id: int
    added: int
    removed: int
    updated: int
    calendar: list[CalendarEntryResponse]
