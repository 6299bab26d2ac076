from app.schemas.amenity import AmenityCreate, AmenityResponse
from app.schemas.booking import (
    AvailabilityResponse,
    BookingActionResponse,
    BookingCreate,
    BookingReschedule,
    BookingResponse,
    UserBookingResponse,
)
from app.schemas.venue import (
    AvailableDateResponse,
    AvailableDatesResponse,
    CalendarEntryResponse,
    CalendarRebuildResponse,
    VenueDetailResponse,
    VenueListResponse,
    VenueResponse,
)

__all__ = [
    "AmenityCreate", "AmenityResponse",
    "AvailabilityResponse", "BookingActionResponse", "BookingCreate",
    "BookingReschedule", "BookingResponse", "UserBookingResponse",
    "AvailableDateResponse", "AvailableDatesResponse", "CalendarEntryResponse",
    "CalendarRebuildResponse", "VenueDetailResponse", "VenueListResponse", "VenueResponse",
]
