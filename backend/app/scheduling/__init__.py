"""
Availability & scheduling rules engine.

Pure decision logic: no I/O, no database, no clock reads other than the
injected TimeReference. The booking service feeds it venue calendars and
acts on its answers.
"""

from functools import lru_cache

from app.core.config import get_settings
from .availability import AvailableDate, AvailableDates, get_available_dates
from .dates import TimeReference, format_date, format_date_for_display
from .overlap import DateRange, has_overlap, is_date_booked, ranges_overlap, without
from .policy import BookingPolicy, BookingValidationResult

__all__ = [
    "AvailableDate", "AvailableDates", "get_available_dates",
    "TimeReference", "format_date", "format_date_for_display",
    "DateRange", "has_overlap", "is_date_booked", "ranges_overlap", "without",
    "BookingPolicy", "BookingValidationResult",
    "get_booking_policy",
]


@lru_cache()
def get_booking_policy() -> BookingPolicy:
    """Policy built from settings. Overridden in tests to pin the clock."""
    settings = get_settings()
    return BookingPolicy(
        floor=settings.MIN_BOOKABLE_DATE,
        time_ref=TimeReference.from_name(settings.BOOKING_TIMEZONE),
    )
