"""
Booking-date validity and reschedule rules.

Rules run in a fixed order and the first failure wins:

  1. Floor: nothing before the minimum bookable date.
  2. Blackout: the venue is closed on Mondays.

Reschedules add two more checks after those: the new day must differ from
the original one, and must not be in the past relative to the reference
clock.

Only the start date of a booking is checked. A multi-day booking may span
a Monday.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from app.scheduling.dates import DateLike, TimeReference, format_date_for_display

MONDAY_REASON = "Venue is closed on Mondays"
SAME_DAY_REASON = "New date cannot be the same as the original booking date"
PAST_DATE_REASON = "Cannot reschedule to a past date"


@dataclass(frozen=True)
class BookingValidationResult:
    valid: bool
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> "BookingValidationResult":
        return cls(valid=True)

    @classmethod
    def reject(cls, reason: str) -> "BookingValidationResult":
        return cls(valid=False, reason=reason)

    def __bool__(self) -> bool:
        return self.valid


class BookingPolicy:
    def __init__(self, floor: date, time_ref: Optional[TimeReference] = None):
        self.floor = floor
        self.time_ref = time_ref or TimeReference()

    @property
    def floor_reason(self) -> str:
        return f"Bookings are only available from {format_date_for_display(self.floor)} onwards"

    def is_valid_booking_date(self, value: DateLike) -> BookingValidationResult:
        day = self.time_ref.to_date(value)

        if day < self.floor:
            return BookingValidationResult.reject(self.floor_reason)

        if self.time_ref.is_monday(day):
            return BookingValidationResult.reject(MONDAY_REASON)

        return BookingValidationResult.ok()

    def validate_reschedule_date(
        self, original: DateLike, new: DateLike
    ) -> BookingValidationResult:
        basic = self.is_valid_booking_date(new)
        if not basic.valid:
            return basic

        if self.time_ref.same_day(original, new):
            return BookingValidationResult.reject(SAME_DAY_REASON)

        if self.time_ref.to_date(new) < self.time_ref.today():
            return BookingValidationResult.reject(PAST_DATE_REASON)

        return BookingValidationResult.ok()
