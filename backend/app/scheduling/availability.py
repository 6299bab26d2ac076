"""
Available-dates enumeration for a venue.

AvailableDates is an iterable, not an iterator: each `for` over it walks the
window again from the first day, so the same object can be listed, cached
and re-read. Nothing is computed until it is iterated.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterator, Sequence

from app.scheduling.dates import format_date, iter_days
from app.scheduling.overlap import DateRange, is_date_booked
from app.scheduling.policy import BookingPolicy


@dataclass(frozen=True)
class AvailableDate:
    date: date
    date_string: str


class AvailableDates:
    def __init__(
        self,
        policy: BookingPolicy,
        ranges: Sequence[DateRange],
        window_start: date,
        window_end: date,
    ):
        self.policy = policy
        self.ranges = tuple(ranges)
        self.window_start = window_start
        self.window_end = window_end

    def __iter__(self) -> Iterator[AvailableDate]:
        for day in iter_days(self.window_start, self.window_end):
            if not self.policy.is_valid_booking_date(day).valid:
                continue
            if is_date_booked(self.ranges, day):
                continue
            yield AvailableDate(date=day, date_string=format_date(day))


def get_available_dates(
    policy: BookingPolicy,
    ranges: Sequence[DateRange],
    window_start: date,
    window_end: date,
) -> AvailableDates:
    return AvailableDates(policy, ranges, window_start, window_end)
