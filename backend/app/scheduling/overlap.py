"""
Overlap detection over inclusive, day-granular date ranges.

Two ranges overlap when they share at least one calendar day:

    candidate.start <= existing.end AND candidate.end >= existing.start

Touching endpoints count, since a shared boundary day cannot be assigned
to two bookings.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from app.core.exceptions import ValidationError


@dataclass(frozen=True)
class DateRange:
    """One reserved interval, inclusive on both ends.

    `id` is the booking that owns the range, when there is one.
    """

    start: date
    end: date
    id: Optional[int] = None

    def __post_init__(self):
        if self.start > self.end:
            raise ValidationError("End date must be on or after start date")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def ranges_overlap(first: DateRange, second: DateRange) -> bool:
    return first.start <= second.end and first.end >= second.start


def has_overlap(ranges: Iterable[DateRange], candidate: DateRange) -> bool:
    """True if any range shares a day with candidate."""
    return any(ranges_overlap(candidate, existing) for existing in ranges)


def is_date_booked(
    ranges: Iterable[DateRange],
    day: date,
    exclude_id: Optional[int] = None,
) -> bool:
    """True if day falls inside any range not owned by exclude_id."""
    return any(
        existing.contains(day)
        for existing in ranges
        if exclude_id is None or existing.id != exclude_id
    )


def without(ranges: Iterable[DateRange], exclude_id: Optional[int]) -> list[DateRange]:
    if exclude_id is None:
        return list(ranges)
    return [existing for existing in ranges if existing.id != exclude_id]
