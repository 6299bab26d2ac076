"""
Day-granular date handling against one declared time reference.

Every booking decision (which calendar day a timestamp falls on, whether that
day is a Monday, what "today" is) goes through a TimeReference. The timezone
and the clock are injected, never read from the platform, so the same input
gives the same answer on every machine.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Callable, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.exceptions import ValidationError

DateLike = Union[date, datetime, str]

END_OF_DAY = time(23, 59, 59, 999000)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TimeReference:
    tz: tzinfo = timezone.utc
    clock: Callable[[], datetime] = field(default=_utc_now, compare=False)

    @classmethod
    def from_name(cls, name: str, clock: Callable[[], datetime] = _utc_now) -> "TimeReference":
        if name.upper() == "UTC":
            return cls(timezone.utc, clock)
        try:
            return cls(ZoneInfo(name), clock)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValidationError(f"Unknown timezone: {name}")

    def parse(self, value: DateLike) -> Union[date, datetime]:
        """Turn an ISO-8601 string into a date or datetime. Other types pass through."""
        if isinstance(value, (date, datetime)):
            return value
        if not isinstance(value, str) or not value.strip():
            raise ValidationError("Invalid date format")
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            raise ValidationError("Invalid date format")

    def localize(self, value: DateLike) -> datetime:
        """Aware datetime in the reference timezone. Naive values are taken as local."""
        parsed = self.parse(value)
        if not isinstance(parsed, datetime):
            return datetime.combine(parsed, time.min, tzinfo=self.tz)
        if parsed.tzinfo is None:
            return parsed.replace(tzinfo=self.tz)
        try:
            return parsed.astimezone(self.tz)
        except OverflowError:
            raise ValidationError("Invalid date format")

    def to_date(self, value: DateLike) -> date:
        return self.localize(value).date()

    def start_of_day(self, value: DateLike) -> datetime:
        return datetime.combine(self.to_date(value), time.min, tzinfo=self.tz)

    def end_of_day(self, value: DateLike) -> datetime:
        return datetime.combine(self.to_date(value), END_OF_DAY, tzinfo=self.tz)

    def same_day(self, first: DateLike, second: DateLike) -> bool:
        return self.to_date(first) == self.to_date(second)

    def is_monday(self, value: DateLike) -> bool:
        return self.to_date(value).isoweekday() == 1

    def now(self) -> datetime:
        return self.clock().astimezone(self.tz)

    def today(self) -> date:
        return self.now().date()


def iter_days(start: date, end: date):
    """Each calendar day from start to end inclusive. Empty when end < start."""
    current = start
    while current <= end:
        yield current
        if current == end:
            break
        current += timedelta(days=1)


def format_date(value: date) -> str:
    """Canonical YYYY-MM-DD form."""
    return value.isoformat()


def format_date_for_display(value: date) -> str:
    """e.g. "May 8, 2025"."""
    return f"{value:%B} {value.day}, {value.year}"
