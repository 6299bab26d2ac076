"""
Tests for the availability & scheduling rules engine. No database needed.
"""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from app.core.exceptions import ValidationError
from app.scheduling import (
    AvailableDates,
    BookingPolicy,
    BookingValidationResult,
    DateRange,
    TimeReference,
    format_date_for_display,
    get_available_dates,
    get_booking_policy,
    has_overlap,
    is_date_booked,
    ranges_overlap,
)
from app.scheduling.dates import iter_days
from app.scheduling.policy import MONDAY_REASON, PAST_DATE_REASON, SAME_DAY_REASON

FLOOR_REASON = "Bookings are only available from May 8, 2025 onwards"


# --- Date normalization ---


def test_start_and_end_of_day():
    ref = TimeReference()
    value = datetime(2025, 6, 3, 15, 42, 7, tzinfo=timezone.utc)

    assert ref.start_of_day(value) == datetime(2025, 6, 3, tzinfo=timezone.utc)
    assert ref.end_of_day(value) == datetime(2025, 6, 3, 23, 59, 59, 999000, tzinfo=timezone.utc)


def test_same_day_ignores_time_of_day():
    ref = TimeReference()
    assert ref.same_day("2025-06-03T00:00:00Z", "2025-06-03T23:59:59Z")
    assert not ref.same_day("2025-06-03", "2025-06-04")


def test_is_monday():
    ref = TimeReference()
    assert ref.is_monday(date(2025, 5, 12))
    assert not ref.is_monday(date(2025, 5, 13))


def test_timezone_decides_the_calendar_day():
    """02:00 UTC on a Tuesday is still Monday evening in New York."""
    instant = "2025-06-03T02:00:00Z"

    assert not TimeReference(timezone.utc).is_monday(instant)
    assert TimeReference(ZoneInfo("America/New_York")).is_monday(instant)


def test_naive_datetime_is_read_in_reference_timezone():
    ref = TimeReference(ZoneInfo("Asia/Tokyo"))
    assert ref.to_date(datetime(2025, 6, 3, 23, 30)) == date(2025, 6, 3)


def test_unparsable_date_raises_validation_error():
    ref = TimeReference()
    with pytest.raises(ValidationError, match="Invalid date format"):
        ref.to_date("not-a-date")
    with pytest.raises(ValidationError):
        ref.to_date("2025-13-01")


def test_unknown_timezone_name_rejected():
    with pytest.raises(ValidationError):
        TimeReference.from_name("Mars/Olympus_Mons")


def test_today_uses_injected_clock():
    ref = TimeReference(
        ZoneInfo("America/New_York"),
        clock=lambda: datetime(2025, 6, 20, 2, 0, tzinfo=timezone.utc),
    )
    assert ref.today() == date(2025, 6, 19)


def test_floor_date_display():
    assert format_date_for_display(date(2025, 5, 8)) == "May 8, 2025"


# --- Booking-date validity policy ---


def test_day_before_floor_is_rejected(policy: BookingPolicy):
    result = policy.is_valid_booking_date("2025-05-07")
    assert result == BookingValidationResult(valid=False, reason=FLOOR_REASON)


def test_every_day_before_floor_is_rejected_with_floor_reason(policy: BookingPolicy):
    for offset in range(1, 15):
        day = date(2025, 5, 8) - timedelta(days=offset)
        result = policy.is_valid_booking_date(day)
        assert not result.valid
        assert result.reason == FLOOR_REASON


def test_floor_wins_over_monday(policy: BookingPolicy):
    result = policy.is_valid_booking_date(date(2025, 5, 5))  # a Monday before the floor
    assert result.reason == FLOOR_REASON


def test_floor_day_itself_is_valid(policy: BookingPolicy):
    assert policy.is_valid_booking_date(date(2025, 5, 8)).valid


def test_mondays_after_floor_are_rejected(policy: BookingPolicy):
    monday = date(2025, 5, 12)
    for week in range(10):
        result = policy.is_valid_booking_date(monday + timedelta(weeks=week))
        assert result == BookingValidationResult(valid=False, reason=MONDAY_REASON)


def test_tuesday_after_floor_is_valid(policy: BookingPolicy):
    result = policy.is_valid_booking_date("2025-05-13")
    assert result.valid
    assert result.reason is None


def test_policy_from_settings():
    configured = get_booking_policy()
    assert configured.floor == date(2025, 5, 8)
    assert configured.time_ref.tz == timezone.utc


# --- Overlap detection ---


def test_reversed_range_is_a_caller_error():
    with pytest.raises(ValidationError):
        DateRange(date(2025, 6, 5), date(2025, 6, 1))


def test_shared_boundary_day_overlaps():
    existing = [DateRange(date(2025, 6, 1), date(2025, 6, 3))]
    assert has_overlap(existing, DateRange(date(2025, 6, 3), date(2025, 6, 4)))


def test_adjacent_ranges_do_not_overlap():
    existing = [DateRange(date(2025, 6, 1), date(2025, 6, 3))]
    assert not has_overlap(existing, DateRange(date(2025, 6, 4), date(2025, 6, 5)))


def test_enclosing_range_overlaps():
    existing = [DateRange(date(2025, 6, 10), date(2025, 6, 11))]
    assert has_overlap(existing, DateRange(date(2025, 6, 1), date(2025, 6, 30)))


def test_overlap_is_symmetric_and_reflexive():
    ranges = [
        DateRange(date(2025, 6, 1), date(2025, 6, 3)),
        DateRange(date(2025, 6, 3), date(2025, 6, 4)),
        DateRange(date(2025, 6, 5), date(2025, 6, 5)),
        DateRange(date(2025, 5, 20), date(2025, 6, 10)),
    ]
    for first in ranges:
        assert ranges_overlap(first, first)
        for second in ranges:
            assert ranges_overlap(first, second) == ranges_overlap(second, first)


def test_overlap_does_not_depend_on_order():
    candidate = DateRange(date(2025, 6, 7), date(2025, 6, 8))
    ranges = [
        DateRange(date(2025, 6, 20), date(2025, 6, 21)),
        DateRange(date(2025, 6, 8), date(2025, 6, 9)),
        DateRange(date(2025, 6, 1), date(2025, 6, 2)),
    ]
    assert has_overlap(ranges, candidate)
    assert has_overlap(list(reversed(ranges)), candidate)
    assert has_overlap(sorted(ranges, key=lambda r: r.end), candidate)


def test_no_ranges_means_no_overlap():
    assert not has_overlap([], DateRange(date(2025, 6, 1), date(2025, 6, 1)))


def test_is_date_booked_inclusive_bounds():
    ranges = [DateRange(date(2025, 6, 1), date(2025, 6, 3), id=1)]
    assert is_date_booked(ranges, date(2025, 6, 1))
    assert is_date_booked(ranges, date(2025, 6, 3))
    assert not is_date_booked(ranges, date(2025, 6, 4))


def test_is_date_booked_ignores_excluded_booking():
    ranges = [
        DateRange(date(2025, 6, 1), date(2025, 6, 3), id=1),
        DateRange(date(2025, 6, 10), date(2025, 6, 12), id=2),
    ]
    for day in (date(2025, 6, 1), date(2025, 6, 2), date(2025, 6, 3)):
        assert not is_date_booked(ranges, day, exclude_id=1)
    assert is_date_booked(ranges, date(2025, 6, 11), exclude_id=1)


# --- Reschedule validation ---


def test_reschedule_to_same_day_rejected(policy: BookingPolicy):
    result = policy.validate_reschedule_date(date(2025, 6, 10), "2025-06-10")
    assert result == BookingValidationResult(valid=False, reason=SAME_DAY_REASON)


def test_reschedule_same_day_rejected_even_if_time_differs(policy: BookingPolicy):
    result = policy.validate_reschedule_date("2025-06-24T09:00:00Z", "2025-06-24T18:00:00Z")
    assert result.reason == SAME_DAY_REASON


def test_reschedule_to_past_date_rejected(policy: BookingPolicy):
    # Clock is pinned to 2025-06-20; 2025-06-11 is a Wednesday after the floor
    result = policy.validate_reschedule_date(date(2025, 6, 10), date(2025, 6, 11))
    assert result == BookingValidationResult(valid=False, reason=PAST_DATE_REASON)


def test_reschedule_to_today_allowed(policy: BookingPolicy):
    assert policy.validate_reschedule_date(date(2025, 6, 10), date(2025, 6, 20)).valid


def test_reschedule_before_floor_reports_floor_reason(policy: BookingPolicy):
    result = policy.validate_reschedule_date(date(2025, 6, 10), date(2025, 5, 1))
    assert result.reason == FLOOR_REASON


def test_reschedule_to_monday_reports_monday_reason(policy: BookingPolicy):
    result = policy.validate_reschedule_date(date(2025, 6, 24), date(2025, 6, 30))
    assert result.reason == MONDAY_REASON


def test_reschedule_to_future_tuesday_allowed(policy: BookingPolicy):
    assert policy.validate_reschedule_date(date(2025, 6, 10), date(2025, 6, 24)).valid


# --- Available-dates enumeration ---


def test_available_dates_skip_mondays_and_booked_days(policy: BookingPolicy):
    ranges = [DateRange(date(2025, 6, 3), date(2025, 6, 4), id=1)]
    days = [d.date_string for d in get_available_dates(policy, ranges, date(2025, 6, 1), date(2025, 6, 10))]

    assert days == [
        "2025-06-01",
        "2025-06-05",
        "2025-06-06",
        "2025-06-07",
        "2025-06-08",
        "2025-06-10",
    ]


def test_available_dates_carry_date_and_string(policy: BookingPolicy):
    first = next(iter(get_available_dates(policy, [], date(2025, 6, 5), date(2025, 6, 5))))
    assert first.date == date(2025, 6, 5)
    assert first.date_string == "2025-06-05"


def test_window_before_floor_is_empty(policy: BookingPolicy):
    assert list(get_available_dates(policy, [], date(2025, 5, 1), date(2025, 5, 7))) == []


def test_fully_booked_window_is_empty(policy: BookingPolicy):
    ranges = [DateRange(date(2025, 6, 1), date(2025, 6, 30))]
    assert list(get_available_dates(policy, ranges, date(2025, 6, 1), date(2025, 6, 30))) == []


def test_reversed_window_is_empty(policy: BookingPolicy):
    assert list(get_available_dates(policy, [], date(2025, 6, 10), date(2025, 6, 1))) == []


def test_available_dates_are_restartable(policy: BookingPolicy):
    available = get_available_dates(policy, [], date(2025, 6, 1), date(2025, 6, 14))
    assert isinstance(available, AvailableDates)
    assert list(available) == list(available)
    assert len(list(available)) == 12  # 14 days minus two Mondays


def test_iter_days_stops_at_last_representable_day():
    assert list(iter_days(date(9999, 12, 30), date.max)) == [date(9999, 12, 30), date.max]


def test_window_ending_on_last_representable_day(policy: BookingPolicy):
    available = list(get_available_dates(policy, [], date(9999, 12, 29), date.max))
    assert available
    assert available[-1].date == date.max


def test_timestamp_past_last_representable_day_rejected():
    with pytest.raises(ValidationError, match="Invalid date format"):
        TimeReference().to_date("9999-12-31T23:00:00-05:00")
