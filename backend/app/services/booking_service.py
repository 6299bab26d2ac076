"""
Booking service: the only writer of bookings and venue calendars.

TWO STORES, ONE BOUNDARY
========================

A booking lives in two places:
  - the Booking row (authoritative)
  - an entry in the venue's calendar (a projection used for overlap checks)

Every mutation (create, cancel, reschedule, rebuild) writes both inside the
request's database transaction. Before writing, the projection is compared
with the confirmed bookings; if they disagree the operation fails with
ConsistencyFault and the transaction is rolled back. The drift is logged as
critical and can be repaired with rebuild_venue_calendar().

CONCURRENCY STRATEGY: Optimistic Locking on the Venue
=====================================================

Problem:
  Two users ask for the same venue and day at the same time.
  Both read the calendar, both see the day free, both insert.
  Result: Double booking.

Solution:
  Every calendar mutation bumps the venue's `version` column.

  1. Read the venue (and its calendar) with its current version
  2. Run the rules engine against that calendar
  3. UPDATE venues SET version = version + 1
     WHERE id = :venue_id AND version = :seen_version
  4. If rows_affected == 0, another writer changed the calendar -> rollback
     and start over from step 1 with fresh data

  The second writer re-reads the calendar on retry, sees the first booking
  and is rejected by the overlap check.
"""

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import Conflict, ConsistencyFault, NotFound, PolicyRejection, ValidationError
from app.core.logging import get_logger
from app.core.metrics import (
    booking_cancellations,
    db_retries,
    record_availability_check,
    record_booking_attempt,
    record_consistency_fault,
    record_reschedule,
)
from app.models.booking import BOOKING_CANCELLED, BOOKING_CONFIRMED, Booking
from app.models.venue import Venue, VenueCalendarEntry
from app.scheduling import BookingPolicy, DateRange, has_overlap, is_date_booked, without

logger = get_logger(__name__)

UNAVAILABLE_REASON = "Venue not available for these dates"
ALREADY_BOOKED_REASON = "Venue is already booked for this date"
MISSING_DATES_MESSAGE = "Missing required parameters: startDate and endDate are required"
HIGH_DEMAND_MESSAGE = "Booking failed due to high demand. Please try again."


def parse_range(policy: BookingPolicy, start_value, end_value) -> DateRange:
    """Parse request dates into a validated DateRange of booking-timezone days."""
    if not start_value or not end_value:
        raise ValidationError(MISSING_DATES_MESSAGE)
    start = policy.time_ref.to_date(start_value)
    end = policy.time_ref.to_date(end_value)
    return DateRange(start, end)


def calendar_ranges(venue: Venue) -> list[DateRange]:
    return [
        DateRange(entry.start_date, entry.end_date, id=entry.booking_id)
        for entry in venue.calendar
    ]


def find_calendar_entry(venue: Venue, booking_id: int) -> Optional[VenueCalendarEntry]:
    for entry in venue.calendar:
        if entry.booking_id == booking_id:
            return entry
    return None


def projection_drift(calendar: list[DateRange], stored: list[DateRange]) -> dict:
    """Describe how the calendar differs from the booking store. Empty when in sync."""
    projected = {r.id: (r.start, r.end) for r in calendar}
    authoritative = {r.id: (r.start, r.end) for r in stored}
    if projected == authoritative:
        return {}
    shared = projected.keys() & authoritative.keys()
    return {
        "missing": sorted(authoritative.keys() - projected.keys()),
        "stale": sorted(projected.keys() - authoritative.keys()),
        "mismatched": sorted(k for k in shared if projected[k] != authoritative[k]),
    }


async def load_venue(db: AsyncSession, venue_id: int) -> Venue:
    result = await db.execute(
        select(Venue)
        .where(Venue.id == venue_id)
        .execution_options(populate_existing=True)
    )
    venue = result.scalar_one_or_none()
    if not venue:
        raise NotFound("Venue not found")
    return venue


async def load_booking(db: AsyncSession, booking_id: int) -> Booking:
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .execution_options(populate_existing=True)
    )
    booking = result.unique().scalar_one_or_none()
    if not booking:
        raise NotFound("Booking not found")
    return booking


async def confirmed_ranges(db: AsyncSession, venue_id: int) -> list[DateRange]:
    result = await db.execute(
        select(Booking.id, Booking.start_date, Booking.end_date).where(
            Booking.venue_id == venue_id,
            Booking.status == BOOKING_CONFIRMED,
        )
    )
    return [DateRange(start, end, id=booking_id) for booking_id, start, end in result.all()]


async def verify_calendar(db: AsyncSession, venue: Venue, operation: str) -> list[DateRange]:
    """Return the venue calendar, or raise ConsistencyFault if it has drifted."""
    calendar = calendar_ranges(venue)
    drift = projection_drift(calendar, await confirmed_ranges(db, venue.id))
    if drift:
        logger.critical("consistency_fault", venue_id=venue.id, operation=operation, **drift)
        record_consistency_fault(operation)
        raise ConsistencyFault()
    return calendar


async def claim_venue(db: AsyncSession, venue: Venue) -> bool:
    """Bump the venue version if nobody else has. False on a lost race."""
    result = await db.execute(
        update(Venue)
        .where(Venue.id == venue.id, Venue.version == venue.version)
        .values(version=Venue.version + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def _lost_race(db: AsyncSession, attempt: int, operation: str, **context) -> None:
    db_retries.inc()
    logger.info(f"{operation}_retry", attempt=attempt, reason="version_conflict", **context)
    await db.rollback()
    if attempt >= get_settings().MAX_RETRY_ATTEMPTS:
        raise Conflict(HIGH_DEMAND_MESSAGE)


async def create_booking(
    db: AsyncSession,
    policy: BookingPolicy,
    venue_id: int,
    start_value,
    end_value,
    user_id: Optional[str] = None,
    guest_count: Optional[int] = None,
) -> Booking:
    """
    Book a venue for an inclusive range of days.

    Floor and Monday rules apply to the start day; the whole range must be
    free in the venue calendar.
    """
    settings = get_settings()
    requested = parse_range(policy, start_value, end_value)

    for attempt in range(1, settings.MAX_RETRY_ATTEMPTS + 1):
        venue = await load_venue(db, venue_id)

        verdict = policy.is_valid_booking_date(requested.start)
        if not verdict.valid:
            record_booking_attempt("rejected")
            logger.info("booking_rejected", venue_id=venue_id, start=str(requested.start), reason=verdict.reason)
            raise PolicyRejection(verdict.reason)

        calendar = await verify_calendar(db, venue, "create")
        if has_overlap(calendar, requested):
            record_booking_attempt("rejected")
            logger.info(
                "booking_rejected",
                venue_id=venue_id,
                start=str(requested.start),
                end=str(requested.end),
                reason="overlap",
            )
            raise PolicyRejection(UNAVAILABLE_REASON)

        if not await claim_venue(db, venue):
            record_booking_attempt("conflict")
            await _lost_race(db, attempt, "booking", venue_id=venue_id)
            continue

        booking = Booking(
            venue_id=venue.id,
            user_id=user_id or settings.DEFAULT_USER_ID,
            start_date=requested.start,
            end_date=requested.end,
            guest_count=guest_count or 1,
            status=BOOKING_CONFIRMED,
        )
        db.add(booking)
        await db.flush()

        venue.calendar.append(
            VenueCalendarEntry(
                booking_id=booking.id,
                start_date=requested.start,
                end_date=requested.end,
            )
        )
        await db.flush()
        await db.refresh(booking)

        record_booking_attempt("success")
        logger.info(
            "booking_created",
            booking_id=booking.id,
            venue_id=venue.id,
            user_id=booking.user_id,
            start=str(booking.start_date),
            end=str(booking.end_date),
            attempt=attempt,
        )
        return booking

    # Unreachable: _lost_race raises on the last attempt
    raise Conflict(HIGH_DEMAND_MESSAGE)


async def check_availability(
    db: AsyncSession,
    policy: BookingPolicy,
    venue_id: int,
    start_value,
    end_value,
) -> tuple[bool, Optional[str]]:
    """
    Read-only availability answer for a venue and range.

    Both stores are consulted. If they disagree the drift is logged as
    critical and the range is judged against both, so a drifted calendar
    can only make the answer more conservative.
    """
    requested = parse_range(policy, start_value, end_value)
    venue = await load_venue(db, venue_id)

    verdict = policy.is_valid_booking_date(requested.start)
    if not verdict.valid:
        record_availability_check(False)
        return False, verdict.reason

    calendar = calendar_ranges(venue)
    stored = await confirmed_ranges(db, venue.id)
    drift = projection_drift(calendar, stored)
    if drift:
        logger.critical("consistency_fault", venue_id=venue.id, operation="check_availability", **drift)
        record_consistency_fault("check_availability")

    if has_overlap(calendar, requested) or has_overlap(stored, requested):
        record_availability_check(False)
        return False, ALREADY_BOOKED_REASON

    record_availability_check(True)
    return True, None


async def cancel_booking(db: AsyncSession, booking_id: int) -> Booking:
    """Mark a booking cancelled and drop its venue calendar entry."""
    settings = get_settings()

    for attempt in range(1, settings.MAX_RETRY_ATTEMPTS + 1):
        booking = await load_booking(db, booking_id)
        if booking.is_cancelled:
            raise PolicyRejection("Booking is already cancelled")

        venue = await load_venue(db, booking.venue_id)
        await verify_calendar(db, venue, "cancel")
        entry = find_calendar_entry(venue, booking.id)

        if not await claim_venue(db, venue):
            await _lost_race(db, attempt, "cancel", booking_id=booking_id)
            continue

        booking.status = BOOKING_CANCELLED
        venue.calendar.remove(entry)
        await db.flush()
        await db.refresh(booking)

        booking_cancellations.inc()
        logger.info(
            "booking_cancelled",
            booking_id=booking.id,
            venue_id=venue.id,
            start=str(booking.start_date),
            end=str(booking.end_date),
        )
        return booking

    raise Conflict(HIGH_DEMAND_MESSAGE)


async def reschedule_booking(
    db: AsyncSession,
    policy: BookingPolicy,
    booking_id: int,
    start_value,
    end_value,
) -> Booking:
    """
    Move a confirmed booking to new dates.

    The new start day must pass the booking rules, differ from the current
    start day and not be in the past. The new range must be free, ignoring
    the booking's own calendar entry.
    """
    settings = get_settings()
    requested = parse_range(policy, start_value, end_value)

    for attempt in range(1, settings.MAX_RETRY_ATTEMPTS + 1):
        booking = await load_booking(db, booking_id)
        if booking.is_cancelled:
            raise PolicyRejection("Cannot reschedule a cancelled booking")

        venue = await load_venue(db, booking.venue_id)

        verdict = policy.validate_reschedule_date(booking.start_date, requested.start)
        if not verdict.valid:
            record_reschedule("rejected")
            logger.info(
                "reschedule_rejected",
                booking_id=booking.id,
                new_start=str(requested.start),
                reason=verdict.reason,
            )
            raise PolicyRejection(verdict.reason)

        calendar = await verify_calendar(db, venue, "reschedule")
        if is_date_booked(calendar, requested.start, exclude_id=booking.id) or has_overlap(
            without(calendar, booking.id), requested
        ):
            record_reschedule("rejected")
            logger.info("reschedule_rejected", booking_id=booking.id, new_start=str(requested.start), reason="overlap")
            raise PolicyRejection(UNAVAILABLE_REASON)

        if not await claim_venue(db, venue):
            record_reschedule("conflict")
            await _lost_race(db, attempt, "reschedule", booking_id=booking_id)
            continue

        previous = (booking.start_date, booking.end_date)
        booking.start_date = requested.start
        booking.end_date = requested.end
        entry = find_calendar_entry(venue, booking.id)
        entry.start_date = requested.start
        entry.end_date = requested.end
        await db.flush()
        await db.refresh(booking)

        record_reschedule("success")
        logger.info(
            "booking_rescheduled",
            booking_id=booking.id,
            venue_id=venue.id,
            previous_start=str(previous[0]),
            previous_end=str(previous[1]),
            start=str(booking.start_date),
            end=str(booking.end_date),
        )
        return booking

    raise Conflict(HIGH_DEMAND_MESSAGE)


async def get_user_bookings(db: AsyncSession, user_id: str) -> list[Booking]:
    """Get all bookings for a user, newest first."""
    result = await db.execute(
        select(Booking)
        .where(Booking.user_id == user_id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
    )
    return list(result.unique().scalars().all())


async def rebuild_venue_calendar(db: AsyncSession, venue_id: int) -> tuple[Venue, dict]:
    """
    Rebuild a venue's calendar from its confirmed bookings.

    The booking store wins: missing entries are added, entries for
    cancelled or unknown bookings are removed, and entries with the wrong
    dates are corrected.
    """
    settings = get_settings()

    for attempt in range(1, settings.MAX_RETRY_ATTEMPTS + 1):
        venue = await load_venue(db, venue_id)
        stored = {r.id: r for r in await confirmed_ranges(db, venue.id)}

        if not await claim_venue(db, venue):
            await _lost_race(db, attempt, "calendar_rebuild", venue_id=venue_id)
            continue

        counts = {"added": 0, "removed": 0, "updated": 0}
        kept = set()
        for entry in list(venue.calendar):
            authoritative = stored.get(entry.booking_id)
            if authoritative is None:
                venue.calendar.remove(entry)
                counts["removed"] += 1
                continue
            if (entry.start_date, entry.end_date) != (authoritative.start, authoritative.end):
                entry.start_date = authoritative.start
                entry.end_date = authoritative.end
                counts["updated"] += 1
            kept.add(entry.booking_id)

        for booking_id, authoritative in stored.items():
            if booking_id in kept:
                continue
            venue.calendar.append(
                VenueCalendarEntry(
                    booking_id=booking_id,
                    start_date=authoritative.start,
                    end_date=authoritative.end,
                )
            )
            counts["added"] += 1

        await db.flush()

        if any(counts.values()):
            logger.warning("calendar_rebuilt", venue_id=venue.id, **counts)
        else:
            logger.info("calendar_rebuilt", venue_id=venue.id, **counts)
        return venue, counts

    raise Conflict(HIGH_DEMAND_MESSAGE)
