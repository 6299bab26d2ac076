"""
Booking model: the authoritative record of a venue reservation.

Key design decisions:
- Dates are stored as calendar days (already normalized to the booking
  timezone), inclusive on both ends
- Status field allows cancellation without deleting records
- user_id is the identity service's subject, or the guest placeholder
"""

from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin

BOOKING_CONFIRMED = "confirmed"
BOOKING_CANCELLED = "cancelled"


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id"), nullable=False, index=True)
    user_id = Column(String(255), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    guest_count = Column(Integer, nullable=False, default=1)
    status = Column(String(20), nullable=False, default=BOOKING_CONFIRMED)

    venue = relationship("Venue", lazy="joined")

    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="check_booking_date_range"),
        CheckConstraint("guest_count > 0", name="check_booking_guest_count_positive"),
        CheckConstraint("status IN ('confirmed', 'cancelled')", name="check_booking_status"),
        Index("ix_bookings_venue_status_dates", "venue_id", "status", "start_date", "end_date"),
    )

    @property
    def is_cancelled(self) -> bool:
        return self.status == BOOKING_CANCELLED

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, venue={self.venue_id}, user={self.user_id}, "
            f"{self.start_date}..{self.end_date}, status={self.status})>"
        )
