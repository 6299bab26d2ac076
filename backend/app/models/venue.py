"""
Venue model with its denormalized booking calendar.

Key design decisions:
- `calendar` is a projection of the venue's confirmed bookings, kept for fast
  per-venue overlap checks. Each entry carries the owning `booking_id` and is
  matched by it, never by date equality.
- `version` column enables optimistic locking: every calendar mutation bumps
  it, which serializes concurrent booking changes per venue.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin

venue_amenities = Table(
    "venue_amenities",
    Base.metadata,
    Column("venue_id", Integer, ForeignKey("venues.id", ondelete="CASCADE"), primary_key=True),
    Column("amenity_id", Integer, ForeignKey("amenities.id", ondelete="CASCADE"), primary_key=True),
)


class Venue(Base, TimestampMixin):
    __tablename__ = "venues"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    street = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    zip_code = Column(String(20), nullable=True)
    formatted_address = Column(String(500), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    image_url = Column(String(1000), nullable=False)
    daily_rate = Column(Numeric(10, 2), nullable=False)
    capacity = Column(Integer, nullable=False)
    rating = Column(Float, nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)
    is_popular = Column(Boolean, nullable=False, default=False)
    availability = Column(Boolean, nullable=False, default=True)

    # Optimistic locking version counter
    version = Column(Integer, nullable=False, default=1)

    amenities = relationship("Amenity", secondary=venue_amenities, lazy="selectin")
    calendar = relationship(
        "VenueCalendarEntry",
        back_populates="venue",
        order_by="VenueCalendarEntry.start_date",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("rating >= 0 AND rating <= 5", name="check_venue_rating_range"),
        CheckConstraint("capacity > 0", name="check_venue_capacity_positive"),
        Index("ix_venues_daily_rate", "daily_rate"),
        Index("ix_venues_capacity", "capacity"),
        Index("ix_venues_rating", "rating"),
        Index("ix_venues_is_popular", "is_popular"),
    )

    def __repr__(self) -> str:
        return f"<Venue(id={self.id}, name={self.name}, version={self.version})>"


class VenueCalendarEntry(Base):
    __tablename__ = "venue_calendar_entries"

    id = Column(Integer, primary_key=True, index=True)
    venue_id = Column(Integer, ForeignKey("venues.id", ondelete="CASCADE"), nullable=False)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, unique=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    venue = relationship("Venue", back_populates="calendar")

    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="check_calendar_entry_range"),
        # Overlap scans are always per venue and by date
        Index("ix_venue_calendar_venue_dates", "venue_id", "start_date", "end_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<VenueCalendarEntry(venue={self.venue_id}, booking={self.booking_id}, "
            f"{self.start_date}..{self.end_date})>"
        )
