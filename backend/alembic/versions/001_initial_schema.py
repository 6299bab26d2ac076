"""Initial schema: amenities, venues, bookings and the venue calendar.

Revision ID: 001
Revises: None
Create Date: 2025-05-01
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "amenities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("icon", sa.String(255), nullable=True),
        sa.Column("category", sa.String(20), nullable=False, server_default=sa.text("'basic'")),
        sa.Column("description", sa.String(1000), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_amenities_name"),
        sa.CheckConstraint(
            "category IN ('basic', 'luxury', 'technical', 'catering', 'other')",
            name="check_amenity_category",
        ),
    )
    op.create_index("ix_amenities_id", "amenities", ["id"])
    op.create_index("ix_amenities_category", "amenities", ["category"])

    op.create_table(
        "venues",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("street", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(100), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("zip_code", sa.String(20), nullable=True),
        sa.Column("formatted_address", sa.String(500), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("image_url", sa.String(1000), nullable=False),
        sa.Column("daily_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("rating", sa.Float(), nullable=False, server_default=sa.text("0")),
        sa.Column("review_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_popular", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("availability", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        *_timestamps(),
        sa.CheckConstraint("rating >= 0 AND rating <= 5", name="check_venue_rating_range"),
        sa.CheckConstraint("capacity > 0", name="check_venue_capacity_positive"),
    )
    op.create_index("ix_venues_id", "venues", ["id"])
    # Popular-venue listings filter and sort on these
    op.create_index("ix_venues_daily_rate", "venues", ["daily_rate"])
    op.create_index("ix_venues_capacity", "venues", ["capacity"])
    op.create_index("ix_venues_rating", "venues", ["rating"])
    op.create_index("ix_venues_is_popular", "venues", ["is_popular"])

    op.create_table(
        "venue_amenities",
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("amenity_id", sa.Integer(), sa.ForeignKey("amenities.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id"), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("guest_count", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'confirmed'")),
        *_timestamps(),
        sa.CheckConstraint("start_date <= end_date", name="check_booking_date_range"),
        sa.CheckConstraint("guest_count > 0", name="check_booking_guest_count_positive"),
        sa.CheckConstraint("status IN ('confirmed', 'cancelled')", name="check_booking_status"),
    )
    op.create_index("ix_bookings_id", "bookings", ["id"])
    op.create_index("ix_bookings_venue_id", "bookings", ["venue_id"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])
    # Drift checks read every confirmed booking of one venue
    op.create_index(
        "ix_bookings_venue_status_dates",
        "bookings",
        ["venue_id", "status", "start_date", "end_date"],
    )

    op.create_table(
        "venue_calendar_entries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("venue_id", sa.Integer(), sa.ForeignKey("venues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("booking_id", sa.Integer(), sa.ForeignKey("bookings.id"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.UniqueConstraint("booking_id", name="uq_venue_calendar_booking"),
        sa.CheckConstraint("start_date <= end_date", name="check_calendar_entry_range"),
    )
    op.create_index("ix_venue_calendar_entries_id", "venue_calendar_entries", ["id"])
    op.create_index(
        "ix_venue_calendar_venue_dates",
        "venue_calendar_entries",
        ["venue_id", "start_date", "end_date"],
    )


def downgrade() -> None:
    op.drop_table("venue_calendar_entries")
    op.drop_table("bookings")
    op.drop_table("venue_amenities")
    op.drop_table("venues")
    op.drop_table("amenities")
