"""
Amenity catalogue entry, attached to venues many-to-many.
"""

from sqlalchemy import CheckConstraint, Column, Integer, String

from app.db.base import Base, TimestampMixin

AMENITY_CATEGORIES = ("basic", "luxury", "technical", "catering", "other")


class Amenity(Base, TimestampMixin):
    __tablename__ = "amenities"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)
    icon = Column(String(255), nullable=True)
    category = Column(String(20), nullable=False, default="basic", index=True)
    description = Column(String(1000), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "category IN ('basic', 'luxury', 'technical', 'catering', 'other')",
            name="check_amenity_category",
        ),
    )

    def __repr__(self) -> str:
        return f"<Amenity(id={self.id}, name={self.name}, category={self.category})>"
