"""
Amenity catalogue operations.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Conflict, ValidationError
from app.core.logging import get_logger
from app.models.amenity import AMENITY_CATEGORIES, Amenity
from app.schemas.amenity import AmenityCreate

logger = get_logger(__name__)


async def list_amenities(db: AsyncSession) -> list[Amenity]:
    result = await db.execute(select(Amenity).order_by(Amenity.category, Amenity.name))
    return list(result.scalars().all())


async def list_amenities_by_category(db: AsyncSession, category: str) -> list[Amenity]:
    if category not in AMENITY_CATEGORIES:
        raise ValidationError(
            f"Unknown category '{category}'. Expected one of: {', '.join(AMENITY_CATEGORIES)}"
        )
    result = await db.execute(
        select(Amenity).where(Amenity.category == category).order_by(Amenity.name)
    )
    return list(result.scalars().all())


async def find_amenity_by_name(db: AsyncSession, name: str) -> Optional[Amenity]:
    result = await db.execute(select(Amenity).where(Amenity.name == name))
    return result.scalar_one_or_none()


async def create_amenity(db: AsyncSession, data: AmenityCreate) -> Amenity:
    """Add an amenity. Names are unique; a concurrent insert of the same name is a Conflict too."""
    if await find_amenity_by_name(db, data.name):
        logger.warning("amenity_create_failed", reason="name_exists", name=data.name)
        raise Conflict("Amenity already exists")

    amenity = Amenity(
        name=data.name,
        icon=data.icon,
        category=data.category,
        description=data.description,
    )
    db.add(amenity)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        logger.warning("amenity_create_failed", reason="name_taken_concurrently", name=data.name)
        raise Conflict("Amenity already exists")
    await db.refresh(amenity)

    logger.info("amenity_created", amenity_id=amenity.id, name=amenity.name)
    return amenity
