"""
Amenity endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.schemas.amenity import AmenityCreate, AmenityResponse
from app.services.amenity_service import (
    create_amenity,
    list_amenities,
    list_amenities_by_category,
)

router = APIRouter(prefix="/amenities", tags=["Amenities"])


@router.get("", response_model=list[AmenityResponse])
async def list_amenities_endpoint(db: AsyncSession = Depends(get_db)):
    return await list_amenities(db)


@router.get("/category/{category}", response_model=list[AmenityResponse])
async def list_amenities_by_category_endpoint(category: str, db: AsyncSession = Depends(get_db)):
    return await list_amenities_by_category(db, category)


@router.post("", response_model=AmenityResponse, status_code=status.HTTP_201_CREATED)
async def create_amenity_endpoint(amenity_data: AmenityCreate, db: AsyncSession = Depends(get_db)):
    """Add an amenity to the catalogue. Names must be unique."""
    return await create_amenity(db, amenity_data)
