"""
Pydantic schemas for amenity requests/responses.
"""

from typing import Literal, Optional

from pydantic import Field

from app.schemas.base import CamelModel

AmenityCategory = Literal["basic", "luxury", "technical", "catering", "other"]


class AmenityCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    icon: Optional[str] = Field(None, max_length=255)
    category: AmenityCategory = "basic"
    description: Optional[str] = Field(None, max_length=1000)


class AmenityResponse(CamelModel):
    id: int
    name: str
    icon: Optional[str] = None
    category: str
    description: Optional[str] = None
