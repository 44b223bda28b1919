from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from app.config import settings
from app.models.property import ListingType, PropertyType


class PropertySearchParams(BaseModel):
    """Every filter is optional and independent; unset fields do not constrain results."""

    query: Optional[str] = None
    city: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_bedrooms: Optional[int] = None
    min_bathrooms: Optional[float] = None
    property_type: Optional[PropertyType] = None
    listing_type: Optional[ListingType] = None
    min_square_feet: Optional[float] = None
    max_square_feet: Optional[float] = None
    features: Optional[List[str]] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    radius_km: Optional[float] = None
    limit: int = Field(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)
    offset: int = Field(default=0, ge=0)

    @field_validator("query", "city")
    def strip_text(cls, v):
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("features")
    def clean_features(cls, v):
        if v is None:
            return None
        cleaned = [f.strip() for f in v if f and f.strip()]
        return cleaned or None

    @property
    def is_spatial(self) -> bool:
        return self.lat is not None or self.lng is not None or self.radius_km is not None

    class Config:
        json_schema_extra = {
            "example": {
                "query": "sea view",
                "min_price": 100000,
                "property_type": "villa",
                "features": ["pool", "garage"],
                "lat": 25.2048,
                "lng": 55.2708,
                "radius_km": 10,
                "limit": 9,
                "offset": 0,
            }
        }


class PropertyResponse(BaseModel):
    id: UUID
    owner_id: Optional[UUID] = None
    title: str
    description: str
    price: float
    address: str
    city: str
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[float] = None
    square_feet: Optional[float] = None
    lot_size: Optional[float] = None
    property_type: PropertyType
    listing_type: ListingType
    features: List[str] = []
    images: List[str] = []
    is_premium: bool = False
    is_verified: bool = False
    created_at: datetime
    updated_at: datetime

    @field_validator("features", "images", mode="before")
    def none_as_empty(cls, v):
        return v or []

    @field_validator("is_premium", "is_verified", mode="before")
    def none_as_false(cls, v):
        return bool(v)

    class Config:
        from_attributes = True


class PropertySearchItem(PropertyResponse):
    distance_km: Optional[float] = None


class PropertySearchResponse(BaseModel):
    items: List[PropertySearchItem]
    total: int
    limit: int
    offset: int
