from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.config import settings
from app.dependencies.services import get_property_repository
from app.models.property import ListingType, PropertyType
from app.schemas.property_search import PropertySearchItem, PropertySearchParams, PropertySearchResponse
from app.services.property_search import search_properties

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


def search_params(
    query: Optional[str] = None,
    city: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    min_bedrooms: Optional[int] = Query(default=None, alias="bedrooms"),
    min_bathrooms: Optional[float] = Query(default=None, alias="bathrooms"),
    property_type: Optional[PropertyType] = None,
    listing_type: Optional[ListingType] = None,
    min_square_feet: Optional[float] = None,
    max_square_feet: Optional[float] = None,
    features: Optional[str] = Query(default=None, description="Comma separated, all must match"),
    lat: Optional[float] = None,
    lng: Optional[float] = None,
    radius_km: Optional[float] = Query(default=None, alias="radius"),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
) -> PropertySearchParams:
    return PropertySearchParams(
        query=query,
        city=city,
        min_price=min_price,
        max_price=max_price,
        min_bedrooms=min_bedrooms,
        min_bathrooms=min_bathrooms,
        property_type=property_type,
        listing_type=listing_type,
        min_square_feet=min_square_feet,
        max_square_feet=max_square_feet,
        features=features.split(",") if features else None,
        lat=lat,
        lng=lng,
        radius_km=radius_km,
        limit=limit,
        offset=offset,
    )


@router.get("/search", response_model=PropertySearchResponse)
async def search(params: PropertySearchParams = Depends(search_params), properties=Depends(get_property_repository)):
    result = await search_properties(properties, params)
    items = []
    for match in result.items:
        item = PropertySearchItem.model_validate(match.property)
        item.distance_km = round(match.distance_km, 3) if match.distance_km is not None else None
        items.append(item)
    return PropertySearchResponse(items=items, total=result.total, limit=params.limit, offset=params.offset)
