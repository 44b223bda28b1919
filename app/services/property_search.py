from dataclasses import dataclass
from typing import List, Optional

from structlog import get_logger

from app.core.errors import ValidationError
from app.models.property import Property
from app.repositories.base import PropertyRepository
from app.schemas.property_search import PropertySearchParams
from app.services.filters import build_criteria
from app.services.geo import bounding_box, haversine_km

logger = get_logger(__name__)


@dataclass
class PropertyMatch:
    property: Property
    distance_km: Optional[float] = None


@dataclass
class SearchResult:
    items: List[PropertyMatch]
    total: int


def validate_search(params: PropertySearchParams) -> None:
    if (params.lat is None) != (params.lng is None):
        raise ValidationError("Latitude and longitude must be given together", field="lat" if params.lat is None else "lng")
    if params.radius_km is not None and params.lat is None:
        raise ValidationError("A radius requires a center point", field="lat")
    if params.lat is not None and params.radius_km is None:
        raise ValidationError("A center point requires a radius", field="radius_km")
    if params.radius_km is not None and params.radius_km <= 0:
        raise ValidationError("Radius must be greater than zero", field="radius_km")
    if params.lat is not None and not -90.0 <= params.lat <= 90.0:
        raise ValidationError("Latitude must be between -90 and 90", field="lat")
    if params.lng is not None and not -180.0 <= params.lng <= 180.0:
        raise ValidationError("Longitude must be between -180 and 180", field="lng")
    if params.min_price is not None and params.max_price is not None and params.min_price > params.max_price:
        raise ValidationError("min_price cannot exceed max_price", field="min_price")
    if (
        params.min_square_feet is not None
        and params.max_square_feet is not None
        and params.min_square_feet > params.max_square_feet
    ):
        raise ValidationError("min_square_feet cannot exceed max_square_feet", field="min_square_feet")


async def search_properties(properties: PropertyRepository, params: PropertySearchParams) -> SearchResult:
    """
    Attribute-filtered property search. With a center point and radius the
    matches are restricted to the radius and ordered nearest first; otherwise
    they are ordered newest first.
    """
    validate_search(params)
    criteria = build_criteria(params)

    if not params.is_spatial:
        total = await properties.count(criteria)
        rows = await properties.list_newest(criteria, params.limit, params.offset)
        logger.info("Property search executed", spatial=False, filters=len(criteria), total=total)
        return SearchResult(items=[PropertyMatch(p) for p in rows], total=total)

    box = bounding_box(params.lat, params.lng, params.radius_km)
    candidates = await properties.list_located(criteria, box)

    in_range = []
    for prop in candidates:
        if not prop.has_location:
            continue
        distance = haversine_km(params.lat, params.lng, prop.latitude, prop.longitude)
        if distance <= params.radius_km:
            in_range.append(PropertyMatch(prop, distance))
    in_range.sort(key=lambda m: (m.distance_km, str(m.property.id)))

    total = len(in_range)
    page = in_range[params.offset:params.offset + params.limit]
    logger.info(
        "Property search executed",
        spatial=True,
        filters=len(criteria),
        radius_km=params.radius_km,
        candidates=len(candidates),
        total=total,
    )
    return SearchResult(items=page, total=total)
