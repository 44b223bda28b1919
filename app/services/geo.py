from dataclasses import dataclass
from math import radians, sin, cos, asin, sqrt
from typing import Optional

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.32


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres on a spherical earth."""
    dlat = radians(lat2 - lat1)
    dlon = radians(lon2 - lon1)
    a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * asin(min(1.0, sqrt(a)))


@dataclass(frozen=True)
class BoundingBox:
    """Coarse lat/lng window used to prefilter rows before exact distance checks.

    ``min_lng``/``max_lng`` are None when the window would wrap the antimeridian
    or touch a pole; only the latitude band is usable then.
    """

    min_lat: float
    max_lat: float
    min_lng: Optional[float] = None
    max_lng: Optional[float] = None

    def contains(self, lat: float, lng: float) -> bool:
        if not self.min_lat <= lat <= self.max_lat:
            return False
        if self.min_lng is None or self.max_lng is None:
            return True
        return self.min_lng <= lng <= self.max_lng


def bounding_box(lat: float, lng: float, radius_km: float) -> BoundingBox:
    # Pad slightly so rounding never excludes a point exactly on the radius
    radius_km = radius_km * 1.01
    dlat = radius_km / KM_PER_DEGREE_LAT
    min_lat = max(-90.0, lat - dlat)
    max_lat = min(90.0, lat + dlat)
    if min_lat <= -90.0 or max_lat >= 90.0:
        return BoundingBox(min_lat, max_lat)

    # Longitude degrees shrink with latitude; use the edge closest to the pole
    widest = max(abs(min_lat), abs(max_lat))
    km_per_degree_lng = KM_PER_DEGREE_LAT * cos(radians(widest))
    if km_per_degree_lng <= 0:
        return BoundingBox(min_lat, max_lat)
    dlng = radius_km / km_per_degree_lng
    min_lng = lng - dlng
    max_lng = lng + dlng
    if min_lng < -180.0 or max_lng > 180.0:
        return BoundingBox(min_lat, max_lat)
    return BoundingBox(min_lat, max_lat, min_lng, max_lng)
