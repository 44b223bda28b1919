from .base import Base
from .user import User, UserRole
from .property import Property, PropertyType, ListingType
from .property_tour import PropertyTour, TourStatus, ACTIVE_TOUR_STATUSES, ALLOWED_TRANSITIONS

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Property",
    "PropertyType",
    "ListingType",
    "PropertyTour",
    "TourStatus",
    "ACTIVE_TOUR_STATUSES",
    "ALLOWED_TRANSITIONS",
]
