import uuid
import enum
from sqlalchemy import (
    Column, String, Integer, Float, Boolean, DateTime, ForeignKey, Text, Enum,
    CheckConstraint, Index,
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from .base import Base
from .user import utcnow


class PropertyType(enum.Enum):
    apartment = "apartment"
    villa = "villa"
    penthouse = "penthouse"
    townhouse = "townhouse"
    office = "office"
    retail = "retail"
    land = "land"


class ListingType(enum.Enum):
    buy = "buy"
    rent = "rent"
    sell = "sell"


class Property(Base):
    __tablename__ = "properties"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_properties_price_non_negative"),
        # A location is either fully known or absent
        CheckConstraint(
            "(latitude IS NULL) = (longitude IS NULL)",
            name="ck_properties_lat_lng_paired",
        ),
        Index("ix_properties_lat_lng", "latitude", "longitude"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False, index=True)
    address = Column(String(255), nullable=False)
    city = Column(String(120), nullable=False, index=True)
    state = Column(String(120))
    zip_code = Column(String(20))
    country = Column(String(120), nullable=False)
    latitude = Column(Float)
    longitude = Column(Float)
    bedrooms = Column(Integer)
    bathrooms = Column(Float)
    square_feet = Column(Float)
    lot_size = Column(Float)
    property_type = Column(Enum(PropertyType, name="property_type"), nullable=False)
    listing_type = Column(Enum(ListingType, name="listing_type"), nullable=False)
    features = Column(JSONB, default=list)
    images = Column(JSONB, default=list, nullable=False)
    is_premium = Column(Boolean, default=False)
    is_verified = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None
