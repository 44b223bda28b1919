import uuid
import enum
from sqlalchemy import Column, DateTime, ForeignKey, Text, Enum, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from .base import Base
from .user import utcnow


class TourStatus(str, enum.Enum):
    pending = "pending"
    confirmed = "confirmed"
    completed = "completed"
    canceled = "canceled"


# Tours in these states hold their slot; completed and canceled ones never block a booking
ACTIVE_TOUR_STATUSES = frozenset({TourStatus.pending, TourStatus.confirmed})

ALLOWED_TRANSITIONS = {
    TourStatus.pending: frozenset({TourStatus.confirmed, TourStatus.canceled}),
    TourStatus.confirmed: frozenset({TourStatus.completed, TourStatus.canceled}),
    TourStatus.completed: frozenset(),
    TourStatus.canceled: frozenset(),
}


def can_transition(current: TourStatus, requested: TourStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS.get(current, frozenset())


# Name of the exclusion constraint created by the initial migration:
#   EXCLUDE USING gist (property_id WITH =, tstzrange(scheduled_date, end_time, '[)') WITH &&)
#   WHERE (status IN ('pending', 'confirmed'))
# It is the authoritative guard against overlapping active tours.
NO_OVERLAP_CONSTRAINT = "property_tours_no_overlap"


class PropertyTour(Base):
    __tablename__ = "property_tours"
    __table_args__ = (
        CheckConstraint("end_time > scheduled_date", name="ck_property_tours_end_after_start"),
        Index("ix_property_tours_property_schedule", "property_id", "scheduled_date"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    property_id = Column(UUID(as_uuid=True), ForeignKey("properties.id"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    agent_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    scheduled_date = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    status = Column(
        Enum(TourStatus, name="tour_status"),
        default=TourStatus.pending,
        nullable=False,
    )
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    # Loaded eagerly by the tour listings
    listing = relationship("Property")
    user = relationship("User", foreign_keys=[user_id])

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_TOUR_STATUSES
