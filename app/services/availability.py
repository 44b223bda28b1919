from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from app.core.errors import NotFoundError, ValidationError
from app.repositories.base import PropertyRepository, TourRepository


def intervals_overlap(s1: datetime, e1: datetime, s2: datetime, e2: datetime) -> bool:
    """Half-open overlap test for ``[s1, e1)`` and ``[s2, e2)``.

    Covers "starts during", "ends during" and "encompasses" in one comparison;
    intervals that only touch (``e1 == s2``) do not overlap.
    """
    return s1 < e2 and s2 < e1


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_interval(start: Optional[datetime], end: Optional[datetime]):
    if start is None:
        raise ValidationError("Start time is required", field="scheduled_date")
    if end is None:
        raise ValidationError("End time is required", field="end_time")
    start, end = as_utc(start), as_utc(end)
    if end <= start:
        raise ValidationError("End time must be after the start time", field="end_time")
    return start, end


class AvailabilityChecker:
    """Decides whether a property is free for a proposed tour interval. Read-only."""

    def __init__(self, properties: PropertyRepository, tours: TourRepository):
        self.properties = properties
        self.tours = tours

    async def is_available(self, property_id: UUID, start: datetime, end: datetime) -> bool:
        start, end = validate_interval(start, end)
        if await self.properties.get(property_id) is None:
            raise NotFoundError("property", property_id, field="property_id")
        conflicting = await self.tours.list_active_overlapping(property_id, start, end)
        # The store narrows by interval; the predicate here is the definition of a clash
        return not any(
            t.is_active and intervals_overlap(as_utc(t.scheduled_date), as_utc(t.end_time), start, end)
            for t in conflicting
        )
