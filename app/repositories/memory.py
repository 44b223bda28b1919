"""Process-local repositories for tests and single-process local runs.

Booking concurrency: ``add_if_available`` holds a per-property ``asyncio.Lock``
across the overlap check and the insert. That only protects callers sharing one
event loop and one process; deployments with several workers must use the
PostgreSQL repositories, whose exclusion constraint is the real guard.
"""

import asyncio
import uuid
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from app.core.errors import ConflictError
from app.models.property import Property
from app.models.property_tour import PropertyTour, TourStatus
from app.models.user import User, utcnow
from app.services.availability import as_utc, intervals_overlap
from app.services.filters import Criterion, matches_all
from app.services.geo import BoundingBox


class InMemoryStore:
    def __init__(self):
        self.users: Dict[UUID, User] = {}
        self.properties: Dict[UUID, Property] = {}
        self.tours: Dict[UUID, PropertyTour] = {}
        self.property_locks: Dict[UUID, asyncio.Lock] = defaultdict(asyncio.Lock)

    def add_user(self, user: User) -> User:
        if user.id is None:
            user.id = uuid.uuid4()
        if user.created_at is None:
            user.created_at = utcnow()
        self.users[user.id] = user
        return user

    def add_property(self, prop: Property) -> Property:
        now = utcnow()
        if prop.id is None:
            prop.id = uuid.uuid4()
        if prop.created_at is None:
            prop.created_at = now
        if prop.updated_at is None:
            prop.updated_at = prop.created_at
        if prop.features is None:
            prop.features = []
        if prop.images is None:
            prop.images = []
        self.properties[prop.id] = prop
        return prop

    def add_tour(self, tour: PropertyTour) -> PropertyTour:
        """Insert without any availability check (fixtures, imports)."""
        now = utcnow()
        if tour.id is None:
            tour.id = uuid.uuid4()
        if tour.status is None:
            tour.status = TourStatus.pending
        tour.created_at = tour.created_at or now
        tour.updated_at = tour.updated_at or now
        self.tours[tour.id] = tour
        return tour


class InMemoryPropertyRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store

    def _matching(self, criteria: List[Criterion]) -> List[Property]:
        return [p for p in self.store.properties.values() if matches_all(p, criteria)]

    async def get(self, property_id: UUID) -> Optional[Property]:
        return self.store.properties.get(property_id)

    async def count(self, criteria: List[Criterion]) -> int:
        return len(self._matching(criteria))

    async def list_newest(self, criteria: List[Criterion], limit: int, offset: int) -> List[Property]:
        # two stable sorts: id ascending within created_at descending
        rows = sorted(self._matching(criteria), key=lambda p: str(p.id))
        rows.sort(key=lambda p: p.created_at, reverse=True)
        return rows[offset:offset + limit]

    async def list_located(self, criteria: List[Criterion], box: Optional[BoundingBox] = None) -> List[Property]:
        rows = [p for p in self._matching(criteria) if p.has_location]
        if box is not None:
            rows = [p for p in rows if box.contains(p.latitude, p.longitude)]
        return rows


class InMemoryUserRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def get(self, user_id: UUID) -> Optional[User]:
        return self.store.users.get(user_id)


class InMemoryTourRepository:
    def __init__(self, store: InMemoryStore):
        self.store = store

    async def get(self, tour_id: UUID) -> Optional[PropertyTour]:
        return self.store.tours.get(tour_id)

    def _overlapping(self, property_id: UUID, start: datetime, end: datetime) -> List[PropertyTour]:
        return [
            t for t in self.store.tours.values()
            if t.property_id == property_id
            and t.is_active
            and intervals_overlap(as_utc(t.scheduled_date), as_utc(t.end_time), as_utc(start), as_utc(end))
        ]

    async def list_active_overlapping(
        self, property_id: UUID, start: datetime, end: datetime
    ) -> List[PropertyTour]:
        return self._overlapping(property_id, start, end)

    async def add_if_available(self, tour: PropertyTour) -> PropertyTour:
        async with self.store.property_locks[tour.property_id]:
            if self._overlapping(tour.property_id, tour.scheduled_date, tour.end_time):
                raise ConflictError("This time slot is not available", field="scheduled_date")
            return self.store.add_tour(tour)

    async def update_status(
        self, tour_id: UUID, expected: TourStatus, new_status: TourStatus
    ) -> Optional[PropertyTour]:
        tour = self.store.tours.get(tour_id)
        if tour is None or tour.status != expected:
            return None
        tour.status = new_status
        tour.updated_at = utcnow()
        return tour

    def _sorted(self, tours: List[PropertyTour]) -> List[PropertyTour]:
        for t in tours:
            t.listing = self.store.properties.get(t.property_id)
            t.user = self.store.users.get(t.user_id)
        return sorted(tours, key=lambda t: as_utc(t.scheduled_date), reverse=True)

    async def list_by_user(self, user_id: UUID) -> List[PropertyTour]:
        return self._sorted([t for t in self.store.tours.values() if t.user_id == user_id])

    async def list_by_agent(self, agent_id: UUID) -> List[PropertyTour]:
        return self._sorted([t for t in self.store.tours.values() if t.agent_id == agent_id])

    async def list_by_property(self, property_id: UUID) -> List[PropertyTour]:
        return self._sorted([t for t in self.store.tours.values() if t.property_id == property_id])
