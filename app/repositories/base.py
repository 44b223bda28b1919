from datetime import datetime
from typing import List, Optional, Protocol
from uuid import UUID

from app.models.property import Property
from app.models.property_tour import PropertyTour, TourStatus
from app.models.user import User
from app.services.filters import Criterion
from app.services.geo import BoundingBox


class PropertyRepository(Protocol):
    async def get(self, property_id: UUID) -> Optional[Property]:
        ...

    async def count(self, criteria: List[Criterion]) -> int:
        ...

    async def list_newest(self, criteria: List[Criterion], limit: int, offset: int) -> List[Property]:
        """Matching properties, most recently created first."""
        ...

    async def list_located(self, criteria: List[Criterion], box: Optional[BoundingBox] = None) -> List[Property]:
        """Every matching property that has coordinates, optionally inside ``box``."""
        ...


class UserRepository(Protocol):
    async def get(self, user_id: UUID) -> Optional[User]:
        ...


class TourRepository(Protocol):
    async def get(self, tour_id: UUID) -> Optional[PropertyTour]:
        ...

    async def list_active_overlapping(
        self, property_id: UUID, start: datetime, end: datetime
    ) -> List[PropertyTour]:
        """Pending or confirmed tours of ``property_id`` overlapping ``[start, end)``."""
        ...

    async def add_if_available(self, tour: PropertyTour) -> PropertyTour:
        """Insert ``tour`` unless an active tour of the same property overlaps it.

        Implementations must make the overlap check and the insert atomic and
        raise :class:`app.core.errors.ConflictError` when the slot is taken.
        """
        ...

    async def update_status(
        self, tour_id: UUID, expected: TourStatus, new_status: TourStatus
    ) -> Optional[PropertyTour]:
        """Compare-and-set the status; None if the tour is no longer in ``expected``."""
        ...

    async def list_by_user(self, user_id: UUID) -> List[PropertyTour]:
        ...

    async def list_by_agent(self, agent_id: UUID) -> List[PropertyTour]:
        ...

    async def list_by_property(self, property_id: UUID) -> List[PropertyTour]:
        ...
