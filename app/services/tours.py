from datetime import datetime
from typing import List, Optional
from uuid import UUID

from structlog import get_logger

from app.core.errors import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from app.models.property_tour import PropertyTour, TourStatus, can_transition
from app.models.user import User
from app.repositories.base import PropertyRepository, TourRepository, UserRepository
from app.services.availability import AvailabilityChecker, validate_interval

logger = get_logger(__name__)


class TourService:
    """Tour booking and lifecycle on top of the property, user and tour repositories."""

    def __init__(self, properties: PropertyRepository, users: UserRepository, tours: TourRepository):
        self.properties = properties
        self.users = users
        self.tours = tours
        self.checker = AvailabilityChecker(properties, tours)

    async def check_availability(self, property_id: UUID, start: datetime, end: datetime) -> bool:
        return await self.checker.is_available(property_id, start, end)

    async def create_tour(
        self,
        property_id: UUID,
        user_id: UUID,
        agent_id: UUID,
        start: datetime,
        end: datetime,
        notes: Optional[str] = None,
    ) -> PropertyTour:
        start, end = validate_interval(start, end)

        if await self.properties.get(property_id) is None:
            raise NotFoundError("property", property_id, field="property_id")

        if await self.users.get(user_id) is None:
            raise NotFoundError("user", user_id, field="user_id")

        agent = await self.users.get(agent_id)
        if agent is None:
            raise NotFoundError("user", agent_id, field="agent_id")
        if not agent.is_agent:
            raise ValidationError(f"User {agent_id} is not an agent", field="agent_id")

        # Friendly pre-check; the repository's conditional insert is authoritative
        if not await self.checker.is_available(property_id, start, end):
            logger.info(
                "Tour slot unavailable",
                property_id=str(property_id),
                start=start.isoformat(),
                end=end.isoformat(),
            )
            raise ConflictError("This time slot is not available", field="scheduled_date")

        tour = PropertyTour(
            property_id=property_id,
            user_id=user_id,
            agent_id=agent_id,
            scheduled_date=start,
            end_time=end,
            status=TourStatus.pending,
            notes=notes or None,
        )
        tour = await self.tours.add_if_available(tour)
        logger.info(
            "Tour created",
            tour_id=str(tour.id),
            property_id=str(property_id),
            user_id=str(user_id),
            agent_id=str(agent_id),
        )
        return tour

    async def update_tour_status(
        self, tour_id: UUID, new_status: TourStatus, acting_user_id: UUID
    ) -> PropertyTour:
        tour = await self._require_tour(tour_id)
        actor = await self._require_actor(acting_user_id)
        if not (actor.is_admin or tour.agent_id == actor.id):
            raise AuthorizationError("Only the assigned agent or an admin can change this tour's status")
        try:
            requested = TourStatus(new_status)
        except ValueError:
            raise ValidationError(f"Unknown tour status '{new_status}'", field="status")
        return await self._transition(tour, requested, actor)

    async def cancel_tour(self, tour_id: UUID, acting_user_id: UUID) -> PropertyTour:
        tour = await self._require_tour(tour_id)
        actor = await self._require_actor(acting_user_id)
        if not self._is_party(tour, actor):
            raise AuthorizationError("Not authorized to cancel this tour")
        return await self._transition(tour, TourStatus.canceled, actor)

    async def get_tour(self, tour_id: UUID, acting_user_id: UUID) -> PropertyTour:
        tour = await self._require_tour(tour_id)
        actor = await self._require_actor(acting_user_id)
        if not self._is_party(tour, actor):
            raise AuthorizationError("Not authorized to view this tour")
        return tour

    async def list_tours_for_user(self, user_id: UUID, acting_user_id: UUID) -> List[PropertyTour]:
        actor = await self._require_actor(acting_user_id)
        if actor.id != user_id and not (actor.is_agent or actor.is_admin):
            raise AuthorizationError("Not authorized to view these tours")
        return await self.tours.list_by_user(user_id)

    async def list_tours_for_agent(self, agent_id: UUID, acting_user_id: UUID) -> List[PropertyTour]:
        actor = await self._require_actor(acting_user_id)
        if actor.id != agent_id and not actor.is_admin:
            raise AuthorizationError("Not authorized to view these tours")
        return await self.tours.list_by_agent(agent_id)

    async def list_tours_for_property(self, property_id: UUID, acting_user_id: UUID) -> List[PropertyTour]:
        actor = await self._require_actor(acting_user_id)
        prop = await self.properties.get(property_id)
        if prop is None:
            raise NotFoundError("property", property_id, field="property_id")
        if prop.owner_id != actor.id and not actor.is_admin:
            raise AuthorizationError("Not authorized to view these tours")
        return await self.tours.list_by_property(property_id)

    async def _transition(self, tour: PropertyTour, requested: TourStatus, actor: User) -> PropertyTour:
        current = tour.status
        if not can_transition(current, requested):
            raise InvalidTransitionError(current, requested)
        updated = await self.tours.update_status(tour.id, current, requested)
        if updated is None:
            # Someone else moved the tour between our read and the write
            fresh = await self._require_tour(tour.id)
            raise InvalidTransitionError(fresh.status, requested)
        logger.info(
            "Tour status changed",
            tour_id=str(tour.id),
            from_status=current.value,
            to_status=requested.value,
            actor_id=str(actor.id),
        )
        return updated

    async def _require_tour(self, tour_id: UUID) -> PropertyTour:
        tour = await self.tours.get(tour_id)
        if tour is None:
            raise NotFoundError("tour", tour_id, field="tour_id")
        return tour

    async def _require_actor(self, acting_user_id: UUID) -> User:
        actor = await self.users.get(acting_user_id)
        if actor is None:
            raise AuthorizationError("Unknown acting user")
        return actor

    @staticmethod
    def _is_party(tour: PropertyTour, actor: User) -> bool:
        return actor.is_admin or actor.id in (tour.user_id, tour.agent_id)
