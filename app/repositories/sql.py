"""PostgreSQL-backed repositories (async SQLAlchemy session per request).

Booking concurrency: overlapping active tours are rejected by the database
itself through the ``property_tours_no_overlap`` exclusion constraint (see the
initial migration). ``SqlTourRepository.add_if_available`` therefore only has to
insert and translate a constraint violation into ``ConflictError``; it stays
correct under any number of concurrent writers and never serialises bookings
for unrelated properties.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from structlog import get_logger

from app.core.errors import ConflictError
from app.models.property import Property
from app.models.property_tour import (
    ACTIVE_TOUR_STATUSES,
    NO_OVERLAP_CONSTRAINT,
    PropertyTour,
    TourStatus,
)
from app.models.user import User, utcnow
from app.services.filters import Criterion, Op
from app.services.geo import BoundingBox

logger = get_logger(__name__)

EXCLUSION_VIOLATION = "23P01"


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def criterion_clause(criterion: Criterion):
    if criterion.op is Op.ICONTAINS_ANY:
        pattern = f"%{_escape_like(str(criterion.value))}%"
        return or_(*[getattr(Property, f).ilike(pattern, escape="\\") for f in criterion.fields])

    column = getattr(Property, criterion.field)
    if criterion.op is Op.EQ:
        return column == criterion.value
    if criterion.op is Op.GTE:
        return column >= criterion.value
    if criterion.op is Op.LTE:
        return column <= criterion.value
    if criterion.op is Op.HAS_ALL:
        # JSONB containment: features @> '["pool", "garage"]'
        return column.contains(list(criterion.value))
    raise ValueError(f"Unsupported operator {criterion.op}")


def where_clause(criteria: List[Criterion]):
    clauses = [criterion_clause(c) for c in criteria]
    return and_(*clauses) if clauses else None


class SqlPropertyRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    def _filtered(self, stmt, criteria: List[Criterion]):
        clause = where_clause(criteria)
        return stmt.where(clause) if clause is not None else stmt

    async def get(self, property_id: UUID) -> Optional[Property]:
        return await self.session.get(Property, property_id)

    async def count(self, criteria: List[Criterion]) -> int:
        stmt = self._filtered(select(func.count()).select_from(Property), criteria)
        result = await self.session.execute(stmt)
        return int(result.scalar() or 0)

    async def list_newest(self, criteria: List[Criterion], limit: int, offset: int) -> List[Property]:
        stmt = (
            self._filtered(select(Property), criteria)
            .order_by(Property.created_at.desc(), Property.id)
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_located(self, criteria: List[Criterion], box: Optional[BoundingBox] = None) -> List[Property]:
        stmt = self._filtered(select(Property), criteria).where(
            Property.latitude.is_not(None), Property.longitude.is_not(None)
        )
        if box is not None:
            stmt = stmt.where(Property.latitude.between(box.min_lat, box.max_lat))
            if box.min_lng is not None and box.max_lng is not None:
                stmt = stmt.where(Property.longitude.between(box.min_lng, box.max_lng))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class SqlUserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: UUID) -> Optional[User]:
        return await self.session.get(User, user_id)


class SqlTourRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, tour_id: UUID) -> Optional[PropertyTour]:
        return await self.session.get(PropertyTour, tour_id)

    async def list_active_overlapping(
        self, property_id: UUID, start: datetime, end: datetime
    ) -> List[PropertyTour]:
        stmt = select(PropertyTour).where(
            PropertyTour.property_id == property_id,
            PropertyTour.status.in_(list(ACTIVE_TOUR_STATUSES)),
            # half-open overlap: existing.start < new.end AND new.start < existing.end
            PropertyTour.scheduled_date < end,
            PropertyTour.end_time > start,
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def add_if_available(self, tour: PropertyTour) -> PropertyTour:
        self.session.add(tour)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            if _is_overlap_violation(exc):
                logger.info(
                    "Tour insert rejected by exclusion constraint",
                    property_id=str(tour.property_id),
                    start=tour.scheduled_date.isoformat(),
                    end=tour.end_time.isoformat(),
                )
                raise ConflictError("This time slot is not available", field="scheduled_date") from exc
            raise
        return tour

    async def update_status(
        self, tour_id: UUID, expected: TourStatus, new_status: TourStatus
    ) -> Optional[PropertyTour]:
        stmt = (
            update(PropertyTour)
            .where(PropertyTour.id == tour_id, PropertyTour.status == expected)
            .values(status=new_status, updated_at=utcnow())
            .returning(PropertyTour)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        updated = result.scalar_one_or_none()
        await self.session.commit()
        return updated

    async def _list(self, *conditions) -> List[PropertyTour]:
        stmt = (
            select(PropertyTour)
            .where(*conditions)
            .options(selectinload(PropertyTour.listing), selectinload(PropertyTour.user))
            .order_by(PropertyTour.scheduled_date.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_user(self, user_id: UUID) -> List[PropertyTour]:
        return await self._list(PropertyTour.user_id == user_id)

    async def list_by_agent(self, agent_id: UUID) -> List[PropertyTour]:
        return await self._list(PropertyTour.agent_id == agent_id)

    async def list_by_property(self, property_id: UUID) -> List[PropertyTour]:
        return await self._list(PropertyTour.property_id == property_id)


def _is_overlap_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == EXCLUSION_VIOLATION:
        return True
    return NO_OVERLAP_CONSTRAINT in str(orig)
