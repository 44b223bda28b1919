import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError

from app.core.errors import ConflictError
from app.models import ACTIVE_TOUR_STATUSES, PropertyTour, TourStatus
from app.repositories.sql import SqlPropertyRepository, SqlTourRepository
from app.services.geo import BoundingBox
from conftest import at


class FakeDriverError(Exception):
    def __init__(self, message, sqlstate):
        super().__init__(message)
        self.sqlstate = sqlstate


def _tour() -> PropertyTour:
    return PropertyTour(
        property_id=uuid.uuid4(),
        user_id=uuid.uuid4(),
        agent_id=uuid.uuid4(),
        scheduled_date=at(10),
        end_time=at(11),
        status=TourStatus.pending,
    )


def _session(commit_error=None):
    session = MagicMock()
    result = MagicMock()
    result.scalars.return_value.all.return_value = []
    result.scalar_one_or_none.return_value = None
    session.execute = AsyncMock(return_value=result)
    session.commit = AsyncMock(side_effect=commit_error)
    session.rollback = AsyncMock()
    return session


@pytest.mark.asyncio
async def test_exclusion_violation_becomes_conflict():
    orig = FakeDriverError('conflicting key value violates exclusion constraint "property_tours_no_overlap"', "23P01")
    session = _session(IntegrityError("INSERT INTO property_tours ...", {}, orig))
    repo = SqlTourRepository(session)

    with pytest.raises(ConflictError):
        await repo.add_if_available(_tour())

    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_other_integrity_errors_propagate():
    orig = FakeDriverError('insert violates foreign key constraint "property_tours_agent_id_fkey"', "23503")
    session = _session(IntegrityError("INSERT INTO property_tours ...", {}, orig))
    repo = SqlTourRepository(session)

    with pytest.raises(IntegrityError):
        await repo.add_if_available(_tour())

    session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_successful_insert_commits():
    session = _session()
    repo = SqlTourRepository(session)
    tour = _tour()

    assert await repo.add_if_available(tour) is tour
    session.add.assert_called_once_with(tour)
    session.commit.assert_awaited_once()


def _executed(session):
    stmt = session.execute.await_args.args[0]
    compiled = stmt.compile(dialect=postgresql.dialect())
    return str(compiled), compiled.params


@pytest.mark.asyncio
async def test_overlap_query_is_half_open_and_active_only():
    session = _session()
    property_id = uuid.uuid4()

    await SqlTourRepository(session).list_active_overlapping(property_id, at(10), at(11))

    sql, params = _executed(session)
    assert "property_tours.property_id = %(property_id_1)s" in sql
    assert "property_tours.status IN" in sql
    # strict comparisons: a tour ending at 10:00 or starting at 11:00 is not returned
    assert "property_tours.scheduled_date < %(scheduled_date_1)s" in sql
    assert "property_tours.end_time > %(end_time_1)s" in sql
    assert params["scheduled_date_1"] == at(11)
    assert params["end_time_1"] == at(10)
    assert set(params["status_1"]) == set(ACTIVE_TOUR_STATUSES)


@pytest.mark.asyncio
async def test_located_query_applies_bounding_box():
    session = _session()
    box = BoundingBox(min_lat=24.0, max_lat=26.0, min_lng=54.0, max_lng=56.0)

    await SqlPropertyRepository(session).list_located([], box)

    sql, params = _executed(session)
    assert "properties.latitude IS NOT NULL" in sql
    assert "properties.latitude BETWEEN %(latitude_1)s AND %(latitude_2)s" in sql
    assert "properties.longitude BETWEEN %(longitude_1)s AND %(longitude_2)s" in sql
    assert (params["latitude_1"], params["latitude_2"]) == (24.0, 26.0)
    assert (params["longitude_1"], params["longitude_2"]) == (54.0, 56.0)


@pytest.mark.asyncio
async def test_located_query_drops_longitude_limits_when_box_wraps():
    session = _session()
    box = BoundingBox(min_lat=-1.0, max_lat=1.0, min_lng=None, max_lng=None)

    await SqlPropertyRepository(session).list_located([], box)

    sql, _ = _executed(session)
    assert "properties.latitude BETWEEN" in sql
    assert "properties.longitude BETWEEN" not in sql


@pytest.mark.asyncio
async def test_status_update_is_conditional_on_expected_status():
    session = _session()
    tour_id = uuid.uuid4()

    updated = await SqlTourRepository(session).update_status(tour_id, TourStatus.pending, TourStatus.confirmed)

    assert updated is None
    sql, params = _executed(session)
    assert sql.startswith("UPDATE property_tours SET")
    assert "WHERE property_tours.id = %(id_1)s AND property_tours.status = %(status_1)s" in sql
    assert "RETURNING" in sql
    assert params["id_1"] == tour_id
    assert params["status_1"] == TourStatus.pending
    assert params["status"] == TourStatus.confirmed
    session.commit.assert_awaited_once()

