import uuid
from datetime import datetime, timedelta, timezone
from math import pi

import pytest
import pytest_asyncio
from fastapi import HTTPException, Request
from httpx import ASGITransport, AsyncClient

from app.dependencies.auth import get_current_user
from app.dependencies.services import get_property_repository, get_tour_service
from app.main import app
from app.models import ListingType, Property, PropertyTour, PropertyType, TourStatus, User, UserRole
from app.repositories.memory import (
    InMemoryPropertyRepository,
    InMemoryStore,
    InMemoryTourRepository,
    InMemoryUserRepository,
)
from app.services.geo import EARTH_RADIUS_KM
from app.services.tours import TourService

TOUR_DAY = datetime(2026, 11, 2, tzinfo=timezone.utc)
KM_PER_DEGREE = EARTH_RADIUS_KM * pi / 180

CENTER_LAT = 25.2048
CENTER_LNG = 55.2708


def at(hour: int, minute: int = 0) -> datetime:
    return TOUR_DAY + timedelta(hours=hour, minutes=minute)


def north_of_center(km: float) -> float:
    """Latitude exactly ``km`` kilometres due north of the test center."""
    return CENTER_LAT + km / KM_PER_DEGREE


def make_property(store: InMemoryStore, **overrides) -> Property:
    fields = dict(
        title="Family home",
        description="Bright rooms and a quiet street",
        price=250000.0,
        address="1 Palm Road",
        city="Dubai",
        country="AE",
        bedrooms=3,
        bathrooms=2.0,
        square_feet=1800.0,
        property_type=PropertyType.apartment,
        listing_type=ListingType.buy,
        features=[],
        images=[],
    )
    fields.update(overrides)
    return store.add_property(Property(**fields))


def make_tour(store: InMemoryStore, property_id, user_id, agent_id, start, end, status=TourStatus.confirmed) -> PropertyTour:
    return store.add_tour(
        PropertyTour(
            property_id=property_id,
            user_id=user_id,
            agent_id=agent_id,
            scheduled_date=start,
            end_time=end,
            status=status,
        )
    )


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def owner(store):
    return store.add_user(User(email="owner@example.com", full_name="Olivia Owner", role=UserRole.agent))


@pytest.fixture
def agent(store):
    return store.add_user(User(email="agent@example.com", full_name="Adam Agent", role=UserRole.agent))


@pytest.fixture
def other_agent(store):
    return store.add_user(User(email="agent2@example.com", full_name="Ana Agent", role=UserRole.agent))


@pytest.fixture
def requester(store):
    return store.add_user(User(email="user@example.com", full_name="Uma User", role=UserRole.user))


@pytest.fixture
def stranger(store):
    return store.add_user(User(email="stranger@example.com", full_name="Sam Stranger", role=UserRole.user))


@pytest.fixture
def admin(store):
    return store.add_user(User(email="admin@example.com", full_name="Ada Admin", role=UserRole.admin))


@pytest.fixture
def listing(store, owner):
    return make_property(store, owner_id=owner.id, latitude=CENTER_LAT, longitude=CENTER_LNG)


@pytest.fixture
def property_repo(store):
    return InMemoryPropertyRepository(store)


@pytest.fixture
def service(store):
    return TourService(
        InMemoryPropertyRepository(store),
        InMemoryUserRepository(store),
        InMemoryTourRepository(store),
    )


async def _user_from_bearer(request: Request) -> dict:
    # Tests authenticate with "Bearer <user uuid>"
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")
    token = header[len("Bearer "):]
    try:
        uuid.UUID(token)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token")
    return {"user_id": token, "role": "user"}


def auth(user: User) -> dict:
    return {"Authorization": f"Bearer {user.id}"}


@pytest_asyncio.fixture
async def client(store, service, property_repo):
    app.dependency_overrides[get_current_user] = _user_from_bearer
    app.dependency_overrides[get_tour_service] = lambda: service
    app.dependency_overrides[get_property_repository] = lambda: property_repo
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
