"""Demo data for running the service with ``STORAGE_BACKEND=memory``.

User ids are fixed so the user-management service can issue tokens for them.
"""

import uuid

from structlog import get_logger

from app.models.property import ListingType, Property, PropertyType
from app.models.user import User, UserRole
from app.repositories.memory import InMemoryStore

logger = get_logger(__name__)

SEED_NAMESPACE = uuid.UUID("6f1c2a4e-3b7d-4c9a-8e21-5d0b9f3a7c64")

DEMO_USER_ID = uuid.uuid5(SEED_NAMESPACE, "user")
DEMO_AGENT_ID = uuid.uuid5(SEED_NAMESPACE, "agent")
DEMO_ADMIN_ID = uuid.uuid5(SEED_NAMESPACE, "admin")

SEED_USERS = [
    dict(id=DEMO_USER_ID, email="testuser@example.com", full_name="Test Regular User", role=UserRole.user),
    dict(id=DEMO_AGENT_ID, email="testagent@example.com", full_name="Test Agent User", role=UserRole.agent),
    dict(
        id=DEMO_ADMIN_ID,
        email="admin@example.com",
        full_name="Admin User",
        role=UserRole.admin,
        phone="+1234567890",
    ),
]

SEED_PROPERTIES = [
    dict(
        title="Marina view apartment",
        description="Two bedroom apartment overlooking the marina",
        price=1850000.0,
        address="12 Marina Walk",
        city="Dubai",
        country="AE",
        latitude=25.0805,
        longitude=55.1403,
        bedrooms=2,
        bathrooms=2.0,
        square_feet=1250.0,
        property_type=PropertyType.apartment,
        listing_type=ListingType.buy,
        features=["pool", "gym", "parking"],
        is_verified=True,
    ),
    dict(
        title="Palm Jumeirah villa",
        description="Beachfront villa with a private garden",
        price=14500000.0,
        address="Frond K, Palm Jumeirah",
        city="Dubai",
        country="AE",
        latitude=25.1124,
        longitude=55.1390,
        bedrooms=5,
        bathrooms=6.0,
        square_feet=7200.0,
        lot_size=9000.0,
        property_type=PropertyType.villa,
        listing_type=ListingType.buy,
        features=["pool", "garden", "garage", "beach access"],
        is_premium=True,
        is_verified=True,
    ),
    dict(
        title="Downtown studio",
        description="Furnished studio a short walk from the metro",
        price=85000.0,
        address="Boulevard Central, Downtown",
        city="Dubai",
        country="AE",
        latitude=25.1972,
        longitude=55.2744,
        bedrooms=0,
        bathrooms=1.0,
        square_feet=480.0,
        property_type=PropertyType.apartment,
        listing_type=ListingType.rent,
        features=["gym", "furnished"],
    ),
    dict(
        title="Corniche office floor",
        description="Open plan office with sea views",
        price=420000.0,
        address="Corniche Road",
        city="Abu Dhabi",
        country="AE",
        latitude=24.4764,
        longitude=54.3220,
        square_feet=5400.0,
        property_type=PropertyType.office,
        listing_type=ListingType.rent,
        features=["parking"],
    ),
]


def seed_memory_store(store: InMemoryStore) -> bool:
    """Fill an empty store with demo users and listings. Returns False if it already held users."""
    if store.users:
        return False
    for fields in SEED_USERS:
        store.add_user(User(**fields))
    for fields in SEED_PROPERTIES:
        store.add_property(Property(owner_id=DEMO_AGENT_ID, **fields))
    logger.info(
        "Seeded in-memory store",
        users=len(store.users),
        properties=len(store.properties),
        agent_id=str(DEMO_AGENT_ID),
    )
    return True
