from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_session
from app.repositories.memory import (
    InMemoryPropertyRepository,
    InMemoryStore,
    InMemoryTourRepository,
    InMemoryUserRepository,
)
from app.repositories.sql import SqlPropertyRepository, SqlTourRepository, SqlUserRepository
from app.services.tours import TourService

# Shared by every request when STORAGE_BACKEND=memory
memory_store = InMemoryStore()


def get_property_repository(session: AsyncSession = Depends(get_session)):
    if settings.STORAGE_BACKEND == "memory":
        return InMemoryPropertyRepository(memory_store)
    return SqlPropertyRepository(session)


def get_tour_service(session: AsyncSession = Depends(get_session)) -> TourService:
    if settings.STORAGE_BACKEND == "memory":
        return TourService(
            InMemoryPropertyRepository(memory_store),
            InMemoryUserRepository(memory_store),
            InMemoryTourRepository(memory_store),
        )
    return TourService(
        SqlPropertyRepository(session),
        SqlUserRepository(session),
        SqlTourRepository(session),
    )
