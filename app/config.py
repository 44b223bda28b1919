from pydantic_settings import BaseSettings
from pydantic import field_validator
from sqlalchemy.engine import make_url


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql+asyncpg://user:password@db:5432/listings_db"
    DATABASE_SSL: bool = False
    REDIS_URL: str = "redis://localhost:6379/0"
    USER_MANAGEMENT_URL: str = "http://user-management:8000"
    # "postgres" for the SQLAlchemy repositories, "memory" for a process-local store
    STORAGE_BACKEND: str = "postgres"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    DEFAULT_PAGE_SIZE: int = 9
    MAX_PAGE_SIZE: int = 100
    BOOKING_RATE_LIMIT_TIMES: int = 10
    BOOKING_RATE_LIMIT_SECONDS: int = 60

    @field_validator("DATABASE_URL")
    def use_asyncpg_driver(cls, v):
        """
        Rewrites plain postgres URLs (as handed out by most hosting providers)
        to the asyncpg driver used by the engine.
        """
        if not v:
            return v
        url = make_url(v)
        if url.drivername in ("postgres", "postgresql", "postgresql+psycopg2"):
            url = url.set(drivername="postgresql+asyncpg")
        return url.render_as_string(hide_password=False)

    @field_validator("STORAGE_BACKEND")
    def known_backend(cls, v):
        v = v.lower()
        if v not in ("postgres", "memory"):
            raise ValueError("STORAGE_BACKEND must be 'postgres' or 'memory'")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
