from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.routers import properties, tours
from app.core.errors import TourServiceError
from app.core.logging import setup_logging
from fastapi_limiter import FastAPILimiter
from redis.asyncio import Redis
from app.config import settings
from sqlalchemy import text
from app.database import AsyncSessionFactory
from app.dependencies.services import memory_store
from app.seed import seed_memory_store
from structlog import get_logger

logger = get_logger(__name__)

app = FastAPI(title="Property Tours & Search Service")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(properties.router)
app.include_router(tours.router)


@app.exception_handler(TourServiceError)
async def tour_service_error_handler(request: Request, exc: TourServiceError):
    logger.info(
        "Request rejected",
        path=request.url.path,
        error=exc.kind,
        field=exc.field,
        detail=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.on_event("startup")
async def startup_event():
    setup_logging()
    # Rate limiting is optional; bookings are accepted without it when Redis is down
    if settings.REDIS_URL:
        try:
            redis = Redis.from_url(settings.REDIS_URL)
            await redis.ping()
            await FastAPILimiter.init(redis)
        except Exception as e:
            logger.warning("Rate limiter disabled, Redis unavailable", error=str(e))
    if settings.STORAGE_BACKEND == "memory":
        seed_memory_store(memory_store)
    logger.info("Service started", storage_backend=settings.STORAGE_BACKEND)


@app.get("/health", tags=["health"])
async def health():
    details = {"status": "ok", "storage_backend": settings.STORAGE_BACKEND}
    if settings.STORAGE_BACKEND == "postgres":
        # Check DB connectivity
        try:
            async with AsyncSessionFactory() as session:
                await session.execute(text("SELECT 1"))
            details["database"] = "up"
        except Exception as e:
            details["status"] = "degraded"
            details["database"] = f"down: {str(e)}"
    # Config presence checks (no secrets exposed)
    details["config"] = {
        "db_url_set": bool(settings.DATABASE_URL),
        "redis_url_set": bool(settings.REDIS_URL),
        "rate_limiter_active": FastAPILimiter.redis is not None,
    }
    return details
