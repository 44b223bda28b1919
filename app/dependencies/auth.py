from uuid import UUID

from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import httpx
from app.config import settings
from app.utils.retry import retry_api
from structlog import get_logger
from pybreaker import CircuitBreaker, CircuitBreakerError

logger = get_logger(__name__)
security = HTTPBearer()
breaker = CircuitBreaker(fail_max=3, reset_timeout=60)


@retry_api(tries=3, delay=0.5, backoff=2, exceptions=(httpx.RequestError,))
async def verify_token(token: str) -> httpx.Response:
    """Ask the user-management service who owns ``token``."""
    with breaker.calling():
        async with httpx.AsyncClient(timeout=10.0) as client:
            return await client.get(
                f"{settings.USER_MANAGEMENT_URL}/auth/verify",
                headers={"Authorization": f"Bearer {token}"},
            )


async def get_current_user(credentials: HTTPAuthorizationCredentials = Security(security)) -> dict:
    try:
        response = await verify_token(credentials.credentials)
    except CircuitBreakerError:
        logger.error("User management circuit open")
        raise HTTPException(status_code=503, detail="Authentication service unavailable")
    except httpx.RequestError as e:
        logger.error("User management unreachable", error=str(e))
        raise HTTPException(status_code=503, detail="Authentication service unavailable")
    if response.status_code != 200:
        logger.error("Token verification failed", status_code=response.status_code)
        raise HTTPException(status_code=401, detail="Invalid token")
    return response.json()


async def get_current_user_id(user: dict = Depends(get_current_user)) -> UUID:
    raw = user.get("user_id") or user.get("id")
    try:
        return UUID(str(raw))
    except (TypeError, ValueError):
        logger.error("Verified token carries no usable user id", payload_keys=sorted(user.keys()))
        raise HTTPException(status_code=401, detail="Invalid token")
