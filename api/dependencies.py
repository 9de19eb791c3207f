"""FastAPI dependencies for dependency injection."""

import logging
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import redis.asyncio as redis
from redis.asyncio import Redis

from api.schemas.common import PaginationParams
from core.config import settings
from core.quotas import MonthlyQuotaCounter
from core.security import AuthenticatedUser, TokenError, TokenExpiredError, decode_access_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

_redis_client: Optional[Redis] = None


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthenticatedUser:
    """Require a valid bearer token and return its identity."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return decode_access_token(credentials.credentials)
    except TokenExpiredError:
        detail = "Expired authentication token"
    except TokenError:
        detail = "Invalid authentication token"

    logger.warning("Rejected bearer token", extra={"reason": detail})
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_candidate(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """Require user to be a candidate."""
    if not current_user.is_candidate:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Candidate access required",
        )
    return current_user


async def require_vendor(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> AuthenticatedUser:
    """Require user to be a vendor or admin."""
    if current_user.user_type not in ("vendor", "admin"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Vendor access required",
        )
    return current_user


def get_pagination_params(page: int = 1, page_size: int = 20) -> PaginationParams:
    """
    Get pagination parameters.

    Page size is capped at 100 rather than rejected.
    """
    if page < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Page must be >= 1",
        )
    if page_size < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Page size must be >= 1",
        )
    return PaginationParams(page=page, page_size=min(page_size, 100))


async def get_redis() -> Redis:
    """Shared Redis client, created lazily."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            str(settings.redis_url),
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
    return _redis_client


async def close_redis() -> None:
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


async def get_quota_counter(redis_client: Redis = Depends(get_redis)) -> MonthlyQuotaCounter:
    return MonthlyQuotaCounter(redis_client)
