"""Per-user throttling for hold requests, built on ``limits``.

Counters live in Redis when it is reachable so every worker shares them;
otherwise they stay in process memory.
"""
from fastapi import Depends, HTTPException, status
from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage, Storage, storage_from_string
from limits.strategies import FixedWindowRateLimiter
from redis.exceptions import RedisError

from app.core.config import HOLD_RATE_LIMIT, HOLD_RATE_WINDOW_SECONDS, REDIS_URL
from app.core.dependencies import get_current_user
from app.core.logging_config import get_logger
from app.core.redis import get_redis_client

logger = get_logger()

HOLD_LIMIT = RateLimitItemPerSecond(HOLD_RATE_LIMIT, HOLD_RATE_WINDOW_SECONDS, namespace="hold")

_memory_storage = MemoryStorage()
_redis_storage = None


def get_rate_limit_storage() -> Storage:
    global _redis_storage

    if get_redis_client() is None:
        return _memory_storage
    if _redis_storage is None:
        _redis_storage = storage_from_string(REDIS_URL)
    return _redis_storage


def hold_rate_limit(
    user=Depends(get_current_user),
    storage: Storage = Depends(get_rate_limit_storage),
):
    limiter = FixedWindowRateLimiter(storage)
    try:
        allowed = limiter.hit(HOLD_LIMIT, str(user.id))
    except RedisError as e:
        # fail open when the store is unreachable
        logger.warning(f"Rate limiter unavailable: {e}")
        return user

    if not allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many requests. Please try again later.",
        )
    return user
