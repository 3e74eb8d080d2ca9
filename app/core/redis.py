"""Shared Redis connection plus a small JSON cache.

The cache is advisory: it only fronts public apartment listings, never
availability or booking state, and every failure degrades to a cache miss.
"""
import json
import time

import redis
from redis.exceptions import RedisError

from app.core.config import CACHE_PREFIX, CACHE_TTL_SECONDS, REDIS_RETRY_SECONDS, REDIS_URL
from app.core.logging_config import get_logger

logger = get_logger()

_redis_client = None
_failed_at = None


def get_redis_client():
    global _redis_client, _failed_at

    if _redis_client is not None:
        return _redis_client

    if not REDIS_URL:
        return None

    # back off after a failed connect
    if _failed_at is not None and time.monotonic() - _failed_at < REDIS_RETRY_SECONDS:
        return None

    try:
        client = redis.Redis.from_url(
            REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        client.ping()
    except RedisError as e:
        _failed_at = time.monotonic()
        logger.warning(f"Redis unavailable, retrying in {REDIS_RETRY_SECONDS}s: {e}")
        return None

    _failed_at = None
    logger.info("Redis connected")
    _redis_client = client
    return _redis_client


def cache_key(name: str) -> str:
    return f"{CACHE_PREFIX}:{name}"


def get_cache(name: str):
    client = get_redis_client()
    if client is None:
        return None
    try:
        raw = client.get(cache_key(name))
    except RedisError as e:
        logger.warning(f"Cache read failed for {name}: {e}")
        return None
    return json.loads(raw) if raw else None


def set_cache(name: str, value, ttl: int = CACHE_TTL_SECONDS):
    client = get_redis_client()
    if client is None:
        return
    try:
        client.setex(cache_key(name), ttl, json.dumps(value, default=str))
    except RedisError as e:
        logger.warning(f"Cache write skipped for {name}: {e}")


def delete_cache(name: str):
    client = get_redis_client()
    if client is None:
        return
    try:
        client.delete(cache_key(name))
    except RedisError as e:
        logger.warning(f"Cache delete skipped for {name}: {e}")
