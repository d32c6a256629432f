"""Async Redis client cache."""

from __future__ import annotations

from redis.asyncio import Redis

from .config import ServiceSettings


_CACHE: dict[str, Redis] = {}


def get_redis_client(redis_url: str) -> Redis:
    """Return a cached Redis client for the given URL."""

    if redis_url not in _CACHE:
        _CACHE[redis_url] = Redis.from_url(redis_url, decode_responses=True)
    return _CACHE[redis_url]


def resolve_redis(settings: ServiceSettings) -> Redis | None:
    """Return a Redis client, or None when the cart lock runs in-process."""

    if not settings.redis_url:
        return None
    return get_redis_client(settings.redis_url)


async def close_redis_connections() -> None:
    """Close all cached Redis connections (used on shutdown and in tests)."""

    for redis in _CACHE.values():
        await redis.aclose()
    _CACHE.clear()
