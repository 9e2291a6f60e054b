"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Factory helpers for selecting cache backends from settings.
"""

from __future__ import annotations

from typing import Any

from ..errors import CacheBackendError
from ..settings import StyleCoreSettings
from .base import ResponseCacheBackend
from .inmemory import InMemoryResponseCache


def create_response_cache(
    settings: StyleCoreSettings,
    *,
    redis_client: Any | None = None,
) -> ResponseCacheBackend:
    """
    Create a cache backend from `settings.cache_backend`.

    Backends:
    - `inmemory` (default)
    - `redis` (uses `redis_client` when supplied, else `settings.cache_redis_url`)
    """
    backend = settings.cache_backend.strip().lower()
    if backend in ("mem", "memory", "inmemory", "in_memory"):
        return InMemoryResponseCache(
            capacity=settings.cache_capacity,
            default_ttl_s=settings.cache_default_ttl_s,
        )

    if backend == "redis":
        from .redis import RedisResponseCache

        client = redis_client
        if client is None:
            if not settings.cache_redis_url:
                raise CacheBackendError(
                    "Redis cache backend requires STYLECORE_CACHE_REDIS_URL"
                )
            try:
                import redis.asyncio as redis
            except ModuleNotFoundError as exc:  # pragma: no cover
                raise CacheBackendError(
                    "Redis cache backend requires `redis` to be installed."
                ) from exc
            client = redis.Redis.from_url(settings.cache_redis_url)

        return RedisResponseCache(
            client,
            prefix=settings.cache_redis_prefix,
            default_ttl_s=settings.cache_default_ttl_s,
        )

    raise CacheBackendError(f"Unknown cache backend '{settings.cache_backend}'")
