"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/redis.py.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from .base import ResponseCacheBackend

logger = logging.getLogger("stylecore.cache.redis")

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


class RedisResponseCache(ResponseCacheBackend):
    """
    Redis-backed cache backend for multi-process deployments.

    Values must be JSON-serializable; wrap the backend in
    `TypedResponseCache` to store richer payloads. Expiry is delegated to
    Redis (`SET ... PX`, millisecond precision), and capacity is governed
    by the server's own `maxmemory-policy` rather than by this class.

    Requires ``redis.asyncio`` (``pip install redis``).

    Args:
        redis: An ``redis.asyncio.Redis`` client instance.
        prefix: Key prefix for namespacing.
        default_ttl_s: TTL used when `set` is called without `ttl_s`.
    """

    backend_id = "redis"

    def __init__(
        self,
        redis: Any,
        *,
        prefix: str = "stylecore:cache",
        default_ttl_s: float = 1800.0,
    ) -> None:
        self._redis = redis
        self._prefix = prefix
        self.default_ttl_s = default_ttl_s

    def _key(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    async def get(self, key: str) -> Any | None:
        blob = await self._redis.get(self._key(key))
        if blob is None:
            return None
        try:
            return json.loads(blob)
        except (TypeError, ValueError):
            logger.warning("Dropping undecodable cache payload for %s", key)
            await self._redis.delete(self._key(key))
            return None

    async def set(self, key: str, value: Any, *, ttl_s: float | None = None) -> None:
        ttl = self.default_ttl_s if ttl_s is None else ttl_s
        payload = json.dumps(value, ensure_ascii=True)
        await self._redis.set(self._key(key), payload, px=max(1, round(ttl * 1000)))

    async def delete(self, key: str) -> None:
        await self._redis.delete(self._key(key))

    async def invalidate(self, key_or_prefix: str) -> int:
        """Delete the exact key and every key sharing the prefix."""
        pattern = _GLOB_SPECIAL.sub(r"\\\1", self._key(key_or_prefix)) + "*"
        doomed = [name async for name in self._redis.scan_iter(match=pattern)]
        if not doomed:
            return 0
        return int(await self._redis.delete(*doomed))
