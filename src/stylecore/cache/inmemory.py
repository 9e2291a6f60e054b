"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/inmemory.py.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

from .base import CacheEntry, ResponseCacheBackend

logger = logging.getLogger("stylecore.cache")


class InMemoryResponseCache(ResponseCacheBackend):
    """
    Process-local TTL cache with strict LRU eviction by capacity.

    Entries live in an `OrderedDict` ordered from least to most recently
    accessed. Every mutation happens under one `asyncio.Lock`, and no
    critical section awaits, so each operation is atomic to other tasks.

    Args:
        capacity: Maximum number of live entries.
        default_ttl_s: TTL used when `set` is called without `ttl_s`.
        clock: Wall-clock source in seconds; injectable for tests.
    """

    backend_id = "inmemory"

    def __init__(
        self,
        *,
        capacity: int = 1000,
        default_ttl_s: float = 1800.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if default_ttl_s <= 0:
            raise ValueError("default_ttl_s must be > 0")
        self.capacity = capacity
        self.default_ttl_s = default_ttl_s
        self._clock = clock
        self._rows: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Any | None:
        async with self._lock:
            row = self._rows.get(key)
            if row is None:
                return None
            now = self._clock()
            if row.is_expired(now):
                del self._rows[key]
                return None
            row.last_accessed_s = now
            self._rows.move_to_end(key)
            return row.value

    async def set(self, key: str, value: Any, *, ttl_s: float | None = None) -> None:
        ttl = self.default_ttl_s if ttl_s is None else ttl_s
        if ttl <= 0:
            raise ValueError("ttl_s must be > 0")
        async with self._lock:
            now = self._clock()
            self._rows[key] = CacheEntry(
                key=key,
                value=value,
                expires_at_s=now + ttl,
                last_accessed_s=now,
            )
            self._rows.move_to_end(key)
            while len(self._rows) > self.capacity:
                evicted, _ = self._rows.popitem(last=False)
                logger.debug("Evicted least recently used cache key %s", evicted)

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._rows.pop(key, None)

    async def invalidate(self, key_or_prefix: str) -> int:
        """Remove the exact key and every key starting with `key_or_prefix`."""
        async with self._lock:
            doomed = [key for key in self._rows if key.startswith(key_or_prefix)]
            for key in doomed:
                del self._rows[key]
        if doomed:
            logger.debug("Invalidated %d cache keys for %s", len(doomed), key_or_prefix)
        return len(doomed)

    async def sweep(self) -> int:
        """Purge every expired entry; returns the number removed."""
        async with self._lock:
            now = self._clock()
            dead = [key for key, row in self._rows.items() if row.is_expired(now)]
            for key in dead:
                del self._rows[key]
        return len(dead)

    async def clear(self) -> None:
        async with self._lock:
            self._rows.clear()

    def size(self) -> int:
        """Number of stored entries, including expired ones not yet purged."""
        return len(self._rows)
