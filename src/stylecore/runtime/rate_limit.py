"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/rate_limit.py.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """Outcome of one admission check."""

    allowed: bool
    limit: int
    remaining: int
    reset_at: float


@dataclass(slots=True)
class _Bucket:
    """Data type for bucket."""

    count: int
    window_start_s: float


class RateLimiter(Protocol):
    """Protocol implemented by request-rate limiters."""

    async def allow(self, key: str) -> bool: ...

    async def check(self, key: str) -> RateLimitDecision: ...


class FixedWindowRateLimiter(RateLimiter):
    """
    Concurrency-safe fixed-window counter keyed by caller identity.

    Window reset, the admit decision and the increment happen in one
    critical section with no await inside it, so concurrent callers that
    share a key can never both be admitted past the limit.
    """

    def __init__(
        self,
        *,
        limit: int = 20,
        window_s: float = 60.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_s <= 0:
            raise ValueError("window_s must be > 0")
        self.limit = limit
        self.window_s = window_s
        self._clock = clock
        self._rows: dict[str, _Bucket] = {}
        self._lock = asyncio.Lock()

    async def allow(self, key: str) -> bool:
        return (await self.check(key)).allowed

    async def check(self, key: str) -> RateLimitDecision:
        async with self._lock:
            now = self._clock()
            bucket = self._rows.get(key)
            if bucket is None or now >= bucket.window_start_s + self.window_s:
                bucket = _Bucket(count=0, window_start_s=now)
                self._rows[key] = bucket

            reset_at = bucket.window_start_s + self.window_s
            if bucket.count >= self.limit:
                return RateLimitDecision(
                    allowed=False, limit=self.limit, remaining=0, reset_at=reset_at
                )

            bucket.count += 1
            return RateLimitDecision(
                allowed=True,
                limit=self.limit,
                remaining=self.limit - bucket.count,
                reset_at=reset_at,
            )

    async def sweep(self) -> int:
        """Drop buckets whose window has ended; returns the number removed."""
        async with self._lock:
            now = self._clock()
            stale = [
                key
                for key, bucket in self._rows.items()
                if now >= bucket.window_start_s + self.window_s
            ]
            for key in stale:
                del self._rows[key]
        return len(stale)

    def size(self) -> int:
        return len(self._rows)


_ADMIT_SCRIPT = """
local count = redis.call('INCR', KEYS[1])
if count == 1 then
    redis.call('PEXPIRE', KEYS[1], ARGV[2])
end
if count > tonumber(ARGV[1]) then
    redis.call('DECR', KEYS[1])
    return {0, count - 1, redis.call('PTTL', KEYS[1])}
end
return {1, count, redis.call('PTTL', KEYS[1])}
"""


class RedisRateLimiter(RateLimiter):
    """
    Fixed-window limiter whose state lives in Redis for multi-process use.

    The admit decision and the increment run inside one Lua script, which
    Redis executes atomically; a rejected call leaves the counter unchanged.

    Requires ``redis.asyncio`` (``pip install redis``).

    Args:
        redis: An ``redis.asyncio.Redis`` client instance.
        limit: Requests admitted per window and key.
        window_s: Window length in seconds.
        prefix: Key prefix for namespacing.
    """

    def __init__(
        self,
        redis: Any,
        *,
        limit: int = 20,
        window_s: float = 60.0,
        prefix: str = "stylecore:ratelimit",
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_s <= 0:
            raise ValueError("window_s must be > 0")
        self._redis = redis
        self.limit = limit
        self.window_s = window_s
        self._prefix = prefix

    async def allow(self, key: str) -> bool:
        return (await self.check(key)).allowed

    async def check(self, key: str) -> RateLimitDecision:
        window_ms = max(1, int(self.window_s * 1000))
        admitted, count, ttl_ms = await self._redis.eval(
            _ADMIT_SCRIPT,
            1,
            f"{self._prefix}:{key}",
            self.limit,
            window_ms,
        )
        ttl_ms = int(ttl_ms) if int(ttl_ms) > 0 else window_ms
        return RateLimitDecision(
            allowed=bool(int(admitted)),
            limit=self.limit,
            remaining=max(0, self.limit - int(count)),
            reset_at=time.time() + ttl_ms / 1000.0,
        )
