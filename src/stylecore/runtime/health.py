"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/health.py.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable


class CandidateHealth:
    """
    Shared availability table for provider candidates.

    A permanent failure (bad credentials, exhausted quota) parks the
    candidate for `cooldown_s`; cascades sharing this table skip it until
    the cooldown elapses. A cooldown of zero disables parking.
    """

    def __init__(
        self,
        *,
        cooldown_s: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.cooldown_s = cooldown_s
        self._clock = clock
        self._parked_until: dict[str, float] = {}
        self._lock = asyncio.Lock()

    async def is_available(self, name: str) -> bool:
        async with self._lock:
            until = self._parked_until.get(name)
            if until is None:
                return True
            if self._clock() >= until:
                del self._parked_until[name]
                return True
            return False

    async def record_permanent_failure(self, name: str) -> None:
        if self.cooldown_s <= 0:
            return
        async with self._lock:
            self._parked_until[name] = self._clock() + self.cooldown_s

    async def record_success(self, name: str) -> None:
        async with self._lock:
            self._parked_until.pop(name, None)

    def parked(self) -> list[str]:
        """Names currently parked, without expiring them."""
        now = self._clock()
        return sorted(name for name, until in self._parked_until.items() if until > now)
