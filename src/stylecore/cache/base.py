"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/base.py.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(slots=True)
class CacheEntry:
    """One cached value with expiry and recency metadata."""

    key: str
    value: Any
    expires_at_s: float
    last_accessed_s: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at_s


class ResponseCacheBackend(Protocol):
    """Protocol implemented by cache backends used by the orchestrator."""

    backend_id: str

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, *, ttl_s: float | None = None) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def invalidate(self, key_or_prefix: str) -> int: ...
