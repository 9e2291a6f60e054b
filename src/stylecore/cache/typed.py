"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Typed view over a payload-agnostic cache backend.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from .base import ResponseCacheBackend

T = TypeVar("T")

logger = logging.getLogger("stylecore.cache")


class TypedResponseCache(Generic[T]):
    """
    Serialize values of type `T` into a backend and validate them on read.

    The backend only ever sees JSON-compatible data, so the same typed view
    works over the in-memory and Redis backends. A stored payload that no
    longer validates (for example after a schema change) is treated as a
    miss and removed.

    Usage::

        looks = TypedResponseCache(backend, list[LookModel])
        await looks.set("analysis:abc:casual", value, ttl_s=TTLClass.LONG)
    """

    def __init__(self, backend: ResponseCacheBackend, payload_type: Any) -> None:
        self.backend = backend
        self._adapter: TypeAdapter[T] = TypeAdapter(payload_type)

    @property
    def backend_id(self) -> str:
        return self.backend.backend_id

    async def get(self, key: str) -> T | None:
        raw = await self.backend.get(key)
        if raw is None:
            return None
        try:
            return self._adapter.validate_python(raw)
        except ValidationError:
            logger.warning("Cached payload for %s failed validation; discarding", key)
            await self.backend.delete(key)
            return None

    async def set(self, key: str, value: T, *, ttl_s: float | None = None) -> None:
        await self.backend.set(
            key,
            self._adapter.dump_python(value, mode="json"),
            ttl_s=ttl_s,
        )

    async def delete(self, key: str) -> None:
        await self.backend.delete(key)

    async def invalidate(self, key_or_prefix: str) -> int:
        return await self.backend.invalidate(key_or_prefix)
