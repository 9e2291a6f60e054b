"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Ordering helper for writes to the store a cache fronts.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .base import ResponseCacheBackend

T = TypeVar("T")

logger = logging.getLogger("stylecore.cache")


async def write_then_invalidate(
    cache: ResponseCacheBackend,
    key_or_prefix: str,
    write: Callable[[], Awaitable[T]],
) -> T:
    """
    Run a backing-store write and invalidate its cache entries before returning.

    The caller only sees the write acknowledged after the stale entries are
    gone, so no reader that starts after this coroutine returns can observe
    the old cached value next to the new stored value. The cache is
    invalidated even when the write fails, since a partial write may already
    be visible in the store.
    """
    try:
        result = await write()
    finally:
        removed = await cache.invalidate(key_or_prefix)
        logger.debug("Write invalidated %d cache entries under %s", removed, key_or_prefix)
    return result
