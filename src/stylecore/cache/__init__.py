"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/__init__.py.
"""

from .base import CacheEntry, ResponseCacheBackend
from .consistency import write_then_invalidate
from .factory import create_response_cache
from .inmemory import InMemoryResponseCache
from .keys import TTLClass, build_cache_key, content_hash
from .redis import RedisResponseCache
from .typed import TypedResponseCache

__all__ = [
    "CacheEntry",
    "ResponseCacheBackend",
    "InMemoryResponseCache",
    "RedisResponseCache",
    "TypedResponseCache",
    "TTLClass",
    "build_cache_key",
    "content_hash",
    "create_response_cache",
    "write_then_invalidate",
]
