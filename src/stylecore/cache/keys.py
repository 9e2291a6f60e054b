"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Cache key construction helpers and TTL classes.
"""

from __future__ import annotations

import hashlib
from enum import IntEnum
from typing import Any

from ..utils import stable_digest


class TTLClass(IntEnum):
    """Caller-selected TTL classes, in seconds."""

    SHORT = 600
    MEDIUM = 3600
    LONG = 86400


def content_hash(data: bytes) -> str:
    """Return the sha256 hex digest of raw content (e.g. uploaded image bytes)."""
    return hashlib.sha256(data).hexdigest()


def _normalize_param(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (str, int, float)):
        text = str(value).strip().lower()
        return text.replace(":", "_") or "-"
    if isinstance(value, (list, tuple, set, frozenset)):
        items = sorted(_normalize_param(item) for item in value)
        return ",".join(items) or "-"
    return stable_digest(value)[:16]


def build_cache_key(namespace: str, content_digest: str, *params: Any) -> str:
    """
    Build an opaque, deterministic key shaped `namespace:hash:p1:p2`.

    Parameters are lower-cased and `:`-escaped; collections are sorted so
    that `["navy", "cream"]` and `["cream", "navy"]` share one key, and
    mappings collapse to a short digest.
    """
    if not namespace.strip():
        raise ValueError("namespace must be non-empty")
    parts = [namespace.strip().lower(), content_digest.strip().lower()]
    parts.extend(_normalize_param(param) for param in params)
    return ":".join(parts)
