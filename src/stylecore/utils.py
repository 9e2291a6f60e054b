"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: utils.py.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any


def backoff_delay_ms(attempt: int, base_ms: int, cap_ms: int) -> int:
    """Exponential backoff delay for zero-based `attempt`, capped at `cap_ms`."""
    if base_ms <= 0:
        return 0
    delay = base_ms * (2 ** max(0, attempt))
    return int(min(delay, cap_ms)) if cap_ms > 0 else int(delay)


def stable_digest(payload: Any) -> str:
    """Return a sha256 digest of a JSON-normalized payload."""
    normalized = json.dumps(payload, ensure_ascii=True, sort_keys=True, default=str)
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()
