"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Error taxonomy shared by cache, limiter, cascade and orchestrator code.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .runtime.cascade import CandidateFailure


class StyleCoreError(Exception):
    """Base error for all stylecore failures."""


class ConfigurationError(StyleCoreError):
    """Raised when settings or component wiring are invalid."""


class CacheBackendError(StyleCoreError):
    """Raised when a cache backend cannot be resolved or used."""


class RateLimitedError(StyleCoreError):
    """Raised when a caller exhausted its request budget for the window."""

    def __init__(self, key: str, *, reset_at: float, limit: int) -> None:
        super().__init__(f"Rate limit of {limit} requests exceeded for '{key}'")
        self.key = key
        self.reset_at = reset_at
        self.limit = limit


class ProviderError(StyleCoreError):
    """Base class for failures raised by one provider call."""


class TransientProviderError(ProviderError):
    """Retryable provider failure (overload, throttling, 5xx)."""


class ProviderTimeoutError(TransientProviderError):
    """Provider call exceeded its time budget."""


class PermanentProviderError(ProviderError):
    """Failure that will not heal by retrying the same candidate (auth, quota)."""


class ProviderExhaustedError(StyleCoreError):
    """Every provider candidate used up its retry budget."""

    def __init__(self, failures: Sequence[CandidateFailure]) -> None:
        self.failures = tuple(failures)
        names = ", ".join(f"{row.candidate}: {row.reason}" for row in self.failures)
        super().__init__(f"All provider candidates failed ({names or 'no candidates'})")
