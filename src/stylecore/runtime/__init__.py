"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/__init__.py.
"""

from .background import BackgroundTaskGroup, ErrorReporter, LoggingErrorReporter
from .cascade import (
    CandidateFailure,
    CascadeResult,
    ProviderCandidate,
    ProviderCascade,
)
from .coalescing import RequestCoalescer
from .health import CandidateHealth
from .metrics import (
    CoreMetrics,
    InMemoryCoreMetrics,
    NoOpCoreMetrics,
    PrometheusCoreMetrics,
)
from .rate_limit import (
    FixedWindowRateLimiter,
    RateLimitDecision,
    RateLimiter,
    RedisRateLimiter,
)
from .retry import (
    CallSucceeded,
    PermanentFailure,
    TransientFailure,
    classify_failure,
)
from .timeouts import await_with_timeout

__all__ = [
    "BackgroundTaskGroup",
    "ErrorReporter",
    "LoggingErrorReporter",
    "CandidateFailure",
    "CascadeResult",
    "ProviderCandidate",
    "ProviderCascade",
    "CandidateHealth",
    "RequestCoalescer",
    "CoreMetrics",
    "NoOpCoreMetrics",
    "InMemoryCoreMetrics",
    "PrometheusCoreMetrics",
    "RateLimiter",
    "RateLimitDecision",
    "FixedWindowRateLimiter",
    "RedisRateLimiter",
    "CallSucceeded",
    "TransientFailure",
    "PermanentFailure",
    "classify_failure",
    "await_with_timeout",
]
