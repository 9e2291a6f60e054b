"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

stylecore: caching, rate limiting, provider fallback, palette extraction and
diversity scoring for outfit recommendation services.
"""

from .cache import (
    InMemoryResponseCache,
    RedisResponseCache,
    TTLClass,
    TypedResponseCache,
    build_cache_key,
    content_hash,
    create_response_cache,
    write_then_invalidate,
)
from .colors import (
    ExtractionConfig,
    InsufficientSignal,
    Palette,
    PaletteColor,
    extract_palette,
    extract_palette_from_image,
)
from .diversity import DiversityConfig, DiversityReport, DiversityScorer, ResultSummary
from .errors import (
    CacheBackendError,
    ConfigurationError,
    PermanentProviderError,
    ProviderError,
    ProviderExhaustedError,
    ProviderTimeoutError,
    RateLimitedError,
    StyleCoreError,
    TransientProviderError,
)
from .orchestrator import RecommendationOrchestrator
from .runtime import (
    BackgroundTaskGroup,
    CandidateHealth,
    FixedWindowRateLimiter,
    ProviderCandidate,
    ProviderCascade,
    RedisRateLimiter,
)
from .settings import StyleCoreSettings, configure_logging
from .types import GeneratedLook, Recommendation, RecommendationRequest, StyledLook

__all__ = [
    "InMemoryResponseCache",
    "RedisResponseCache",
    "TypedResponseCache",
    "TTLClass",
    "build_cache_key",
    "content_hash",
    "create_response_cache",
    "write_then_invalidate",
    "ExtractionConfig",
    "InsufficientSignal",
    "Palette",
    "PaletteColor",
    "extract_palette",
    "extract_palette_from_image",
    "DiversityConfig",
    "DiversityReport",
    "DiversityScorer",
    "ResultSummary",
    "StyleCoreError",
    "ConfigurationError",
    "CacheBackendError",
    "RateLimitedError",
    "ProviderError",
    "TransientProviderError",
    "ProviderTimeoutError",
    "PermanentProviderError",
    "ProviderExhaustedError",
    "RecommendationOrchestrator",
    "BackgroundTaskGroup",
    "CandidateHealth",
    "FixedWindowRateLimiter",
    "RedisRateLimiter",
    "ProviderCandidate",
    "ProviderCascade",
    "StyleCoreSettings",
    "configure_logging",
    "GeneratedLook",
    "Recommendation",
    "RecommendationRequest",
    "StyledLook",
]
