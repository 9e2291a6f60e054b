"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Core settings and explicit environment loading.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from .errors import ConfigurationError


def _env_first(*names: str, default: str | None = None) -> str | None:
    """
    Return the first non-empty environment variable in `names`.

    Args:
        *names: Environment variable names to check in order.
        default: Value returned if no non-empty variable is found.
    """
    for name in names:
        raw = os.getenv(name)
        if raw is None:
            continue
        value = raw.strip()
        if value:
            return value
    return default


def _env_int(name: str, default: int) -> int:
    raw = _env_first(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _env_float(name: str, default: float) -> float:
    raw = _env_first(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def _env_sweep_interval() -> float | None:
    raw = _env_first("STYLECORE_SWEEP_INTERVAL_S")
    if raw is not None and raw.lower() in {"off", "none", "0"}:
        return None
    return _env_float("STYLECORE_SWEEP_INTERVAL_S", 300.0)


@dataclass(frozen=True, slots=True)
class StyleCoreSettings:
    """Explicit settings used to wire cache, limiter and cascade instances."""

    cache_backend: str = "inmemory"
    cache_capacity: int = 1000
    cache_default_ttl_s: float = 1800.0
    cache_redis_url: str | None = None
    cache_redis_prefix: str = "stylecore:cache"

    rate_limit_requests: int = 20
    rate_limit_window_s: float = 60.0

    provider_timeout_s: float = 30.0
    provider_max_attempts: int = 4
    provider_backoff_max_ms: int = 32000
    provider_cooldown_s: float = 0.0

    palette_min_delta_e: float = 15.0
    palette_max_candidates: int = 10

    sweep_interval_s: float | None = 300.0

    log_level: str = "INFO"

    @staticmethod
    def from_env() -> "StyleCoreSettings":
        """Load settings from `STYLECORE_*` environment variables."""
        settings = StyleCoreSettings(
            cache_backend=(
                _env_first("STYLECORE_CACHE_BACKEND", default="inmemory") or "inmemory"
            ).lower(),
            cache_capacity=_env_int("STYLECORE_CACHE_CAPACITY", 1000),
            cache_default_ttl_s=_env_float("STYLECORE_CACHE_TTL_S", 1800.0),
            cache_redis_url=_env_first("STYLECORE_CACHE_REDIS_URL", "STYLECORE_REDIS_URL"),
            cache_redis_prefix=_env_first(
                "STYLECORE_CACHE_REDIS_PREFIX", default="stylecore:cache"
            )
            or "stylecore:cache",
            rate_limit_requests=_env_int("STYLECORE_RATE_LIMIT_REQUESTS", 20),
            rate_limit_window_s=_env_float("STYLECORE_RATE_LIMIT_WINDOW_S", 60.0),
            provider_timeout_s=_env_float("STYLECORE_PROVIDER_TIMEOUT_S", 30.0),
            provider_max_attempts=_env_int("STYLECORE_PROVIDER_MAX_ATTEMPTS", 4),
            provider_backoff_max_ms=_env_int("STYLECORE_PROVIDER_BACKOFF_MAX_MS", 32000),
            provider_cooldown_s=_env_float("STYLECORE_PROVIDER_COOLDOWN_S", 0.0),
            palette_min_delta_e=_env_float("STYLECORE_PALETTE_MIN_DELTA_E", 15.0),
            palette_max_candidates=_env_int("STYLECORE_PALETTE_MAX_CANDIDATES", 10),
            sweep_interval_s=_env_sweep_interval(),
            log_level=(_env_first("STYLECORE_LOG_LEVEL", default="INFO") or "INFO").upper(),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        """Raise `ConfigurationError` for values no component can run with."""
        if self.cache_capacity < 1:
            raise ConfigurationError("cache_capacity must be >= 1")
        if self.cache_default_ttl_s <= 0:
            raise ConfigurationError("cache_default_ttl_s must be > 0")
        if self.rate_limit_requests < 1:
            raise ConfigurationError("rate_limit_requests must be >= 1")
        if self.rate_limit_window_s <= 0:
            raise ConfigurationError("rate_limit_window_s must be > 0")
        if self.provider_max_attempts < 1:
            raise ConfigurationError("provider_max_attempts must be >= 1")
        if self.sweep_interval_s is not None and self.sweep_interval_s <= 0:
            raise ConfigurationError("sweep_interval_s must be > 0")
        if self.log_level not in logging.getLevelNamesMapping():
            raise ConfigurationError(f"Unknown log level '{self.log_level}'")


def configure_logging(level: str | int = "INFO") -> None:
    """Install a basic stream handler for applications and scripts."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
