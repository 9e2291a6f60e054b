from __future__ import annotations

import pytest

from stylecore.errors import ConfigurationError
from stylecore.settings import StyleCoreSettings


def test_defaults_match_documented_values():
    settings = StyleCoreSettings()
    assert settings.cache_capacity == 1000
    assert settings.rate_limit_requests == 20
    assert settings.provider_backoff_max_ms == 32000
    assert settings.palette_min_delta_e == 15.0


def test_from_env_reads_stylecore_variables(monkeypatch):
    monkeypatch.setenv("STYLECORE_CACHE_BACKEND", "Redis")
    monkeypatch.setenv("STYLECORE_REDIS_URL", "redis://localhost:6379/0")
    monkeypatch.setenv("STYLECORE_CACHE_CAPACITY", "250")
    monkeypatch.setenv("STYLECORE_RATE_LIMIT_REQUESTS", " 5 ")
    monkeypatch.setenv("STYLECORE_PROVIDER_TIMEOUT_S", "12.5")
    monkeypatch.setenv("STYLECORE_LOG_LEVEL", "debug")

    settings = StyleCoreSettings.from_env()

    assert settings.cache_backend == "redis"
    assert settings.cache_redis_url == "redis://localhost:6379/0"
    assert settings.cache_capacity == 250
    assert settings.rate_limit_requests == 5
    assert settings.provider_timeout_s == 12.5
    assert settings.log_level == "DEBUG"


def test_from_env_rejects_bad_numbers(monkeypatch):
    monkeypatch.setenv("STYLECORE_CACHE_CAPACITY", "lots")
    with pytest.raises(ConfigurationError, match="STYLECORE_CACHE_CAPACITY"):
        StyleCoreSettings.from_env()


def test_validate_rejects_unusable_values(monkeypatch):
    monkeypatch.setenv("STYLECORE_LOG_LEVEL", "chatty")
    with pytest.raises(ConfigurationError, match="log level"):
        StyleCoreSettings.from_env()

    with pytest.raises(ConfigurationError):
        StyleCoreSettings(rate_limit_window_s=0).validate()


def test_sweep_interval_can_be_tuned_or_disabled(monkeypatch):
    assert StyleCoreSettings().sweep_interval_s == 300.0

    monkeypatch.setenv("STYLECORE_SWEEP_INTERVAL_S", "45")
    assert StyleCoreSettings.from_env().sweep_interval_s == 45.0

    monkeypatch.setenv("STYLECORE_SWEEP_INTERVAL_S", "off")
    assert StyleCoreSettings.from_env().sweep_interval_s is None

    with pytest.raises(ConfigurationError, match="sweep_interval_s"):
        StyleCoreSettings(sweep_interval_s=-1).validate()
