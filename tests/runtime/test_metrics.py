from __future__ import annotations

import pytest

from stylecore.runtime import InMemoryCoreMetrics, NoOpCoreMetrics, PrometheusCoreMetrics


def test_in_memory_metrics_accumulate_by_name():
    metrics = InMemoryCoreMetrics()
    metrics.incr("cache.hit")
    metrics.incr("cache.hit", 2)
    NoOpCoreMetrics().incr("cache.hit")

    assert metrics.counters["cache.hit"] == 3


def test_prometheus_metrics_export_namespaced_counters():
    prometheus_client = pytest.importorskip("prometheus_client")
    registry = prometheus_client.CollectorRegistry()
    metrics = PrometheusCoreMetrics(registry=registry)

    metrics.incr("cache.hit")
    metrics.incr("cache.hit", 2)
    metrics.incr("provider.failure", tags={"candidate": "primary"})
    metrics.incr("provider.failure", tags={"candidate": "backup"})
    metrics.incr("provider.failure", tags={"candidate": "primary"})

    assert registry.get_sample_value("stylecore_cache_hit_total") == 3
    assert (
        registry.get_sample_value(
            "stylecore_provider_failure_total", {"candidate": "primary"}
        )
        == 2
    )
    assert (
        registry.get_sample_value(
            "stylecore_provider_failure_total", {"candidate": "backup"}
        )
        == 1
    )


def test_prometheus_metrics_honour_custom_namespace():
    prometheus_client = pytest.importorskip("prometheus_client")
    registry = prometheus_client.CollectorRegistry()
    PrometheusCoreMetrics(namespace="looks", registry=registry).incr("rate_limited")

    assert registry.get_sample_value("looks_rate_limited_total") == 1
