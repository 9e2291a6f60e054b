"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Metrics interface and adapters for orchestrator instrumentation.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Protocol

_INVALID_METRIC_CHARS = re.compile(r"[^a-zA-Z0-9_]")


class CoreMetrics(Protocol):
    """Minimal metrics interface for orchestrator instrumentation."""

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        """Increment a counter metric."""


class NoOpCoreMetrics:
    """Default metrics sink when no metrics backend is provided."""

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        _ = name
        _ = value
        _ = tags


class InMemoryCoreMetrics:
    """Counter table for tests and local debugging."""

    def __init__(self) -> None:
        self.counters: dict[str, int] = {}

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        _ = tags
        self.counters[name] = self.counters.get(name, 0) + value


class PrometheusCoreMetrics:
    """
    Prometheus-backed counter adapter.

    Dotted names such as `cache.hit` become `<namespace>_cache_hit_total`.
    Requires `prometheus_client` package (`pip install stylecore[prometheus]`).
    """

    def __init__(self, *, namespace: str = "stylecore", registry: Any | None = None) -> None:
        try:
            from prometheus_client import REGISTRY, Counter
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise RuntimeError(
                "PrometheusCoreMetrics requires `prometheus_client` to be installed."
            ) from exc

        self._Counter = Counter
        self._namespace = namespace
        self._registry = registry if registry is not None else REGISTRY
        self._counters: dict[str, Any] = {}

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        metric = _INVALID_METRIC_CHARS.sub("_", name)
        label_names = tuple(sorted((tags or {}).keys()))
        key = f"{metric}|{','.join(label_names)}"
        counter = self._counters.get(key)
        if counter is None:
            counter = self._Counter(
                name=metric,
                documentation=f"stylecore metric {name}",
                namespace=self._namespace,
                labelnames=label_names,
                registry=self._registry,
            )
            self._counters[key] = counter

        if label_names:
            label_values = [str((tags or {})[label]) for label in label_names]
            counter.labels(*label_values).inc(value)
        else:
            counter.inc(value)
