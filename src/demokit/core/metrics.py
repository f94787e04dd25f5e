"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Metrics sinks for dispatcher instrumentation.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol


class DispatchMetrics(Protocol):
    """Minimal metrics interface for dispatcher instrumentation."""

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        """Increment a counter metric."""


class NoOpDispatchMetrics:
    """Default metrics sink when no metrics backend is provided."""

    def incr(
        self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None
    ) -> None:
        _ = name
        _ = value
        _ = tags


class PrometheusDispatchMetrics:
    """
    Prometheus-backed dispatch metrics adapter.

    Requires `prometheus_client` package. The dispatcher's counters are
    declared up front with fixed label sets; pass a dedicated ``registry``
    when several nodes share one process so counter names do not collide.
    """

    COUNTERS: dict[str, tuple[str, tuple[str, ...]]] = {
        "dispatcher_events_received_total": ("Events handed to the dispatcher", ()),
        "dispatcher_events_ignored_total": (
            "Events discarded by addressing or lookup",
            ("reason",),
        ),
        "dispatcher_chains_started_total": ("Action chains started", ("event",)),
    }

    def __init__(self, *, namespace: str = "demokit", registry: object | None = None) -> None:
        try:
            from prometheus_client import REGISTRY, Counter
        except ModuleNotFoundError as exc:  # pragma: no cover
            raise RuntimeError(
                "PrometheusDispatchMetrics requires `prometheus_client` to be installed."
            ) from exc

        target = registry if registry is not None else REGISTRY
        self._counters = {
            name: Counter(
                name=name,
                documentation=documentation,
                namespace=namespace,
                labelnames=label_names,
                registry=target,
            )
            for name, (documentation, label_names) in self.COUNTERS.items()
        }

    def incr(self, name: str, value: int = 1, *, tags: Mapping[str, str] | None = None) -> None:
        counter = self._counters.get(name)
        if counter is None:
            raise KeyError(f"Unknown dispatch metric: {name}")
        _, label_names = self.COUNTERS[name]
        if label_names:
            counter.labels(**{label: str((tags or {})[label]) for label in label_names}).inc(value)
        else:
            counter.inc(value)
