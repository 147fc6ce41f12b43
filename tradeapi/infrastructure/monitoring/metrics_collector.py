#!/usr/bin/env python3
"""
Metrics Collector with Prometheus Integration

This module provides the metrics recorder used across the service:
- Counters keyed by dotted name ("cache.hits", "http.requests.total")
- Timers keyed by dotted name, exported as latency histograms
- Prometheus text exposition for the /metrics endpoint

Architectural Decision: prometheus-client for industry-standard metrics
- Compatible with Grafana dashboards
- Histogram buckets for latency percentiles

Metrics are side-channel observability: every recording method swallows
its own failures so that a broken metric can never fail a request or
change what the cache returns.

Author: Senior Solution Architect
Date: 2026-10-19
"""

import re
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    Info,
    generate_latest,
)

from tradeapi.core.config.constants import DEFAULT_COUNTERS, DEFAULT_TIMERS, LATENCY_BUCKETS
from tradeapi.core.logging.logger import get_logger

logger = get_logger(__name__)

_INVALID_CHARS = re.compile(r"[^a-zA-Z0-9_]")


def to_prometheus_name(name: str) -> str:
    """
    Map a dotted metric name onto a valid Prometheus metric name.

    "cache.hits" -> "cache_hits"; "http.requests.total" -> "http_requests".
    A trailing "total" is dropped because prometheus_client appends
    "_total" to counters itself.
    """
    base = _INVALID_CHARS.sub("_", name).strip("_")
    if base.endswith("_total"):
        base = base[: -len("_total")]
    return base


class MetricsCollector:
    """
    Centralized metrics recorder.

    Usage:
        metrics = MetricsCollector()

        metrics.increment_counter("cache.hits")
        metrics.record_timer("http.request.duration", 0.012)

        with metrics.time_operation("cache.operation.duration"):
            ...

        output = metrics.get_prometheus_metrics()

    Each collector owns its own CollectorRegistry so that several
    instances (one per app, one per test) never clash over metric names.
    """

    def __init__(
        self,
        enabled: bool = True,
        registry: CollectorRegistry | None = None,
        app_info: dict[str, str] | None = None,
    ):
        self._enabled = enabled
        self._registry = registry or CollectorRegistry()
        self._counters: dict[str, Counter] = {}
        self._timers: dict[str, Histogram] = {}
        self._lock = threading.Lock()

        if not enabled:
            logger.info("Metrics collector disabled")
            return

        if app_info:
            Info("app", "Application information", registry=self._registry).info(app_info)

        for name, description in DEFAULT_COUNTERS.items():
            self._get_counter(name, description)
        for name, description in DEFAULT_TIMERS.items():
            self._get_timer(name, description)

        logger.info(
            "Metrics collector initialized",
            counters=len(self._counters),
            timers=len(self._timers),
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    # =========================================================================
    # Recording
    # =========================================================================

    def increment_counter(self, name: str, amount: float = 1.0) -> None:
        """Increment a counter, creating it on first use."""
        if not self._enabled:
            return

        try:
            self._get_counter(name, "Counter metric").inc(amount)
        except Exception as e:
            logger.warning("Failed to increment counter", metric=name, error=str(e))

    def record_timer(self, name: str, duration_seconds: float) -> None:
        """Record one observation of a timer, creating it on first use."""
        if not self._enabled:
            return

        try:
            self._get_timer(name, "Timer metric").observe(duration_seconds)
        except Exception as e:
            logger.warning("Failed to record timer", metric=name, error=str(e))

    @contextmanager
    def time_operation(self, name: str) -> Iterator[None]:
        """
        Time the wrapped block.

        The duration is recorded under ``name`` when the block succeeds and
        under ``name + ".error"`` when it raises. The exception itself is
        re-raised untouched.
        """
        start = time.perf_counter()
        try:
            yield
        except BaseException:
            self.record_timer(f"{name}.error", time.perf_counter() - start)
            raise
        self.record_timer(name, time.perf_counter() - start)

    # =========================================================================
    # Inspection
    # =========================================================================

    def get_counter_value(self, name: str) -> float:
        """
        Current value of a counter (0.0 when it was never created).

        Reads the sample straight from the registry; mainly used by tests
        and the health endpoint.
        """
        if not self._enabled:
            return 0.0
        value = self._registry.get_sample_value(f"{to_prometheus_name(name)}_total")
        return value or 0.0

    def get_timer_count(self, name: str) -> float:
        """Number of observations recorded for a timer."""
        if not self._enabled:
            return 0.0
        value = self._registry.get_sample_value(f"{to_prometheus_name(name)}_seconds_count")
        return value or 0.0

    # =========================================================================
    # Export
    # =========================================================================

    def get_prometheus_metrics(self) -> bytes:
        """
        Get Prometheus metrics output.

        Returns:
            bytes: Prometheus text format metrics
        """
        if not self._enabled:
            return b"# Metrics disabled\n"
        return generate_latest(self._registry)

    def get_content_type(self) -> str:
        """Get Prometheus content type."""
        return CONTENT_TYPE_LATEST

    # =========================================================================
    # Internals
    # =========================================================================

    def _get_counter(self, name: str, description: str) -> Counter:
        counter = self._counters.get(name)
        if counter is not None:
            return counter
        with self._lock:
            if name not in self._counters:
                self._counters[name] = Counter(
                    to_prometheus_name(name), description, registry=self._registry
                )
            return self._counters[name]

    def _get_timer(self, name: str, description: str) -> Histogram:
        timer = self._timers.get(name)
        if timer is not None:
            return timer
        with self._lock:
            if name not in self._timers:
                self._timers[name] = Histogram(
                    f"{to_prometheus_name(name)}_seconds",
                    description,
                    registry=self._registry,
                    buckets=LATENCY_BUCKETS,
                )
            return self._timers[name]
