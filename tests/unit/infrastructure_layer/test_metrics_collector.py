"""
Unit Tests for MetricsCollector

Tests dotted-name mapping, counters, timers, exposition and the
swallow-failures policy.
"""

from unittest.mock import patch

import pytest

from tradeapi.core.config.constants import (
    METRIC_CACHE_HITS,
    METRIC_CACHE_OPERATION_DURATION,
    METRIC_HTTP_REQUESTS,
)
from tradeapi.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    to_prometheus_name,
)


@pytest.mark.unit
class TestNameMapping:
    @pytest.mark.parametrize(
        "dotted, expected",
        [
            ("cache.hits", "cache_hits"),
            ("http.requests.total", "http_requests"),
            ("cache.operation.duration", "cache_operation_duration"),
            ("weird-name!", "weird_name"),
        ],
    )
    def test_to_prometheus_name(self, dotted, expected):
        assert to_prometheus_name(dotted) == expected


@pytest.mark.unit
class TestRecording:
    def test_counter_increments(self, metrics):
        metrics.increment_counter(METRIC_CACHE_HITS)
        metrics.increment_counter(METRIC_CACHE_HITS, 2)

        assert metrics.get_counter_value(METRIC_CACHE_HITS) == 3

    def test_unknown_counter_is_created_on_first_use(self, metrics):
        metrics.increment_counter("orders.placed")

        assert metrics.get_counter_value("orders.placed") == 1

    def test_timer_records_observations(self, metrics):
        metrics.record_timer(METRIC_CACHE_OPERATION_DURATION, 0.01)

        assert metrics.get_timer_count(METRIC_CACHE_OPERATION_DURATION) == 1

    def test_time_operation_success(self, metrics):
        with metrics.time_operation("work"):
            pass

        assert metrics.get_timer_count("work") == 1
        assert metrics.get_timer_count("work.error") == 0

    def test_time_operation_failure_records_error_timer_and_reraises(self, metrics):
        with pytest.raises(ValueError):
            with metrics.time_operation("work"):
                raise ValueError("bad")

        assert metrics.get_timer_count("work") == 0
        assert metrics.get_timer_count("work.error") == 1

    def test_registries_are_isolated(self):
        first, second = MetricsCollector(), MetricsCollector()

        first.increment_counter(METRIC_HTTP_REQUESTS)

        assert second.get_counter_value(METRIC_HTTP_REQUESTS) == 0


@pytest.mark.unit
class TestExposition:
    def test_prometheus_output_contains_default_metrics(self, metrics):
        metrics.increment_counter(METRIC_CACHE_HITS)

        output = metrics.get_prometheus_metrics().decode()

        assert "cache_hits_total 1.0" in output
        assert "cache_operation_duration_seconds_bucket" in output
        assert "http_requests_total" in output

    def test_app_info_is_exported(self):
        collector = MetricsCollector(app_info={"name": "Trade API", "version": "1.0.0"})

        assert 'app_info{name="Trade API",version="1.0.0"} 1.0' in (
            collector.get_prometheus_metrics().decode()
        )

    def test_content_type_is_prometheus_text(self, metrics):
        assert metrics.get_content_type().startswith("text/plain")


@pytest.mark.unit
class TestDisabledAndFailures:
    def test_disabled_collector_is_a_noop(self):
        collector = MetricsCollector(enabled=False)

        collector.increment_counter(METRIC_CACHE_HITS)
        collector.record_timer("x", 1.0)

        assert collector.get_counter_value(METRIC_CACHE_HITS) == 0
        assert collector.get_prometheus_metrics() == b"# Metrics disabled\n"

    def test_counter_failure_is_swallowed(self, metrics):
        with patch.object(metrics, "_get_counter", side_effect=RuntimeError("registry broken")):
            metrics.increment_counter(METRIC_CACHE_HITS)

    def test_timer_failure_is_swallowed(self, metrics):
        with patch.object(metrics, "_get_timer", side_effect=RuntimeError("registry broken")):
            metrics.record_timer("x", 0.1)

    def test_time_operation_survives_broken_timer(self, metrics):
        with patch.object(metrics, "_get_timer", side_effect=RuntimeError("registry broken")):
            with metrics.time_operation("x"):
                result = 1 + 1

        assert result == 2
