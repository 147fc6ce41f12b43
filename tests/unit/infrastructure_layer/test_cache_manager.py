"""
Unit Tests for CacheManager

Tests the cache-aside store: typed reads, hit/miss/eviction accounting,
LRU capacity eviction, expire-after-write, get-or-compute (sync and async),
disabled-mode pass-through and the never-raise failure policy.
"""

import asyncio
import threading
from unittest.mock import MagicMock

import pytest

from tradeapi.core.config.constants import (
    METRIC_CACHE_ERRORS,
    METRIC_CACHE_HITS,
    METRIC_CACHE_MISSES,
    METRIC_CACHE_OPERATION_DURATION,
)
from tradeapi.core.exceptions import ConfigurationError
from tradeapi.infrastructure.cache.cache_manager import CacheManager, CacheStats, TTLStorage
from tests.test_fixtures.clock import FakeClock

HOUR = 3600.0


@pytest.mark.unit
class TestCacheGetPut:
    """Basic reads and writes."""

    def test_put_then_get_returns_value(self, cache_manager):
        cache_manager.put("user:1", {"id": 1})

        assert cache_manager.get("user:1", dict) == {"id": 1}

    def test_get_absent_key_returns_none_and_counts_one_miss(self, cache_manager):
        assert cache_manager.get("missing", str) is None
        assert cache_manager.get_stats().miss_count == 1

        assert cache_manager.get("missing", str) is None
        assert cache_manager.get_stats().miss_count == 2

    def test_each_get_counts_exactly_one_hit_or_miss(self, cache_manager):
        cache_manager.put("k", "v")

        cache_manager.get("k", str)
        cache_manager.get("other", str)

        stats = cache_manager.get_stats()
        assert stats.hit_count == 1
        assert stats.miss_count == 1

    def test_put_none_is_ignored(self, cache_manager):
        cache_manager.put("k", None)

        assert cache_manager.get_stats().size == 0

    def test_put_overwrites_existing_value(self, cache_manager):
        cache_manager.put("k", "old")
        cache_manager.put("k", "new")

        assert cache_manager.get("k", str) == "new"
        assert cache_manager.get_stats().size == 1

    def test_falsy_values_are_cached(self, cache_manager):
        cache_manager.put("empty", [])

        assert cache_manager.get("empty", list) == []
        assert cache_manager.get_stats().hit_count == 1

    def test_type_mismatch_is_a_miss_and_an_error(self, cache_manager, metrics):
        cache_manager.put("k", "a string")

        result = cache_manager.get("k", int)

        assert result is None
        stats = cache_manager.get_stats()
        assert stats.miss_count == 1
        assert stats.hit_count == 0
        assert metrics.get_counter_value(METRIC_CACHE_ERRORS) == 1

    def test_subclass_instances_satisfy_expected_type(self, cache_manager):
        cache_manager.put("flag", True)

        assert cache_manager.get("flag", int) is True

    def test_hits_and_misses_reach_metrics(self, cache_manager, metrics):
        cache_manager.put("k", "v")
        cache_manager.get("k", str)
        cache_manager.get("nope", str)

        assert metrics.get_counter_value(METRIC_CACHE_HITS) == 1
        assert metrics.get_counter_value(METRIC_CACHE_MISSES) == 1


@pytest.mark.unit
class TestCacheEviction:
    """Explicit eviction, capacity and expiry."""

    def test_evict_removes_entry(self, cache_manager):
        cache_manager.put("k", "v")

        cache_manager.evict("k")

        assert cache_manager.get("k", str) is None

    def test_evict_twice_is_a_noop(self, cache_manager):
        cache_manager.put("k", "v")

        cache_manager.evict("k")
        before = cache_manager.get_stats()
        cache_manager.evict("k")
        after = cache_manager.get_stats()

        assert before == after

    def test_explicit_evict_is_not_counted_as_eviction(self, cache_manager):
        cache_manager.put("k", "v")

        cache_manager.evict("k")

        assert cache_manager.get_stats().eviction_count == 0

    def test_evict_all_clears_entries_but_keeps_counters(self, cache_manager):
        cache_manager.put("a", 1)
        cache_manager.put("b", 2)
        cache_manager.get("a", int)
        cache_manager.get("zzz", int)

        cache_manager.evict_all()

        stats = cache_manager.get_stats()
        assert stats.size == 0
        assert stats.hit_count == 1
        assert stats.miss_count == 1

    def test_capacity_invariant(self, metrics):
        max_size, extra = 10, 7
        cache = CacheManager(metrics, max_size=max_size, expire_after_write=HOUR)

        for i in range(max_size + extra):
            cache.put(f"key-{i}", i)

        stats = cache.get_stats()
        assert stats.size <= max_size
        assert stats.eviction_count >= extra

    def test_least_recently_used_entry_is_the_victim(self, metrics):
        cache = CacheManager(metrics, max_size=2, expire_after_write=HOUR)
        cache.put("a", 1)
        cache.put("b", 2)

        cache.get("a", int)  # "b" is now least recently used
        cache.put("c", 3)

        assert cache.get("a", int) == 1
        assert cache.get("b", int) is None
        assert cache.get("c", int) == 3

    def test_end_to_end_max_size_two(self, metrics):
        cache = CacheManager(metrics, max_size=2, expire_after_write=HOUR)

        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("c", 3)

        stats = cache.get_stats()
        assert stats.size == 2
        assert stats.eviction_count == 1
        assert cache.get("a", int) is None

    def test_entry_expires_after_write(self, cache_manager, fake_clock):
        cache_manager.put("k", "v")

        fake_clock.advance(HOUR - 1)
        assert cache_manager.get("k", str) == "v"

        fake_clock.advance(1)
        assert cache_manager.get("k", str) is None

    def test_reads_do_not_extend_expiry(self, cache_manager, fake_clock):
        cache_manager.put("k", "v")

        for _ in range(3):
            fake_clock.advance(HOUR / 3 - 1)
            cache_manager.get("k", str)
        fake_clock.advance(10)

        assert cache_manager.get("k", str) is None

    def test_overwrite_resets_write_time(self, cache_manager, fake_clock):
        cache_manager.put("k", "v1")
        fake_clock.advance(HOUR - 10)
        cache_manager.put("k", "v2")
        fake_clock.advance(20)

        assert cache_manager.get("k", str) == "v2"

    def test_expired_entries_count_as_evictions_and_leave_size(self, cache_manager, fake_clock):
        cache_manager.put("a", 1)
        cache_manager.put("b", 2)

        fake_clock.advance(HOUR)
        stats = cache_manager.get_stats()

        assert stats.size == 0
        assert stats.eviction_count == 2

    def test_writes_purge_expired_entries_incrementally(self, cache_manager, fake_clock):
        cache_manager.put("old", 1)
        fake_clock.advance(HOUR)

        cache_manager.put("new", 2)

        assert cache_manager._storage.keys() == ["new"]

    def test_cleanup_purges_now(self, cache_manager, fake_clock):
        cache_manager.put("k", 1)
        fake_clock.advance(HOUR)

        cache_manager.cleanup()

        assert cache_manager._storage.keys() == []


@pytest.mark.unit
class TestGetOrCompute:
    """Cache-aside convenience."""

    def test_miss_invokes_supplier_once_and_caches(self, cache_manager):
        supplier = MagicMock(return_value="computed")

        assert cache_manager.get_or_compute("k", str, supplier) == "computed"
        supplier.assert_called_once_with()
        assert cache_manager.get("k", str) == "computed"

    def test_hit_suppresses_second_supplier(self, cache_manager):
        cache_manager.get_or_compute("k", str, lambda: "first")
        failing = MagicMock(side_effect=AssertionError("must not be called"))

        assert cache_manager.get_or_compute("k", str, failing) == "first"
        failing.assert_not_called()

    def test_none_result_is_returned_but_not_cached(self, cache_manager):
        supplier = MagicMock(return_value=None)

        assert cache_manager.get_or_compute("k", str, supplier) is None
        assert cache_manager.get_or_compute("k", str, supplier) is None
        assert supplier.call_count == 2

    def test_supplier_exception_propagates_and_nothing_is_cached(self, cache_manager):
        def boom():
            raise ValueError("db down")

        with pytest.raises(ValueError, match="db down"):
            cache_manager.get_or_compute("k", str, boom)

        assert cache_manager.get_stats().size == 0

    def test_operation_is_timed(self, cache_manager, metrics):
        cache_manager.get_or_compute("k", str, lambda: "v")
        cache_manager.get_or_compute("k", str, lambda: "v")

        assert metrics.get_timer_count(METRIC_CACHE_OPERATION_DURATION) == 2

    def test_failed_compute_is_timed_as_error(self, cache_manager, metrics):
        def boom():
            raise ValueError("db down")

        with pytest.raises(ValueError):
            cache_manager.get_or_compute("k", str, boom)

        assert metrics.get_timer_count(f"{METRIC_CACHE_OPERATION_DURATION}.error") == 1
        assert metrics.get_timer_count(METRIC_CACHE_OPERATION_DURATION) == 0

    def test_concurrent_misses_may_each_compute(self, cache_manager):
        """At-least-once compute: no per-key deduplication."""
        gate = threading.Barrier(2)
        calls = []

        def supplier():
            calls.append(threading.get_ident())
            gate.wait(timeout=5)
            return "value"

        threads = [
            threading.Thread(target=cache_manager.get_or_compute, args=("k", str, supplier))
            for _ in range(2)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert len(calls) == 2
        assert cache_manager.get("k", str) == "value"

    async def test_async_miss_awaits_supplier_and_caches(self, cache_manager):
        calls = 0

        async def supplier():
            nonlocal calls
            calls += 1
            await asyncio.sleep(0)
            return [1, 2, 3]

        first = await cache_manager.get_or_compute_async("k", list, supplier)
        second = await cache_manager.get_or_compute_async("k", list, supplier)

        assert first == second == [1, 2, 3]
        assert calls == 1

    async def test_async_supplier_exception_propagates(self, cache_manager):
        async def supplier():
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            await cache_manager.get_or_compute_async("k", str, supplier)


@pytest.mark.unit
class TestCacheStats:
    """Snapshot accounting."""

    def test_hit_rate_is_zero_without_accesses(self, cache_manager):
        assert cache_manager.get_stats().hit_rate == 0.0

    def test_hit_rate_matches_hits_over_accesses(self, cache_manager):
        cache_manager.put("k", "v")
        for _ in range(3):
            cache_manager.get("k", str)
        cache_manager.get("missing", str)

        assert cache_manager.get_stats().hit_rate == pytest.approx(0.75)

    def test_to_dict_uses_wire_names(self):
        stats = CacheStats(hit_count=3, miss_count=1, eviction_count=2, size=5)

        assert stats.to_dict() == {
            "hitCount": 3,
            "missCount": 1,
            "evictionCount": 2,
            "size": 5,
            "hitRate": 0.75,
        }

    def test_stats_are_immutable(self):
        stats = CacheStats()

        with pytest.raises(AttributeError):
            stats.hit_count = 10


@pytest.mark.unit
class TestDisabledCache:
    """enabled=False turns every operation into a pass-through."""

    @pytest.fixture
    def disabled_cache(self, metrics):
        return CacheManager(metrics, enabled=False)

    def test_get_or_compute_always_calls_supplier(self, disabled_cache):
        supplier = MagicMock(return_value="v")

        disabled_cache.get_or_compute("k", str, supplier)
        disabled_cache.get_or_compute("k", str, supplier)

        assert supplier.call_count == 2

    async def test_async_get_or_compute_always_calls_supplier(self, disabled_cache):
        calls = 0

        async def supplier():
            nonlocal calls
            calls += 1
            return "v"

        await disabled_cache.get_or_compute_async("k", str, supplier)
        await disabled_cache.get_or_compute_async("k", str, supplier)

        assert calls == 2

    def test_stats_are_all_zero(self, disabled_cache):
        disabled_cache.put("k", "v")
        disabled_cache.get("k", str)
        disabled_cache.get_or_compute("k", str, lambda: "v")

        assert disabled_cache.get_stats() == CacheStats()

    def test_get_returns_none(self, disabled_cache):
        disabled_cache.put("k", "v")

        assert disabled_cache.get("k", str) is None

    def test_health_reports_disabled(self, disabled_cache):
        assert disabled_cache.health_check()["status"] == "DISABLED"


@pytest.mark.unit
class TestCacheFailurePolicy:
    """Internal failures never reach the caller."""

    @pytest.fixture
    def broken_cache(self, cache_manager):
        storage = MagicMock(spec=TTLStorage)
        storage.get.side_effect = RuntimeError("storage exploded")
        storage.set.side_effect = RuntimeError("storage exploded")
        storage.delete.side_effect = RuntimeError("storage exploded")
        storage.clear.side_effect = RuntimeError("storage exploded")
        storage.size.side_effect = RuntimeError("storage exploded")
        cache_manager._storage = storage
        return cache_manager

    def test_get_degrades_to_none(self, broken_cache, metrics):
        assert broken_cache.get("k", str) is None
        assert metrics.get_counter_value(METRIC_CACHE_ERRORS) == 1

    def test_put_evict_and_evict_all_are_silent(self, broken_cache, metrics):
        broken_cache.put("k", "v")
        broken_cache.evict("k")
        broken_cache.evict_all()

        assert metrics.get_counter_value(METRIC_CACHE_ERRORS) == 3

    def test_get_stats_degrades_to_zeros(self, broken_cache):
        assert broken_cache.get_stats() == CacheStats()

    def test_get_or_compute_falls_back_to_supplier(self, broken_cache):
        assert broken_cache.get_or_compute("k", str, lambda: "fresh") == "fresh"

    @pytest.fixture
    def failing_recorder(self):
        metrics = MagicMock()
        metrics.increment_counter.side_effect = RuntimeError("metrics down")
        metrics.record_timer.side_effect = RuntimeError("timer backend down")
        metrics.time_operation.side_effect = RuntimeError("timer backend down")
        return metrics

    def test_metrics_failure_does_not_affect_hits(self, failing_recorder, fake_clock):
        cache = CacheManager(
            failing_recorder, max_size=10, expire_after_write=HOUR, clock=fake_clock
        )
        cache.put("k", "v")

        assert cache.get("k", str) == "v"
        assert cache.get_or_compute("k", str, lambda: "other") == "v"
        assert failing_recorder.record_timer.called

    def test_metrics_failure_does_not_affect_misses(self, failing_recorder, fake_clock):
        cache = CacheManager(
            failing_recorder, max_size=10, expire_after_write=HOUR, clock=fake_clock
        )

        assert cache.get_or_compute("k", str, lambda: "fresh") == "fresh"
        assert cache.get("k", str) == "fresh"

    async def test_metrics_failure_does_not_affect_async_compute(
        self, failing_recorder, fake_clock
    ):
        cache = CacheManager(
            failing_recorder, max_size=10, expire_after_write=HOUR, clock=fake_clock
        )

        async def load():
            return "fresh"

        assert await cache.get_or_compute_async("k", str, load) == "fresh"
        assert await cache.get_or_compute_async("k", str, load) == "fresh"
        assert cache.get_stats().hit_count == 1

    def test_supplier_error_still_propagates_with_failing_recorder(
        self, failing_recorder, fake_clock
    ):
        cache = CacheManager(
            failing_recorder, max_size=10, expire_after_write=HOUR, clock=fake_clock
        )

        def boom():
            raise ValueError("db down")

        with pytest.raises(ValueError, match="db down"):
            cache.get_or_compute("k", str, boom)


@pytest.mark.unit
class TestTTLStorage:
    """Storage-level invariants."""

    def test_rejects_non_positive_capacity(self):
        with pytest.raises(ConfigurationError):
            TTLStorage(max_size=0, ttl_seconds=10)

    def test_rejects_non_positive_ttl(self):
        with pytest.raises(ConfigurationError):
            TTLStorage(max_size=10, ttl_seconds=0)

    def test_keys_are_in_recency_order(self):
        storage = TTLStorage(max_size=10, ttl_seconds=HOUR, clock=FakeClock())
        storage.set("a", 1)
        storage.set("b", 2)
        storage.get("a")

        assert storage.keys() == ["b", "a"]

    def test_delete_reports_presence(self):
        storage = TTLStorage(max_size=10, ttl_seconds=HOUR, clock=FakeClock())
        storage.set("a", 1)

        assert storage.delete("a") is True
        assert storage.delete("a") is False
