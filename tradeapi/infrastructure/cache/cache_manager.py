#!/usr/bin/env python3
"""
Cache-Aside Cache Manager

Architecture:
    CacheManager (Public API: get / put / get_or_compute / evict / stats)
        ├── TTLStorage (bounded LRU map with expire-after-write)
        └── CacheObserver (hit/miss accounting, logging, metrics)

The cache sits in front of paginated list queries and single-entity
lookups. Callers own population (get_or_compute) and invalidation (evict);
the cache knows nothing about writes to the database.

Guarantees:
    - Every individual operation is atomic with respect to the map.
    - get_or_compute is NOT a critical section: two concurrent misses on the
      same key may both run their supplier and both write (last write wins).
      The lock is never held while a supplier runs.
    - No public method raises. Internal failures are logged, counted under
      the "cache.errors" metric and degraded to a miss or a no-op.

Author: Refactored for clarity and maintainability
Date: 2026-10-19
"""

import threading
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, TypeVar

from tradeapi.core.config.constants import (
    METRIC_CACHE_ERRORS,
    METRIC_CACHE_HITS,
    METRIC_CACHE_MISSES,
    METRIC_CACHE_OPERATION_DURATION,
)
from tradeapi.core.exceptions import CacheTypeMismatchError, ConfigurationError
from tradeapi.core.logging.logger import get_logger
from tradeapi.infrastructure.monitoring.metrics_collector import MetricsCollector

logger = get_logger(__name__)

T = TypeVar("T")


# =============================================================================
# VALUE OBJECTS
# =============================================================================


@dataclass(frozen=True)
class CacheStats:
    """
    Point-in-time snapshot of cache accounting.

    Counters are monotonic for the lifetime of the store; evict_all() does
    not reset them. ``size`` is the number of live (unexpired) entries.
    """

    hit_count: int = 0
    miss_count: int = 0
    eviction_count: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        """hits / (hits + misses), or 0.0 before any access."""
        total = self.hit_count + self.miss_count
        return self.hit_count / total if total else 0.0

    def to_dict(self) -> dict[str, Any]:
        """Wire format used by the /cache/stats endpoint."""
        return {
            "hitCount": self.hit_count,
            "missCount": self.miss_count,
            "evictionCount": self.eviction_count,
            "size": self.size,
            "hitRate": self.hit_rate,
        }

    def __str__(self) -> str:
        return (
            f"CacheStats{{hits={self.hit_count}, misses={self.miss_count}, "
            f"evictions={self.eviction_count}, size={self.size}, "
            f"hitRate={self.hit_rate * 100:.2f}%}}"
        )


@dataclass
class _CacheEntry:
    value: Any
    written_at: float


# =============================================================================
# LAYER 1: STORAGE
# Pure storage - no metrics, no logging
# =============================================================================


class TTLStorage:
    """
    In-memory LRU storage with expire-after-write.

    Implementation Details:
    - ``_entries`` is an OrderedDict in recency order (least recent first);
      reads and writes move a key to the end.
    - ``_write_order`` tracks keys in write order. Since every entry shares
      the same TTL, write order is also expiry order, so expired entries
      can be purged from the front without scanning the whole map.
    - A threading.Lock guards both dicts; each method holds it only for
      the duration of a few dict operations.

    Eviction:
    - Capacity: when a write would exceed ``max_size`` the least recently
      used entry is dropped.
    - Time: an entry older than ``ttl_seconds`` since its last write is
      treated as absent on access and is purged on the next write.
    Both causes increment ``eviction_count``; explicit deletes do not.
    """

    def __init__(
        self,
        max_size: int,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_size <= 0:
            raise ConfigurationError(
                "Cache max_size must be positive", details={"max_size": max_size}
            )
        if ttl_seconds <= 0:
            raise ConfigurationError(
                "Cache expire_after_write must be positive", details={"ttl_seconds": ttl_seconds}
            )

        self._max_size = max_size
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: OrderedDict[str, _CacheEntry] = OrderedDict()
        self._write_order: OrderedDict[str, None] = OrderedDict()
        self._evictions = 0
        self._lock = threading.Lock()

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def eviction_count(self) -> int:
        return self._evictions

    def get(self, key: str) -> Any | None:
        """Return the live value for ``key`` or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._is_expired(entry, self._clock()):
                self._remove(key)
                self._evictions += 1
                return None
            self._entries.move_to_end(key)
            return entry.value

    def set(self, key: str, value: Any) -> None:
        """Insert or overwrite ``key``, resetting its write time."""
        with self._lock:
            now = self._clock()
            self._purge_expired(now)

            self._entries[key] = _CacheEntry(value=value, written_at=now)
            self._entries.move_to_end(key)
            self._write_order[key] = None
            self._write_order.move_to_end(key)

            while len(self._entries) > self._max_size:
                victim, _ = self._entries.popitem(last=False)
                self._write_order.pop(victim, None)
                self._evictions += 1

    def delete(self, key: str) -> bool:
        """Remove ``key``. Returns False when it was not present."""
        with self._lock:
            if key not in self._entries:
                return False
            self._remove(key)
            return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._write_order.clear()

    def cleanup(self) -> int:
        """Purge every expired entry now. Returns how many were dropped."""
        with self._lock:
            return self._purge_expired(self._clock())

    def size(self) -> int:
        """Number of live entries (expired ones are purged first)."""
        with self._lock:
            self._purge_expired(self._clock())
            return len(self._entries)

    def keys(self) -> list[str]:
        """Keys in recency order (least recently used first)."""
        with self._lock:
            return list(self._entries.keys())

    # -------------------------------------------------------------------------
    # Internals (caller holds the lock)
    # -------------------------------------------------------------------------

    def _is_expired(self, entry: _CacheEntry, now: float) -> bool:
        return now - entry.written_at >= self._ttl

    def _remove(self, key: str) -> None:
        self._entries.pop(key, None)
        self._write_order.pop(key, None)

    def _purge_expired(self, now: float) -> int:
        purged = 0
        while self._write_order:
            oldest = next(iter(self._write_order))
            entry = self._entries.get(oldest)
            if entry is not None and not self._is_expired(entry, now):
                break
            self._remove(oldest)
            if entry is not None:
                purged += 1
        self._evictions += purged
        return purged


# =============================================================================
# LAYER 2: OBSERVABILITY
# Hit/miss accounting, logging, metrics
# =============================================================================


class CacheObserver:
    """
    Tracks cache accounting and forwards it to the metrics recorder.

    Hit and miss counters live here rather than in TTLStorage, and are kept
    locally as well as in Prometheus so that get_stats() works with metrics
    disabled. Metric failures are logged at debug level and dropped.
    """

    def __init__(self, metrics: MetricsCollector):
        self._metrics = metrics
        self._hits = 0
        self._misses = 0
        self._lock = threading.Lock()

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    def _emit(self, metric: str) -> None:
        try:
            self._metrics.increment_counter(metric)
        except Exception as e:
            logger.debug("Cache metric not recorded", metric=metric, error=str(e))

    def record_hit(self, key: str) -> None:
        with self._lock:
            self._hits += 1
        self._emit(METRIC_CACHE_HITS)
        logger.debug("Cache hit", cache_key=key)

    def record_miss(self, key: str) -> None:
        with self._lock:
            self._misses += 1
        self._emit(METRIC_CACHE_MISSES)
        logger.debug("Cache miss", cache_key=key)

    def record_error(self, operation: str, key: str | None, error: Exception) -> None:
        self._emit(METRIC_CACHE_ERRORS)
        logger.warning(
            "Cache operation failed",
            operation=operation,
            cache_key=key,
            error_type=type(error).__name__,
            error=str(error),
        )

    @contextmanager
    def timed(self, operation: str) -> Iterator[None]:
        """
        Time the wrapped block and report it as a timer metric.

        Same naming as MetricsCollector.time_operation (``operation`` on
        success, ``operation.error`` when the block raises), but a failing
        recorder is logged and dropped instead of surfacing to the caller.
        """
        start = time.perf_counter()
        try:
            yield
        except BaseException:
            self._emit_timer(f"{operation}.error", time.perf_counter() - start)
            raise
        self._emit_timer(operation, time.perf_counter() - start)

    def _emit_timer(self, metric: str, seconds: float) -> None:
        try:
            self._metrics.record_timer(metric, seconds)
        except Exception as e:
            logger.debug("Cache timer not recorded", metric=metric, error=str(e))

    def record_put(self, key: str) -> None:
        logger.debug("Cache set", cache_key=key)

    def record_evict(self, key: str) -> None:
        logger.debug("Cache invalidated", cache_key=key)


# =============================================================================
# LAYER 3: PUBLIC API
# =============================================================================


class CacheManager:
    """
    Bounded, expiring cache-aside store.

    Public API for all caching operations.

    Usage:
        cache = CacheManager(metrics, max_size=1000, expire_after_write=1800)

        user = cache.get("user:1", User)
        cache.put("user:1", user)

        page = cache.get_or_compute(key, PageResponse, lambda: build_page())
        page = await cache.get_or_compute_async(key, PageResponse, fetch_page)

        cache.evict("user:1")
        stats = cache.get_stats()

    When ``enabled`` is False every operation degrades to a pass-through:
    get returns None (uncounted), put/evict do nothing, get_or_compute
    always calls the supplier, and get_stats returns zeros.
    """

    def __init__(
        self,
        metrics: MetricsCollector,
        enabled: bool = True,
        max_size: int = 1000,
        expire_after_write: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._enabled = enabled
        self._observer = CacheObserver(metrics)
        self._storage: TTLStorage | None = None

        if enabled:
            self._storage = TTLStorage(max_size, expire_after_write, clock=clock)
            logger.info(
                "Cache manager initialized",
                max_size=max_size,
                expire_after_write_seconds=expire_after_write,
            )
        else:
            logger.info("Cache disabled")

    @classmethod
    def from_settings(cls, settings, metrics: MetricsCollector) -> "CacheManager":
        """Build a cache manager from the ``cache`` section of Settings."""
        cache_settings = settings.cache
        return cls(
            metrics,
            enabled=cache_settings.CACHE_ENABLED,
            max_size=cache_settings.CACHE_MAX_SIZE,
            expire_after_write=cache_settings.expire_after_write_seconds,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    # -------------------------------------------------------------------------
    # Core Cache Operations
    # -------------------------------------------------------------------------

    def get(self, key: str, expected_type: type[T]) -> T | None:
        """
        Look up ``key``.

        Returns None when the key is absent, expired, or holds a value that
        is not an instance of ``expected_type``. Exactly one of the hit or
        miss counters is incremented per call (none when disabled). A type
        mismatch is reported as a miss and counted as a cache error.
        """
        if not self._enabled:
            return None

        try:
            value = self._storage.get(key)
            if value is None:
                self._observer.record_miss(key)
                return None

            if not isinstance(value, expected_type):
                self._observer.record_miss(key)
                raise CacheTypeMismatchError(
                    f"Cached value for '{key}' is not a {expected_type.__name__}",
                    details={
                        "expected_type": expected_type.__name__,
                        "actual_type": type(value).__name__,
                    },
                )

            self._observer.record_hit(key)
            return value

        except Exception as e:
            self._observer.record_error("get", key, e)
            return None

    def put(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``. None values are ignored."""
        if not self._enabled or value is None:
            return

        try:
            self._storage.set(key, value)
            self._observer.record_put(key)
        except Exception as e:
            self._observer.record_error("put", key, e)

    def evict(self, key: str) -> None:
        """Remove ``key`` if present. Evicting a missing key is a no-op."""
        if not self._enabled:
            return

        try:
            if self._storage.delete(key):
                self._observer.record_evict(key)
        except Exception as e:
            self._observer.record_error("evict", key, e)

    def evict_all(self) -> None:
        """Drop every entry. Hit/miss/eviction counters are not reset."""
        if not self._enabled:
            return

        try:
            self._storage.clear()
            logger.info("Evicted all cache entries")
        except Exception as e:
            self._observer.record_error("evict_all", None, e)

    # -------------------------------------------------------------------------
    # Cache-Aside Pattern
    # -------------------------------------------------------------------------

    def get_or_compute(self, key: str, expected_type: type[T], supplier: Callable[[], T]) -> T:
        """
        Return the cached value or compute, store and return it.

        The supplier runs synchronously on the calling thread and only on a
        miss. A None result is returned but not cached. Concurrent misses on
        the same key are not deduplicated; each caller runs its own supplier.
        Exceptions raised by the supplier propagate to the caller.
        """
        if not self._enabled:
            return supplier()

        with self._observer.timed(METRIC_CACHE_OPERATION_DURATION):
            cached = self.get(key, expected_type)
            if cached is not None:
                return cached

            computed = supplier()
            if computed is not None:
                self.put(key, computed)
            return computed

    async def get_or_compute_async(
        self,
        key: str,
        expected_type: type[T],
        supplier: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Async variant of get_or_compute.

        ``supplier`` returns an awaitable; it is only called on a miss and
        the event loop is never blocked waiting for it. A hit resolves
        without suspending.
        """
        if not self._enabled:
            return await supplier()

        with self._observer.timed(METRIC_CACHE_OPERATION_DURATION):
            cached = self.get(key, expected_type)
            if cached is not None:
                return cached

            computed = await supplier()
            if computed is not None:
                self.put(key, computed)
            return computed

    # -------------------------------------------------------------------------
    # Maintenance & Monitoring
    # -------------------------------------------------------------------------

    def cleanup(self) -> None:
        """Purge expired entries immediately instead of waiting for the next write."""
        if not self._enabled:
            return

        try:
            self._storage.cleanup()
        except Exception as e:
            self._observer.record_error("cleanup", None, e)

    def get_stats(self) -> CacheStats:
        """Live snapshot of hit/miss/eviction counters and current size."""
        if not self._enabled:
            return CacheStats()

        try:
            size = self._storage.size()
            return CacheStats(
                hit_count=self._observer.hits,
                miss_count=self._observer.misses,
                eviction_count=self._storage.eviction_count,
                size=size,
            )
        except Exception as e:
            self._observer.record_error("get_stats", None, e)
            return CacheStats()

    def health_check(self) -> dict[str, Any]:
        """Summary used by the /health endpoint."""
        stats = self.get_stats()
        return {
            "status": "UP" if self._enabled else "DISABLED",
            "hitRate": stats.hit_rate,
            "size": stats.size,
        }
