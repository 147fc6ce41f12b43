"""
System Constants

Centralized names for headers, cache keys and metrics.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for cache key prefixes (routes and tests must agree)
- Metric names shared by the cache, the routes and the admin endpoints

Author: System Architect
Date: 2026-10-19
"""

from enum import Enum

# ============================================================================
# HTTP Headers
# ============================================================================

HEADER_REQUEST_ID = "X-Request-ID"


# ============================================================================
# Pagination Limits
# ============================================================================

DEFAULT_PAGE = 0
DEFAULT_PAGE_SIZE = 20
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100

# Rendered in place of an absent sort field so that "no sort" never
# collides with a real field name in the cache key.
SORT_BY_SENTINEL = "null"


class SortDirection(str, Enum):
    """Sort direction for paginated queries."""

    ASC = "ASC"
    DESC = "DESC"


# ============================================================================
# Cache Keys
# ============================================================================


class Resource(str, Enum):
    """
    Resource names used as cache key prefixes.

    Key conventions:
        users:all                                   full user listing
        user:<id>                                   single user
        users:page:0:size:20:sort:null:ASC          one page of users
    """

    USERS = "users"
    TRADES = "trades"


CACHE_KEY_USER = "user:{id}"
CACHE_KEY_TRADE = "trade:{id}"
CACHE_KEY_ALL_USERS = "users:all"
CACHE_KEY_ALL_TRADES = "trades:all"


# ============================================================================
# Metric Names
# ============================================================================
# Dotted names are the recorder's public vocabulary; the metrics collector
# maps them onto Prometheus-compatible names.

METRIC_HTTP_REQUESTS = "http.requests.total"
METRIC_HTTP_ERRORS = "http.requests.errors"
METRIC_HTTP_DURATION = "http.request.duration"

METRIC_USERS_CREATED = "users.created"
METRIC_USERS_UPDATED = "users.updated"
METRIC_USERS_DELETED = "users.deleted"
METRIC_TRADES_CREATED = "trades.created"
METRIC_TRADES_UPDATED = "trades.updated"
METRIC_TRADES_DELETED = "trades.deleted"

METRIC_CACHE_HITS = "cache.hits"
METRIC_CACHE_MISSES = "cache.misses"
METRIC_CACHE_ERRORS = "cache.errors"
METRIC_CACHE_OPERATION_DURATION = "cache.operation.duration"

DEFAULT_COUNTERS: dict[str, str] = {
    METRIC_HTTP_REQUESTS: "Total HTTP requests",
    METRIC_HTTP_ERRORS: "Total HTTP error responses",
    METRIC_USERS_CREATED: "Total users created",
    METRIC_USERS_UPDATED: "Total users updated",
    METRIC_USERS_DELETED: "Total users deleted",
    METRIC_TRADES_CREATED: "Total trades created",
    METRIC_TRADES_UPDATED: "Total trades updated",
    METRIC_TRADES_DELETED: "Total trades deleted",
    METRIC_CACHE_HITS: "Cache hits",
    METRIC_CACHE_MISSES: "Cache misses",
    METRIC_CACHE_ERRORS: "Cache operation failures",
}

DEFAULT_TIMERS: dict[str, str] = {
    METRIC_HTTP_DURATION: "HTTP request duration",
    METRIC_CACHE_OPERATION_DURATION: "Cache operation duration",
}

LATENCY_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)


# ============================================================================
# Executor Defaults
# ============================================================================

DEFAULT_SHUTDOWN_TIMEOUT_SECONDS = 30.0
