"""
Cache-Related Exceptions

These never escape the CacheManager's public methods; they exist so that
internal failures can be logged with a precise type before being degraded
to a miss or a no-op.

Author: System Architect
Date: 2026-10-19
"""

from tradeapi.core.exceptions.base import TradeApiError


class CacheError(TradeApiError):
    """Base exception for cache-related errors."""
    pass


class CacheTypeMismatchError(CacheError):
    """
    Raised internally when a stored value is not an instance of the type
    the caller asked for.

    The caller sees a cache miss; the mismatch shows up in logs and in the
    cache error counter.
    """
    pass
