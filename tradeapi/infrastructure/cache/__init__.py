"""
Cache Module

Provides the bounded, expiring in-process cache-aside store.
"""

from .cache_manager import CacheManager, CacheStats

__all__ = [
    "CacheManager",
    "CacheStats",
]
