"""
API Models Package
==================

Pydantic models for API request/response validation.

ORGANIZATION:
-------------
- base.py: camelCase, frozen base model
- pagination.py: PageRequest, PageMetadata, PageResponse
- users.py / trades.py: resource bodies
- admin.py: cache stats, health and service info
"""

from tradeapi.application.api.models.admin import (
    CacheHealth,
    CacheStatsResponse,
    DatabaseHealth,
    HealthResponse,
    ServiceInfo,
)
from tradeapi.application.api.models.pagination import PageMetadata, PageRequest, PageResponse
from tradeapi.application.api.models.trades import Trade, TradeCreate
from tradeapi.application.api.models.users import User, UserCreate

__all__ = [
    "CacheHealth",
    "CacheStatsResponse",
    "DatabaseHealth",
    "HealthResponse",
    "PageMetadata",
    "PageRequest",
    "PageResponse",
    "ServiceInfo",
    "Trade",
    "TradeCreate",
    "User",
    "UserCreate",
]
