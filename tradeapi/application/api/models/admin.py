"""
Admin and health response models.

These back the operational endpoints: cache statistics, health and the
service info document served at the root path.
"""

from typing import Literal

from pydantic import Field

from tradeapi.application.api.models.base import ApiModel


class CacheStatsResponse(ApiModel):
    """
    Snapshot of the cache-aside store.

    Serialized as ``{hitCount, missCount, evictionCount, size, hitRate}``.
    """

    hit_count: int = Field(..., ge=0)
    miss_count: int = Field(..., ge=0)
    eviction_count: int = Field(..., ge=0)
    size: int = Field(..., ge=0)
    hit_rate: float = Field(..., ge=0.0, le=1.0)


class CacheHealth(ApiModel):
    status: Literal["UP", "DISABLED"]
    hit_rate: float
    size: int


class DatabaseHealth(ApiModel):
    status: Literal["UP", "DOWN"]
    type: str


class HealthResponse(ApiModel):
    """Body of GET /health."""

    status: Literal["UP", "DOWN"]
    timestamp: str
    version: str
    cache: CacheHealth
    database: DatabaseHealth


class ServiceInfo(ApiModel):
    """Body of GET /."""

    name: str
    version: str
    environment: str
    docs: str | None = None
    endpoints: dict[str, str]
