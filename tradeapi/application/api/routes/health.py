"""
Health and Metrics Routes
=========================

Mounted at the application root (not under the API base path) so that load
balancers and Prometheus scrapers use fixed URLs.

    GET /health    dependency status; 503 when the database does not answer
    GET /metrics   Prometheus text exposition
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Response, status
from fastapi.responses import ORJSONResponse

from tradeapi.application.api.dependencies import (
    CacheDep,
    DatabaseDep,
    MetricsDep,
    SettingsDep,
)
from tradeapi.application.api.models.admin import (
    CacheHealth,
    DatabaseHealth,
    HealthResponse,
)
from tradeapi.core.logging.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
def health_check(settings: SettingsDep, cache: CacheDep, database: DatabaseDep):
    """
    Application health.

    HTTP Status Codes:
        200: Database reachable
        503: Database ping failed
    """
    database_up = database.ping()
    cache_health = cache.health_check()

    health = HealthResponse(
        status="UP" if database_up else "DOWN",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        version=settings.app.APP_VERSION,
        cache=CacheHealth(**cache_health),
        database=DatabaseHealth(status="UP" if database_up else "DOWN", type=database.dialect),
    )

    if not database_up:
        logger.warning("Health check failed", database=database.dialect)
        return ORJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=health.model_dump(by_alias=True),
        )
    return health


@router.get("/metrics", include_in_schema=False)
def prometheus_metrics(metrics: MetricsDep):
    """Prometheus scrape endpoint."""
    return Response(content=metrics.get_prometheus_metrics(), media_type=metrics.get_content_type())
