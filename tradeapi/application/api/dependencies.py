"""
FastAPI Dependency Injection Module
===================================

Reusable dependencies for accessing the application singletons (settings,
cache, metrics, worker pool, services) that the lifespan builds once and
stores on ``app.state``.

Every route receives its collaborators through these providers, never
through module globals, so a test can build an app with its own Settings
and get a fully isolated cache, database and metrics registry.

Example:
    @router.get("/stats")
    async def cache_stats(cache: CacheDep):
        return cache.get_stats().to_dict()
"""

from typing import Annotated

from fastapi import Depends, Query, Request

from tradeapi.application.api.models.pagination import PageRequest
from tradeapi.application.services.resource_service import TradeService, UserService
from tradeapi.core.concurrency.task_executor import TaskExecutor
from tradeapi.core.config.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from tradeapi.core.config.settings import Settings
from tradeapi.infrastructure.cache.cache_manager import CacheManager
from tradeapi.infrastructure.database.session import Database
from tradeapi.infrastructure.monitoring.metrics_collector import MetricsCollector

# ============================================================================
# DEPENDENCY FUNCTIONS
# ============================================================================


def _state(request: Request, name: str):
    try:
        return getattr(request.app.state, name)
    except AttributeError as e:
        raise RuntimeError(
            f"'{name}' not initialized in app.state. "
            "This indicates the application lifespan startup didn't complete properly."
        ) from e


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was built with."""
    return _state(request, "settings")


def get_cache(request: Request) -> CacheManager:
    return _state(request, "cache")


def get_metrics(request: Request) -> MetricsCollector:
    return _state(request, "metrics")


def get_executor(request: Request) -> TaskExecutor:
    return _state(request, "executor")


def get_database(request: Request) -> Database:
    return _state(request, "database")


def get_user_service(request: Request) -> UserService:
    return _state(request, "user_service")


def get_trade_service(request: Request) -> TradeService:
    return _state(request, "trade_service")


def get_page_request(
    page: Annotated[int, Query(description="Zero-based page number")] = DEFAULT_PAGE,
    size: Annotated[int, Query(description="Page size (1-100)")] = DEFAULT_PAGE_SIZE,
    sort_by: Annotated[str | None, Query(alias="sortBy", description="Field to sort by")] = None,
    sort_direction: Annotated[
        str | None, Query(alias="sortDirection", description="ASC or DESC")
    ] = None,
) -> PageRequest:
    """
    Parse and validate pagination query parameters.

    Raises InvalidPageRequestError (HTTP 400) before any cache lookup.
    """
    return PageRequest.from_query(page, size, sort_by, sort_direction)


# ============================================================================
# TYPE ALIASES FOR CLEANER ROUTE SIGNATURES
# ============================================================================

SettingsDep = Annotated[Settings, Depends(get_app_settings)]
CacheDep = Annotated[CacheManager, Depends(get_cache)]
MetricsDep = Annotated[MetricsCollector, Depends(get_metrics)]
ExecutorDep = Annotated[TaskExecutor, Depends(get_executor)]
DatabaseDep = Annotated[Database, Depends(get_database)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
TradeServiceDep = Annotated[TradeService, Depends(get_trade_service)]
PageRequestDep = Annotated[PageRequest, Depends(get_page_request)]
