"""
FastAPI Application Entry Point

This is the main entry point for the Trade API.
It configures the FastAPI application, middleware, and routes.

Startup order (lifespan):
    settings -> logging -> metrics -> cache -> database -> executor -> services

Every singleton lives on ``app.state`` and is reached through
application/api/dependencies.py; nothing is stored in module globals, so
two apps built with different Settings never share a cache or a database.

Author: Senior Solution Architect
Date: 2026-10-19
"""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from tradeapi.application.api.middleware.error_handler import ErrorHandlingMiddleware
from tradeapi.application.api.middleware.request_context import RequestContextMiddleware
from tradeapi.application.api.models.admin import ServiceInfo
from tradeapi.application.api.routes.admin import router as admin_router
from tradeapi.application.api.routes.health import router as health_router
from tradeapi.application.api.routes.trades import router as trades_router
from tradeapi.application.api.routes.users import router as users_router
from tradeapi.application.services.resource_service import TradeService, UserService
from tradeapi.core.concurrency.task_executor import TaskExecutor
from tradeapi.core.config.constants import HEADER_REQUEST_ID
from tradeapi.core.config.settings import Settings, get_settings
from tradeapi.core.exceptions import (
    DatabaseError,
    ResourceNotFoundError,
    TradeApiError,
    ValidationError,
)
from tradeapi.core.logging.logger import get_logger, get_request_id, setup_logging
from tradeapi.infrastructure.cache.cache_manager import CacheManager
from tradeapi.infrastructure.database.repositories import TradeRepository, UserRepository
from tradeapi.infrastructure.database.session import Database
from tradeapi.infrastructure.monitoring.metrics_collector import MetricsCollector

logger = get_logger(__name__)


# ============================================================================
# APPLICATION LIFECYCLE
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle (startup and shutdown).
    """
    settings: Settings = app.state.settings

    setup_logging(
        log_level=settings.logging.LOG_LEVEL,
        log_format=settings.logging.LOG_FORMAT,
        service={"service": settings.app.APP_NAME, "environment": settings.app.ENVIRONMENT},
        sql_echo=settings.database.DATABASE_ECHO,
    )

    logger.info(
        "Starting Trade API",
        environment=settings.app.ENVIRONMENT,
        version=settings.app.APP_VERSION,
    )

    metrics = MetricsCollector(
        enabled=settings.app.METRICS_ENABLED,
        app_info={
            "name": settings.app.APP_NAME,
            "version": settings.app.APP_VERSION,
            "environment": settings.app.ENVIRONMENT,
        },
    )
    app.state.metrics = metrics

    cache = CacheManager.from_settings(settings, metrics)
    app.state.cache = cache

    database = Database.from_settings(settings)
    database.create_schema()
    app.state.database = database

    executor = TaskExecutor.from_settings(settings)
    app.state.executor = executor

    app.state.user_service = UserService(UserRepository(database))
    app.state.trade_service = TradeService(TradeRepository(database))

    logger.info("Application startup complete")

    try:
        yield
    finally:
        logger.info("Shutting down application")

        # Draining can take up to ASYNC_SHUTDOWN_TIMEOUT; keep the loop free
        await asyncio.to_thread(executor.shutdown)
        cache.evict_all()
        database.close()

        logger.info("Application shutdown complete")


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================


def _error_response(exc: TradeApiError) -> ORJSONResponse:
    body = exc.to_dict()
    body["request_id"] = exc.request_id or get_request_id()
    return ORJSONResponse(
        status_code=exc.status_code,
        content=body,
        headers={HEADER_REQUEST_ID: body["request_id"] or ""},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Render TradeApiError subclasses with their own status_code. Handlers
    differ only in log level:

        ValidationError (incl. InvalidPageRequestError)   400
        RequestValidationError (bad body / query)         400
        ResourceNotFoundError                             404
        DatabaseError                                     500
        any other TradeApiError                           500
    """

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg", "")}
            for err in exc.errors()
        ]
        logger.info("Request validation failed", path=request.url.path, errors=len(errors))
        return _error_response(
            ValidationError("Request validation failed", details={"errors": errors}),
        )

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        logger.info(f"Validation error: {exc.message}", path=request.url.path)
        return _error_response(exc)

    @app.exception_handler(ResourceNotFoundError)
    async def not_found_handler(request: Request, exc: ResourceNotFoundError):
        logger.info(f"Resource not found: {exc.message}", path=request.url.path)
        return _error_response(exc)

    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError):
        logger.error(
            f"Database error: {exc.message}",
            path=request.url.path,
            operation=exc.details.get("operation"),
        )
        return _error_response(exc)

    @app.exception_handler(TradeApiError)
    async def trade_api_error_handler(request: Request, exc: TradeApiError):
        logger.error(
            f"Application error: {exc.message}",
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _error_response(exc)


# ============================================================================
# APPLICATION FACTORY
# ============================================================================


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to build the app with (default: global settings)

    Returns:
        FastAPI: Configured application instance
    """
    settings = settings or get_settings()
    docs_enabled = settings.app.DOCS_ENABLED

    app = FastAPI(
        title=settings.app.APP_NAME,
        version=settings.app.APP_VERSION,
        description="Users and trades REST API with a cache-aside layer",
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )
    app.state.settings = settings

    # Added first so it sits innermost: the 500 it produces still passes
    # through the request context middleware
    app.add_middleware(
        ErrorHandlingMiddleware,
        include_traceback=(settings.app.ENVIRONMENT == "development"),
    )
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[HEADER_REQUEST_ID],
    )

    register_exception_handlers(app)

    base_path = settings.app.API_BASE_PATH

    app.include_router(health_router)
    app.include_router(users_router, prefix=base_path)
    app.include_router(trades_router, prefix=base_path)
    app.include_router(admin_router, prefix=base_path)

    @app.get("/", response_model=ServiceInfo, tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return ServiceInfo(
            name=settings.app.APP_NAME,
            version=settings.app.APP_VERSION,
            environment=settings.app.ENVIRONMENT,
            docs="/docs" if docs_enabled else None,
            endpoints={
                "users": f"{base_path}/users",
                "trades": f"{base_path}/trades",
                "cache_stats": f"{base_path}/cache/stats",
                "health": "/health",
                "metrics": "/metrics",
            },
        )

    return app


app = create_app()
