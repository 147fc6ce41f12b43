"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys

import pytest
from fastapi.testclient import TestClient

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tests.test_fixtures.clock import FakeClock  # noqa: E402

# ============================================================================
# Pytest Configuration
# ============================================================================

# pytest-asyncio is loaded via pyproject.toml (asyncio_mode = "auto")


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def test_settings():
    """
    Settings for an isolated test app.

    In-memory SQLite, a small worker pool and quiet console logging.
    """
    from tradeapi.core.config.settings import Settings

    return Settings(
        ENVIRONMENT="test",
        LOG_LEVEL="WARNING",
        LOG_FORMAT="console",
        DATABASE_URL="sqlite://",
        ASYNC_MAX_WORKERS=4,
        ASYNC_SHUTDOWN_TIMEOUT=5,
        CACHE_ENABLED=True,
        CACHE_MAX_SIZE=100,
        CACHE_EXPIRE_AFTER_WRITE_MINUTES=30,
        METRICS_ENABLED=True,
    )


# ============================================================================
# Infrastructure Fixtures
# ============================================================================


@pytest.fixture
def fake_clock():
    """Manually advanced monotonic clock for TTL tests."""
    return FakeClock()


@pytest.fixture
def metrics():
    """Metrics collector with its own registry."""
    from tradeapi.infrastructure.monitoring.metrics_collector import MetricsCollector

    return MetricsCollector()


@pytest.fixture
def cache_manager(metrics, fake_clock):
    """Enabled cache: 100 entries, one hour expire-after-write, fake clock."""
    from tradeapi.infrastructure.cache.cache_manager import CacheManager

    return CacheManager(metrics, max_size=100, expire_after_write=3600, clock=fake_clock)


@pytest.fixture
def database():
    """Fresh in-memory database with the schema created."""
    from tradeapi.infrastructure.database.session import Database

    db = Database("sqlite://")
    db.create_schema()
    yield db
    db.close()


@pytest.fixture
def user_repository(database):
    from tradeapi.infrastructure.database.repositories import UserRepository

    return UserRepository(database)


@pytest.fixture
def trade_repository(database):
    from tradeapi.infrastructure.database.repositories import TradeRepository

    return TradeRepository(database)


@pytest.fixture
def user_service(user_repository):
    from tradeapi.application.services.resource_service import UserService

    return UserService(user_repository)


@pytest.fixture
def trade_service(trade_repository):
    from tradeapi.application.services.resource_service import TradeService

    return TradeService(trade_repository)


@pytest.fixture
def executor():
    """Small worker pool, shut down after the test."""
    from tradeapi.core.concurrency.task_executor import TaskExecutor

    pool = TaskExecutor(max_workers=4, shutdown_timeout=5)
    yield pool
    pool.shutdown(timeout=1)


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app(test_settings):
    from tradeapi.application.app import create_app

    return create_app(test_settings)


@pytest.fixture
def client(app):
    """TestClient with the lifespan running (singletons on app.state)."""
    with TestClient(app) as test_client:
        yield test_client
