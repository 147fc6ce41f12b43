#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
Trade API. All configuration is centralized here to ensure consistency
across modules.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing: pass a Settings instance to create_app() or reload_settings()

Author: System Architect
Date: 2026-10-19
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CacheSettings(BaseSettings):
    """
    Cache-aside store configuration.

    Fixed at construction of the CacheManager; changing these at runtime has
    no effect on an already-built store.
    """

    CACHE_ENABLED: bool = Field(default=True, description="Enable the in-process cache")
    CACHE_MAX_SIZE: int = Field(default=1000, gt=0, description="Maximum cached entries")
    CACHE_EXPIRE_AFTER_WRITE_MINUTES: float = Field(
        default=30, gt=0, description="Minutes after the last write before an entry expires"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)

    @property
    def expire_after_write_seconds(self) -> float:
        return self.CACHE_EXPIRE_AFTER_WRITE_MINUTES * 60


class DatabaseSettings(BaseSettings):
    """
    Relational database configuration.

    The default is an in-memory SQLite database shared by every thread of
    the process.
    """

    DATABASE_URL: str = Field(default="sqlite://", description="SQLAlchemy database URL")
    DATABASE_ECHO: bool = Field(default=False, description="Log every SQL statement")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ExecutorSettings(BaseSettings):
    """Worker pool used for blocking work submitted from async routes."""

    ASYNC_MAX_WORKERS: int | None = Field(
        default=None, gt=0, description="Worker threads (default: 2 x CPU count)"
    )
    ASYNC_SHUTDOWN_TIMEOUT: float = Field(
        default=30.0, ge=0, description="Seconds to wait for in-flight tasks on shutdown"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    Architectural Decision: structlog for production-grade logging
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """General application settings."""

    ENVIRONMENT: Literal["development", "test", "staging", "production"] = Field(
        default="development", description="Application environment"
    )
    APP_NAME: str = Field(default="Trade API", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")

    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8080, description="API port")
    API_BASE_PATH: str = Field(default="/api/v1", description="Prefix for resource routes")

    DOCS_ENABLED: bool = Field(default=True, description="Serve OpenAPI docs at /docs and /redoc")
    METRICS_ENABLED: bool = Field(default=True, description="Record Prometheus metrics")
    CORS_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    Usage:
        from tradeapi.core.config.settings import get_settings

        settings = get_settings()
        max_size = settings.cache.CACHE_MAX_SIZE
        url = settings.database.DATABASE_URL

    The flat fields are what the environment populates; the grouped
    properties give each subsystem a narrow view of its own section.
    """

    # Cache
    CACHE_ENABLED: bool = Field(default=True, description="Enable the in-process cache")
    CACHE_MAX_SIZE: int = Field(default=1000, gt=0, description="Maximum cached entries")
    CACHE_EXPIRE_AFTER_WRITE_MINUTES: float = Field(
        default=30, gt=0, description="Minutes after the last write before an entry expires"
    )

    # Database
    DATABASE_URL: str = Field(default="sqlite://", description="SQLAlchemy database URL")
    DATABASE_ECHO: bool = Field(default=False, description="Log every SQL statement")

    # Executor
    ASYNC_MAX_WORKERS: int | None = Field(
        default=None, gt=0, description="Worker threads (default: 2 x CPU count)"
    )
    ASYNC_SHUTDOWN_TIMEOUT: float = Field(
        default=30.0, ge=0, description="Seconds to wait for in-flight tasks on shutdown"
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application
    ENVIRONMENT: Literal["development", "test", "staging", "production"] = Field(
        default="development", description="Application environment"
    )
    APP_NAME: str = Field(default="Trade API", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8080, description="API port")
    API_BASE_PATH: str = Field(default="/api/v1", description="Prefix for resource routes")
    DOCS_ENABLED: bool = Field(default=True, description="Serve OpenAPI docs at /docs and /redoc")
    METRICS_ENABLED: bool = Field(default=True, description="Record Prometheus metrics")
    CORS_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("API_BASE_PATH")
    @classmethod
    def normalize_base_path(cls, v):
        """Strip the trailing slash so routers can be mounted with a plain prefix."""
        return v.rstrip("/")

    # Grouped views

    @property
    def cache(self) -> CacheSettings:
        """Get cache settings."""
        return CacheSettings(
            CACHE_ENABLED=self.CACHE_ENABLED,
            CACHE_MAX_SIZE=self.CACHE_MAX_SIZE,
            CACHE_EXPIRE_AFTER_WRITE_MINUTES=self.CACHE_EXPIRE_AFTER_WRITE_MINUTES,
        )

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return DatabaseSettings(
            DATABASE_URL=self.DATABASE_URL,
            DATABASE_ECHO=self.DATABASE_ECHO,
        )

    @property
    def executor(self) -> ExecutorSettings:
        """Get worker pool settings."""
        return ExecutorSettings(
            ASYNC_MAX_WORKERS=self.ASYNC_MAX_WORKERS,
            ASYNC_SHUTDOWN_TIMEOUT=self.ASYNC_SHUTDOWN_TIMEOUT,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    @property
    def app(self) -> ApplicationSettings:
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            API_HOST=self.API_HOST,
            API_PORT=self.API_PORT,
            API_BASE_PATH=self.API_BASE_PATH,
            DOCS_ENABLED=self.DOCS_ENABLED,
            METRICS_ENABLED=self.METRICS_ENABLED,
            CORS_ORIGINS=self.CORS_ORIGINS,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings(**overrides) -> Settings:
    """
    Rebuild the global settings instance (useful for testing).

    Args:
        **overrides: Field values that take precedence over the environment

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings(**overrides)
    return _settings
