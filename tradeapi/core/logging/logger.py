#!/usr/bin/env python3
"""
Structured Logging for the Trade API

structlog configured over the standard library, so that log lines from
uvicorn, SQLAlchemy and our own modules all leave through one handler.

Every event carries:
    timestamp    UTC, ISO-8601 with a trailing Z
    level        upper-case level name
    request_id   bound by RequestContextMiddleware for the current request
    service      app name and environment, bound once at startup

Architectural Decision: request id in a ContextVar
- Set by the middleware, read by a processor; sync routes running on the
  threadpool inherit it because anyio copies the context into worker threads

Author: System Architect
Date: 2026-10-19
"""

import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from tradeapi.core.config.settings import get_settings

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

# Populated by setup_logging(); merged into every event
_service_fields: dict[str, Any] = {}

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "uvicorn.access")


# ============================================================================
# PROCESSORS
# ============================================================================


def add_request_id(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    request_id = request_id_ctx.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    now = datetime.now(timezone.utc)
    event_dict["timestamp"] = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
    return event_dict


def add_log_level_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Uppercase the level added by structlog.stdlib.add_log_level."""
    level = event_dict.get("level")
    if level:
        event_dict["level"] = level.upper()
    return event_dict


def add_service_fields(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    for key, value in _service_fields.items():
        event_dict.setdefault(key, value)
    return event_dict


def _processors(log_format: str) -> list[Processor]:
    renderer: Processor
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    return [
        structlog.contextvars.merge_contextvars,
        add_request_id,
        add_service_fields,
        add_timestamp,
        structlog.stdlib.add_log_level,
        add_log_level_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        renderer,
    ]


# ============================================================================
# SETUP
# ============================================================================


def setup_logging(
    log_level: str | None = None,
    log_format: str | None = None,
    service: dict[str, Any] | None = None,
    sql_echo: bool = False,
) -> None:
    """
    Configure stdlib logging and structlog for the process.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL (default: settings)
        log_format: 'json' or 'console' (default: settings)
        service: Static fields added to every event (name, environment)
        sql_echo: Keep SQLAlchemy engine logging at INFO

    Calling this more than once reconfigures logging; the last call wins.
    """
    settings = get_settings()
    level_name = (log_level or settings.logging.LOG_LEVEL).upper()
    log_format = log_format or settings.logging.LOG_FORMAT
    level = getattr(logging, level_name)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)
    for name in _QUIET_LOGGERS:
        quiet_level = logging.INFO if sql_echo and name == "sqlalchemy.engine" else logging.WARNING
        logging.getLogger(name).setLevel(max(level, quiet_level))

    _service_fields.clear()
    _service_fields.update(service or {})

    structlog.configure(
        processors=_processors(log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Usage:
        logger = get_logger(__name__)
        logger.info("Trade created", entity_id=7)
    """
    return structlog.get_logger(name)


# ============================================================================
# REQUEST CONTEXT
# ============================================================================


def set_request_id(request_id: str) -> None:
    request_id_ctx.set(request_id)


def get_request_id() -> str | None:
    return request_id_ctx.get()


def clear_request_id() -> None:
    request_id_ctx.set(None)
