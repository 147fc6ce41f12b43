"""
Request Context Middleware
==========================

Runs around every request:

1. Reads ``X-Request-ID`` from the request (or generates a UUID4) and binds
   it to the logging context so every log line carries it
2. Counts ``http.requests.total`` and, for 4xx/5xx responses,
   ``http.requests.errors``
3. Echoes the request id back in the response headers
"""

import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from tradeapi.core.config.constants import (
    HEADER_REQUEST_ID,
    METRIC_HTTP_ERRORS,
    METRIC_HTTP_REQUESTS,
)
from tradeapi.core.logging.logger import clear_request_id, get_logger, set_request_id

logger = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Request id correlation and request counting."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(HEADER_REQUEST_ID) or str(uuid.uuid4())
        set_request_id(request_id)

        metrics = getattr(request.app.state, "metrics", None)
        start = time.perf_counter()

        try:
            response = await call_next(request)

            if metrics is not None:
                metrics.increment_counter(METRIC_HTTP_REQUESTS)
                if response.status_code >= 400:
                    metrics.increment_counter(METRIC_HTTP_ERRORS)

            logger.debug(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )

            response.headers[HEADER_REQUEST_ID] = request_id
            return response

        finally:
            clear_request_id()
