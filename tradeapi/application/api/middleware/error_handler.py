"""
Error Handling Middleware
=========================

Catch-all for exceptions no FastAPI exception handler claimed, i.e.
anything outside the TradeApiError hierarchy (a bug, a driver error that
escaped a repository, ...).

The client gets the same body shape as every other error, with
``error_type = "InternalServerError"`` and the request id; the exception
itself is logged with its traceback. The traceback is copied into
``details`` only when ``include_traceback`` is set (development).
"""

import traceback
from collections.abc import Callable
from typing import Any

from fastapi import Request, Response
from fastapi.responses import ORJSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from tradeapi.core.config.constants import HEADER_REQUEST_ID
from tradeapi.core.logging.logger import get_logger, get_request_id

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred while processing your request"


def internal_error_body(exc: Exception, include_traceback: bool = False) -> dict[str, Any]:
    details: dict[str, Any] = {}
    if include_traceback:
        details = {
            "exception": type(exc).__name__,
            "detail": str(exc),
            "traceback": "".join(traceback.format_exception(exc)),
        }
    return {
        "error_type": "InternalServerError",
        "message": INTERNAL_ERROR_MESSAGE,
        "request_id": get_request_id(),
        "details": details,
    }


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn an unhandled exception into a 500 JSON response."""

    def __init__(self, app, include_traceback: bool = False):
        super().__init__(app)
        self.include_traceback = include_traceback

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(
                "Unhandled exception",
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                error=str(e),
                exc_info=True,
            )
            body = internal_error_body(e, self.include_traceback)
            return ORJSONResponse(
                status_code=500,
                content=body,
                headers={HEADER_REQUEST_ID: body["request_id"] or ""},
            )
