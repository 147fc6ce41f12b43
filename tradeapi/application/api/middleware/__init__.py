"""
Middleware Package
==================

AVAILABLE MIDDLEWARE:
---------------------
1. request_context: request id correlation and request/error counting
2. error_handler: catch-all for unhandled exceptions

MIDDLEWARE ORDERING:
--------------------
Middleware executes in order for requests and in reverse order for
responses. ErrorHandlingMiddleware sits inside RequestContextMiddleware so
that the 500 it produces is still counted and still carries the request id.
"""

from tradeapi.application.api.middleware.error_handler import ErrorHandlingMiddleware
from tradeapi.application.api.middleware.request_context import RequestContextMiddleware

__all__ = ["ErrorHandlingMiddleware", "RequestContextMiddleware"]
