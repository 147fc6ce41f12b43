"""
Root of the Trade API exception hierarchy.

Every error the service raises on purpose derives from TradeApiError and
knows the HTTP status it maps to, so the exception handlers in
application/app.py only decide how loudly to log.

    TradeApiError (500)
    ├── ConfigurationError (500)
    ├── ValidationError (400)            validation.py
    ├── ResourceNotFoundError (404)      resource.py
    ├── DatabaseError (500)              database.py
    ├── TaskExecutionError (500)         concurrency.py
    └── CacheError                       cache.py, never leaves the cache

Author: System Architect
Date: 2026-10-19
"""

from typing import Any


class TradeApiError(Exception):
    """
    Base exception for all Trade API errors.

    Attributes:
        message: Human readable description, returned to the client
        request_id: Correlation id; filled from the logging context when
            the error is rendered if it was not set here
        details: Structured context (ids, operation names, causes)
        status_code: HTTP status the error renders as

    Example:
        raise TradeNotFoundError(
            "Trade not found with id: 7",
            details={"trade_id": 7},
        )
    """

    status_code: int = 500

    def __init__(
        self, message: str, request_id: str | None = None, details: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.message = message
        self.request_id = request_id
        self.details = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        """Error body: ``{error_type, message, request_id, details}``."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "request_id": self.request_id,
            "details": self.details,
        }

    def with_context(self, **context: Any) -> "TradeApiError":
        """Merge ``context`` into details and return self."""
        self.details.update(context)
        return self

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        message: str | None = None,
        request_id: str | None = None,
        **details: Any,
    ) -> "TradeApiError":
        """
        Wrap a third-party exception, keeping its type and text in details.

        Example:
            >>> try:
            ...     session.execute(stmt)
            ... except SQLAlchemyError as e:
            ...     raise DatabaseError.from_exception(e, operation="trades.count") from e
        """
        cause = {"cause_type": type(exc).__name__, "cause_message": str(exc)}
        return cls(message or str(exc), request_id=request_id, details={**cause, **details})

    def __repr__(self) -> str:
        parts = [repr(self.message)]
        if self.request_id:
            parts.append(f"request_id={self.request_id!r}")
        if self.details:
            parts.append(f"details={self.details}")
        return f"{type(self).__name__}({', '.join(parts)})"


class ConfigurationError(TradeApiError):
    """Invalid settings or constructor arguments (e.g. a cache size of 0)."""
