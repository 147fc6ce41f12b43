"""
Database Exceptions

Author: System Architect
Date: 2026-10-19
"""

from tradeapi.core.exceptions.base import TradeApiError


class DatabaseError(TradeApiError):
    """
    Raised when a repository operation fails.

    Always carries the failing operation name in ``details["operation"]``.
    """

    @classmethod
    def for_operation(cls, operation: str, exc: Exception) -> "DatabaseError":
        """Wrap a driver/ORM exception raised while running ``operation``."""
        return cls.from_exception(
            exc, message=f"Database operation failed: {operation}", operation=operation
        )
