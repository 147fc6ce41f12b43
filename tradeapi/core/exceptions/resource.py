"""
Resource Exceptions

Raised by the service layer when an entity cannot be found.

Author: System Architect
Date: 2026-10-19
"""

from tradeapi.core.exceptions.base import TradeApiError


class ResourceNotFoundError(TradeApiError):
    """Base class for missing entities. Mapped to HTTP 404."""

    status_code = 404


class UserNotFoundError(ResourceNotFoundError):
    """Raised when no user exists with the requested id."""
    pass


class TradeNotFoundError(ResourceNotFoundError):
    """Raised when no trade exists with the requested id."""
    pass
