"""
Validation Exceptions

All exceptions related to request validation.

Author: System Architect
Date: 2026-10-19
"""

from tradeapi.core.exceptions.base import TradeApiError


class ValidationError(TradeApiError):
    """
    Raised when request validation fails.

    This is the base class for all validation-related errors. Mapped to
    HTTP 400 by the application's exception handlers.
    """

    status_code = 400


class InvalidPageRequestError(ValidationError):
    """
    Raised when pagination parameters are out of range.

    Common causes:
    - Negative page number
    - Page size below 1 or above 100
    - Sort direction other than ASC/DESC
    """
    pass
