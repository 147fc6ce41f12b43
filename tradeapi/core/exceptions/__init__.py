"""
Exception Module

Structured exception hierarchy for the Trade API.
Exceptions are organized by theme.

Module Structure:
-----------------
- **base.py**: TradeApiError base class + ConfigurationError
- **cache.py**: Cache-internal failures (never raised to callers)
- **validation.py**: Request validation exceptions
- **resource.py**: Missing users/trades
- **database.py**: Repository failures
- **concurrency.py**: Worker pool failures

Usage:
------
```python
from tradeapi.core.exceptions import TradeNotFoundError, InvalidPageRequestError
```
"""

from tradeapi.core.exceptions.base import ConfigurationError, TradeApiError
from tradeapi.core.exceptions.cache import CacheError, CacheTypeMismatchError
from tradeapi.core.exceptions.concurrency import ExecutorShutdownError, TaskExecutionError
from tradeapi.core.exceptions.database import DatabaseError
from tradeapi.core.exceptions.resource import (
    ResourceNotFoundError,
    TradeNotFoundError,
    UserNotFoundError,
)
from tradeapi.core.exceptions.validation import InvalidPageRequestError, ValidationError

__all__ = [
    # Base
    "TradeApiError",
    "ConfigurationError",
    # Cache
    "CacheError",
    "CacheTypeMismatchError",
    # Concurrency
    "TaskExecutionError",
    "ExecutorShutdownError",
    # Database
    "DatabaseError",
    # Resources
    "ResourceNotFoundError",
    "UserNotFoundError",
    "TradeNotFoundError",
    # Validation
    "ValidationError",
    "InvalidPageRequestError",
]
