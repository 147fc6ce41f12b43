"""
Concurrency Exceptions

Raised by the TaskExecutor worker pool.

Author: System Architect
Date: 2026-10-19
"""

from tradeapi.core.exceptions.base import TradeApiError


class TaskExecutionError(TradeApiError):
    """Raised when a task submitted to the worker pool fails."""
    pass


class ExecutorShutdownError(TaskExecutionError):
    """Raised when work is submitted after the pool has been shut down."""
    pass
