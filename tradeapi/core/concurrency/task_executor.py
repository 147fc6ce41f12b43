#!/usr/bin/env python3
"""
Task Executor - Bounded Worker Pool

Runs blocking work (repository queries) off the event loop so that async
routes never stall while the database answers.

Architecture:
    TaskExecutor (Public API: submit / run / shutdown)
        └── ThreadPoolExecutor (bounded, named worker threads)

Shutdown is two-phase:
    1. Stop accepting work and wait for in-flight tasks up to the timeout
    2. Cancel whatever is still queued

Error policy:
    - Errors already expressed as TradeApiError pass through untouched so
      the HTTP layer can map them (404, 500, ...)
    - Anything else is logged and re-raised as TaskExecutionError

Author: System Architect
Date: 2026-10-19
"""

import asyncio
import os
import threading
from collections.abc import Callable
from concurrent.futures import ALL_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any, TypeVar

from tradeapi.core.config.constants import DEFAULT_SHUTDOWN_TIMEOUT_SECONDS
from tradeapi.core.exceptions import ExecutorShutdownError, TaskExecutionError, TradeApiError
from tradeapi.core.logging.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def default_worker_count() -> int:
    """Two workers per CPU, matching an IO-bound workload."""
    return (os.cpu_count() or 1) * 2


class TaskExecutor:
    """
    Bounded thread pool with logging and graceful shutdown.

    Usage:
        executor = TaskExecutor(max_workers=8)

        future = executor.submit(repository.count)
        rows = await executor.run(repository.list_page, 0, 20)

        executor.shutdown()
    """

    def __init__(
        self,
        max_workers: int | None = None,
        shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT_SECONDS,
        thread_name_prefix: str = "trade-api-worker",
    ):
        self._max_workers = max_workers or default_worker_count()
        self._shutdown_timeout = shutdown_timeout
        self._pool = ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix=thread_name_prefix
        )
        self._pending: set[Future] = set()
        self._lock = threading.Lock()
        self._shutdown = False

        logger.info(
            "Task executor initialized",
            max_workers=self._max_workers,
            shutdown_timeout=shutdown_timeout,
        )

    @classmethod
    def from_settings(cls, settings) -> "TaskExecutor":
        executor_settings = settings.executor
        return cls(
            max_workers=executor_settings.ASYNC_MAX_WORKERS,
            shutdown_timeout=executor_settings.ASYNC_SHUTDOWN_TIMEOUT,
        )

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    # =========================================================================
    # Submission
    # =========================================================================

    def submit(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Future:
        """
        Schedule ``fn(*args, **kwargs)`` on the pool.

        Raises:
            ExecutorShutdownError: If shutdown() has already been called
        """
        with self._lock:
            if self._shutdown:
                raise ExecutorShutdownError(
                    "Task executor is shut down", details={"task": _task_name(fn)}
                )
            future = self._pool.submit(self._execute, fn, args, kwargs)
            self._pending.add(future)

        future.add_done_callback(self._discard)
        return future

    async def run(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run ``fn`` on the pool and await its result without blocking the loop.

        Cancelling the awaiting coroutine cancels the task if it has not
        started yet; a running task is left to finish.
        """
        future = self.submit(fn, *args, **kwargs)
        return await asyncio.wrap_future(future)

    def _execute(self, fn: Callable[..., T], args: tuple, kwargs: dict) -> T:
        try:
            return fn(*args, **kwargs)
        except TradeApiError:
            raise
        except Exception as e:
            logger.error(
                "Task failed",
                task=_task_name(fn),
                error_type=type(e).__name__,
                error=str(e),
                exc_info=True,
            )
            raise TaskExecutionError.from_exception(
                e, message=f"Task {_task_name(fn)} failed", task=_task_name(fn)
            ) from e

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def shutdown(self, timeout: float | None = None) -> None:
        """
        Stop accepting work, drain in-flight tasks, then cancel the rest.

        Args:
            timeout: Seconds to wait for in-flight tasks (default: the
                configured shutdown timeout)
        """
        timeout = self._shutdown_timeout if timeout is None else timeout

        with self._lock:
            if self._shutdown:
                return
            self._shutdown = True
            pending = set(self._pending)

        logger.info("Shutting down task executor", pending=len(pending), timeout=timeout)
        self._pool.shutdown(wait=False)

        if pending:
            _, not_done = wait(pending, timeout=timeout, return_when=ALL_COMPLETED)
            if not_done:
                logger.warning(
                    "Task executor did not terminate in time, cancelling remaining tasks",
                    remaining=len(not_done),
                )

        # Phase 2: drop queued work that never started
        self._pool.shutdown(wait=False, cancel_futures=True)
        logger.info("Task executor shut down")


def _task_name(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)
