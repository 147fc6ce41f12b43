"""
Concurrency Module

Bounded worker pool for running blocking work from async code.
"""

from .task_executor import TaskExecutor, default_worker_count

__all__ = [
    "TaskExecutor",
    "default_worker_count",
]
