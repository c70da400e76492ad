"""
Thread pool used to parallelize force evaluation.
"""

from .thread_pool import (
    PoolShutdownError,
    ThreadPool,
    default_worker_count,
    partition_ranges,
)

__all__ = [
    "ThreadPool",
    "PoolShutdownError",
    "default_worker_count",
    "partition_ranges",
]
