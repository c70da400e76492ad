"""
Fixed-size worker thread pool with a quiescence barrier.

The pool knows nothing about physics: it runs zero-argument callables.
``wait()`` returns only once the queue is empty *and* no worker is still
running a task, which is what the simulation needs before it touches the
bodies again.
"""

from __future__ import annotations

import logging
import os
import threading
from collections import deque
from typing import Callable, Deque, List, Optional, Tuple

from ..validation import validate_worker_count

logger = logging.getLogger(__name__)

Task = Callable[[], None]

FALLBACK_WORKER_COUNT = 4


class PoolShutdownError(RuntimeError):
    """Raised when a pool is used or shut down after it was shut down."""

    pass


def default_worker_count() -> int:
    """Detected hardware concurrency, 4 if unknown, never below 1."""
    count = os.cpu_count()
    if not count:
        return FALLBACK_WORKER_COUNT
    return max(1, count)


def partition_ranges(count: int, parts: int) -> List[Tuple[int, int]]:
    """
    Split range(count) into contiguous, non-overlapping chunks.

    Chunk sizes differ by at most one, earlier chunks taking the extra
    items. Empty chunks are never returned, so fewer than ``parts``
    ranges come back when count < parts.

    Args:
        count: Number of items
        parts: Maximum number of chunks (>= 1)

    Returns:
        List of (start, stop) half-open ranges covering 0..count in order
    """
    if parts < 1:
        raise ValueError(f"parts must be >= 1, got {parts}")
    if count <= 0:
        return []

    parts = min(parts, count)
    base, extra = divmod(count, parts)
    ranges: List[Tuple[int, int]] = []
    start = 0
    for i in range(parts):
        stop = start + base + (1 if i < extra else 0)
        ranges.append((start, stop))
        start = stop
    return ranges


class ThreadPool:
    """
    Fixed set of worker threads consuming a shared task queue.

    Example:
        with ThreadPool(4) as pool:
            for start, stop in partition_ranges(len(items), pool.size):
                pool.enqueue(lambda s=start, e=stop: process(items[s:e]))
            pool.wait()

    Exceptions raised by tasks, SystemExit included, do not kill the
    worker. The first one since the previous wait() is re-raised from
    wait() after the pool is idle.

    Shutdown drops tasks that are still queued; tasks already running are
    allowed to finish.
    """

    def __init__(self, num_threads: Optional[int] = None) -> None:
        """
        Start the workers.

        Args:
            num_threads: Number of workers. None detects hardware concurrency.

        Raises:
            InvalidWorkerCountError: If num_threads is not an integer >= 1
        """
        workers = validate_worker_count(num_threads)
        self._size: int = workers if workers is not None else default_worker_count()

        self._tasks: Deque[Task] = deque()
        self._lock = threading.Lock()
        self._task_ready = threading.Condition(self._lock)
        self._idle = threading.Condition(self._lock)
        self._active: int = 0
        self._stop: bool = False
        self._errors: List[BaseException] = []

        self._workers: List[threading.Thread] = []
        for i in range(self._size):
            worker = threading.Thread(
                target=self._worker_loop,
                name=f"nbody2d-worker-{i}",
                daemon=True,
            )
            worker.start()
            self._workers.append(worker)
        self._worker_idents = frozenset(w.ident for w in self._workers)

        logger.debug("Started thread pool with %d workers", self._size)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def size(self) -> int:
        """Number of worker threads."""
        return self._size

    @property
    def pending(self) -> int:
        """Tasks queued but not yet started."""
        with self._lock:
            return len(self._tasks)

    @property
    def active(self) -> int:
        """Tasks currently executing."""
        with self._lock:
            return self._active

    @property
    def is_shutdown(self) -> bool:
        with self._lock:
            return self._stop

    def __len__(self) -> int:
        return self._size

    # -------------------------------------------------------------------------
    # Task Submission
    # -------------------------------------------------------------------------

    def enqueue(self, task: Task) -> None:
        """
        Queue a zero-argument callable and wake one idle worker.

        Raises:
            PoolShutdownError: If the pool has been shut down
        """
        with self._lock:
            if self._stop:
                raise PoolShutdownError("enqueue on a pool that has been shut down")
            self._tasks.append(task)
            self._task_ready.notify()

    def wait(self) -> None:
        """
        Block until every queued task has been dequeued and finished.

        Raises:
            RuntimeError: If called from one of this pool's workers
            BaseException: The first exception raised by a task since the last wait()
        """
        if threading.get_ident() in self._worker_idents:
            raise RuntimeError("wait() called from a pool worker would deadlock")

        with self._idle:
            self._idle.wait_for(lambda: not self._tasks and self._active == 0)
            if not self._errors:
                return
            error = self._errors[0]
            self._errors.clear()
        raise error

    def shutdown(self) -> None:
        """
        Stop the workers and join them.

        Queued tasks that no worker has picked up are discarded.

        Raises:
            PoolShutdownError: If the pool was already shut down
        """
        with self._lock:
            if self._stop:
                raise PoolShutdownError("thread pool already shut down")
            self._stop = True
            dropped = len(self._tasks)
            self._tasks.clear()
            self._task_ready.notify_all()
            self._idle.notify_all()

        if dropped:
            logger.debug("Dropped %d queued task(s) on shutdown", dropped)

        current = threading.get_ident()
        for worker in self._workers:
            if worker.ident != current:
                worker.join()
        logger.debug("Thread pool with %d workers shut down", self._size)

    def __enter__(self) -> ThreadPool:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if not self.is_shutdown:
            self.shutdown()

    # -------------------------------------------------------------------------
    # Worker
    # -------------------------------------------------------------------------

    def _worker_loop(self) -> None:
        while True:
            with self._task_ready:
                self._task_ready.wait_for(lambda: self._stop or bool(self._tasks))
                if self._stop and not self._tasks:
                    return
                task = self._tasks.popleft()
                self._active += 1

            error: Optional[BaseException] = None
            try:
                task()
            except BaseException as exc:
                error = exc
            finally:
                with self._lock:
                    if error is not None:
                        self._errors.append(error)
                    self._active -= 1
                    self._idle.notify_all()

    def __repr__(self) -> str:
        state = "shutdown" if self._stop else "running"
        return f"ThreadPool(size={self._size}, {state})"


__all__ = [
    "ThreadPool",
    "PoolShutdownError",
    "Task",
    "default_worker_count",
    "partition_ranges",
]
