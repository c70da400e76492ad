"""Tests for the worker thread pool and range partitioning."""

import threading
import time

import pytest

from nbody2d.parallel import (
    PoolShutdownError,
    ThreadPool,
    default_worker_count,
    partition_ranges,
)
from nbody2d.validation import InvalidWorkerCountError

# Every pool size up to the detected core count, capped to bound runtime
MAX_TESTED_POOL_SIZE = 16
POOL_SIZES = list(range(1, min(default_worker_count(), MAX_TESTED_POOL_SIZE) + 1))


class TestPartitionRanges:
    """Tests for splitting work into contiguous ranges."""

    def test_even_split(self):
        """Divisible counts give equal ranges."""
        assert partition_ranges(8, 4) == [(0, 2), (2, 4), (4, 6), (6, 8)]

    def test_remainder_goes_first(self):
        """Earlier ranges take the extra items."""
        assert partition_ranges(10, 3) == [(0, 4), (4, 7), (7, 10)]

    def test_fewer_items_than_parts(self):
        """Empty ranges are never returned."""
        assert partition_ranges(2, 4) == [(0, 1), (1, 2)]

    def test_zero_items(self):
        """Nothing to split gives no ranges."""
        assert partition_ranges(0, 4) == []

    def test_invalid_parts(self):
        """parts below 1 raises ValueError."""
        with pytest.raises(ValueError, match="parts must be >= 1"):
            partition_ranges(10, 0)

    def test_no_gaps_or_overlaps(self):
        """Ranges tile 0..count exactly with sizes within one of each other."""
        for count in range(0, 60):
            for parts in range(1, 10):
                ranges = partition_ranges(count, parts)
                assert len(ranges) == min(count, parts)

                position = 0
                for start, stop in ranges:
                    assert start == position
                    assert stop > start
                    position = stop
                assert position == count

                if ranges:
                    sizes = [stop - start for start, stop in ranges]
                    assert max(sizes) - min(sizes) <= 1


class TestDefaultWorkerCount:
    """Tests for hardware concurrency detection."""

    def test_at_least_one(self):
        """Detected count is always positive."""
        assert default_worker_count() >= 1

    def test_fallback_when_unknown(self, monkeypatch):
        """Unknown CPU count falls back to 4."""
        monkeypatch.setattr("os.cpu_count", lambda: None)
        assert default_worker_count() == 4


class TestThreadPool:
    """Tests for task execution and the wait() barrier."""

    def test_size(self):
        """Pool reports its fixed size."""
        with ThreadPool(3) as pool:
            assert pool.size == 3
            assert len(pool) == 3

    def test_default_size(self):
        """None uses the detected worker count."""
        with ThreadPool() as pool:
            assert pool.size == default_worker_count()

    def test_invalid_size(self):
        """Zero or non-integer sizes raise InvalidWorkerCountError."""
        with pytest.raises(InvalidWorkerCountError, match="must be >= 1"):
            ThreadPool(0)
        with pytest.raises(InvalidWorkerCountError, match="must be an integer"):
            ThreadPool(2.5)

    def test_wait_without_tasks(self):
        """wait() on an idle pool returns immediately."""
        with ThreadPool(2) as pool:
            pool.wait()
            assert pool.pending == 0
            assert pool.active == 0

    @pytest.mark.parametrize("size", POOL_SIZES)
    @pytest.mark.parametrize("count", [0, 1, 7, 100, 3000])
    def test_barrier_runs_every_task(self, size, count):
        """Every enqueued task has finished when wait() returns."""
        lock = threading.Lock()
        done = [0]

        def task():
            with lock:
                done[0] += 1

        with ThreadPool(size) as pool:
            for _ in range(count):
                pool.enqueue(task)
            pool.wait()
            assert done[0] == count
            assert pool.pending == 0
            assert pool.active == 0

    def test_reuse_across_waits(self):
        """The same pool serves many enqueue/wait rounds."""
        results = []
        lock = threading.Lock()

        with ThreadPool(4) as pool:
            for round_number in range(50):
                for i in range(8):
                    def task(r=round_number, i=i):
                        with lock:
                            results.append((r, i))

                    pool.enqueue(task)
                pool.wait()
                assert len(results) == (round_number + 1) * 8

    def test_disjoint_writes(self):
        """Tasks writing separate ranges fill the whole buffer."""
        data = [0] * 1000

        with ThreadPool(4) as pool:
            for start, stop in partition_ranges(len(data), pool.size):
                def task(start=start, stop=stop):
                    for i in range(start, stop):
                        data[i] = i * i

                pool.enqueue(task)
            pool.wait()

        assert data == [i * i for i in range(1000)]

    def test_wait_reraises_task_error(self):
        """The first task exception surfaces from wait()."""

        def failing():
            raise ValueError("boom")

        with ThreadPool(2) as pool:
            pool.enqueue(failing)
            with pytest.raises(ValueError, match="boom"):
                pool.wait()

            # The error is consumed and the workers survive
            pool.wait()
            ran = threading.Event()
            pool.enqueue(ran.set)
            pool.wait()
            assert ran.is_set()

    def test_task_system_exit_keeps_pool_usable(self):
        """A task raising SystemExit surfaces from wait() and the worker survives."""

        def exiting():
            raise SystemExit("task exit")

        outcome = []

        def waiter(pool):
            try:
                pool.wait()
            except SystemExit as exc:
                outcome.append(exc)

        with ThreadPool(1) as pool:
            pool.enqueue(exiting)
            thread = threading.Thread(target=waiter, args=(pool,), daemon=True)
            thread.start()
            thread.join(timeout=10)

            assert not thread.is_alive()
            assert len(outcome) == 1
            assert str(outcome[0]) == "task exit"
            assert pool.active == 0

            ran = threading.Event()
            pool.enqueue(ran.set)
            pool.wait()
            assert ran.is_set()

    def test_wait_from_worker_raises(self):
        """Calling wait() inside a task raises instead of deadlocking."""
        captured = []

        with ThreadPool(2) as pool:

            def task():
                try:
                    pool.wait()
                except RuntimeError as exc:
                    captured.append(exc)

            pool.enqueue(task)
            pool.wait()

        assert len(captured) == 1
        assert "deadlock" in str(captured[0])


class TestThreadPoolShutdown:
    """Tests for shutdown semantics."""

    def test_shutdown_state(self):
        """shutdown() marks the pool as stopped."""
        pool = ThreadPool(2)
        assert not pool.is_shutdown
        pool.shutdown()
        assert pool.is_shutdown

    def test_enqueue_after_shutdown(self):
        """Enqueueing on a stopped pool raises PoolShutdownError."""
        pool = ThreadPool(1)
        pool.shutdown()
        with pytest.raises(PoolShutdownError, match="shut down"):
            pool.enqueue(lambda: None)

    def test_double_shutdown(self):
        """A second shutdown() raises PoolShutdownError."""
        pool = ThreadPool(1)
        pool.shutdown()
        with pytest.raises(PoolShutdownError, match="already shut down"):
            pool.shutdown()

    def test_context_manager_shuts_down(self):
        """Leaving the with block stops the pool."""
        with ThreadPool(2) as pool:
            pass
        assert pool.is_shutdown

    def test_context_manager_after_manual_shutdown(self):
        """Exiting after an explicit shutdown() is not an error."""
        with ThreadPool(2) as pool:
            pool.shutdown()
        assert pool.is_shutdown

    def test_shutdown_drops_queued_tasks(self):
        """Queued tasks are discarded; the running task finishes."""
        started = threading.Event()
        release = threading.Event()
        finished = threading.Event()
        counter = [0]

        def blocker():
            started.set()
            release.wait(timeout=10)
            finished.set()

        def increment():
            counter[0] += 1

        pool = ThreadPool(1)
        pool.enqueue(blocker)
        assert started.wait(timeout=10)
        for _ in range(10):
            pool.enqueue(increment)
        assert pool.pending == 10

        stopper = threading.Thread(target=pool.shutdown)
        stopper.start()

        deadline = time.monotonic() + 10
        while not pool.is_shutdown and time.monotonic() < deadline:
            time.sleep(0.001)
        assert pool.pending == 0

        release.set()
        stopper.join(timeout=10)

        assert not stopper.is_alive()
        assert finished.is_set()
        assert counter[0] == 0

    def test_repr(self):
        """repr shows size and state."""
        pool = ThreadPool(2)
        assert repr(pool) == "ThreadPool(size=2, running)"
        pool.shutdown()
        assert repr(pool) == "ThreadPool(size=2, shutdown)"
