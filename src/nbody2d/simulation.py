"""
Simulation orchestrators.

Simulation runs the Barnes-Hut pipeline every step: rebuild the quadtree
from the drifted positions on the calling thread, then let the worker
pool query it for disjoint ranges of bodies. DirectSimulation uses exact
pairwise summation instead and serves as the reference for accuracy
checks.
"""

from __future__ import annotations

import logging
import warnings
from typing import Callable, Iterable, List, Optional, Sequence

from .base import BaseSimulation
from .body import Body
from .constants import DEFAULT_SOFTENING, DEFAULT_THETA, FORCE_CEILING
from .metrics import body_arrays, direct_accelerations
from .parallel.thread_pool import ThreadPool, partition_ranges
from .spatial.quadtree import BarnesHutTree
from .types import EventCallback, Vector2D
from .validation import validate_theta

logger = logging.getLogger(__name__)


class AccuracyWarning(UserWarning):
    """Warning for legal settings that make the results unreliable."""

    pass


# Beyond this opening angle whole quadrants are routinely lumped together
MAX_RECOMMENDED_THETA = 1.0


class Simulation(BaseSimulation):
    """
    Barnes-Hut gravitational simulation with a parallel force phase.

    Each step is a kick-drift-kick leapfrog. Between the drift and the
    second kick the quadtree is rebuilt from scratch on the calling thread,
    then bodies are split into contiguous ranges, one pool task per range,
    and every task overwrites the accelerations of its own range from the
    now read-only tree.

    Example:
        with Simulation(theta=0.5, workers=4) as sim:
            sim.add_bodies(random_system(200, seed=1))
            sim.run(steps=1000, dt=TIME_STEP)

    The pool is created once and reused by every step; close() (or leaving
    the with block) shuts it down.
    """

    def __init__(
        self,
        *,
        bodies: Optional[Iterable[Body]] = None,
        theta: float = DEFAULT_THETA,
        softening: float = DEFAULT_SOFTENING,
        workers: Optional[int] = None,
        on_start: Optional[EventCallback] = None,
        on_tick: Optional[EventCallback] = None,
        on_end: Optional[EventCallback] = None,
    ) -> None:
        """
        Initialize Barnes-Hut simulation.

        Args:
            bodies: Initial bodies
            theta: Barnes-Hut opening angle (0 = exact, 0.5 = balanced)
            softening: Plummer softening length in AU
            workers: Thread pool size. None uses the detected CPU count.
            on_start: Callback for start event
            on_tick: Callback for tick event
            on_end: Callback for end event
        """
        super().__init__(
            bodies=bodies,
            softening=softening,
            on_start=on_start,
            on_tick=on_tick,
            on_end=on_end,
        )
        self._tree = BarnesHutTree(theta=DEFAULT_THETA, softening=self._softening)
        self.theta = theta
        self._pool = ThreadPool(workers)
        self._warn_if_unsoftened(self._softening)

        logger.debug(
            "Created Barnes-Hut simulation: %d bodies, theta=%g, softening=%g, %d workers",
            len(self._bodies),
            self.theta,
            self._softening,
            self._pool.size,
        )

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def theta(self) -> float:
        """Get Barnes-Hut opening angle."""
        return self._tree.theta

    @theta.setter
    def theta(self, value: float) -> None:
        """
        Set Barnes-Hut opening angle.

        Only the next force evaluation sees the new value; current
        accelerations are left as they are.

        Raises:
            InvalidThetaError: If value is negative or not finite
        """
        theta = validate_theta(value)
        if theta > MAX_RECOMMENDED_THETA:
            warnings.warn(
                f"theta={theta} exceeds {MAX_RECOMMENDED_THETA}; "
                "Barnes-Hut forces will be inaccurate.",
                AccuracyWarning,
                stacklevel=2,
            )
        self._tree.theta = theta

    def set_theta(self, theta: float) -> None:
        """Same as assigning the theta property."""
        self.theta = theta

    def _softening_changed(self) -> None:
        self._tree.softening = self._softening
        self._warn_if_unsoftened(self._softening)

    @property
    def tree(self) -> BarnesHutTree:
        """The tree built by the last force evaluation. Treat as read-only."""
        return self._tree

    @property
    def worker_count(self) -> int:
        return self._pool.size

    @property
    def pool(self) -> ThreadPool:
        return self._pool

    # -------------------------------------------------------------------------
    # Force Evaluation
    # -------------------------------------------------------------------------

    def _compute_accelerations(self) -> None:
        """Rebuild the tree, then query it in parallel."""
        bodies = self._bodies
        self._tree.rebuild(bodies)

        for start, stop in partition_ranges(len(bodies), self._pool.size):
            self._pool.enqueue(self._make_range_task(bodies, start, stop))
        self._pool.wait()

    def _make_range_task(
        self, bodies: Sequence[Body], start: int, stop: int
    ) -> Callable[[], None]:
        query = self._tree.query_acceleration

        def task() -> None:
            for i in range(start, stop):
                body = bodies[i]
                body.acceleration = query(body.position)

        return task

    def compute_accelerations_serial(self) -> List[Vector2D]:
        """
        Rebuild the tree and query every body on the calling thread.

        Body state is not modified.

        Returns:
            Accelerations in body order
        """
        self._tree.rebuild(self._bodies)
        query = self._tree.query_acceleration
        return [query(body.position) for body in self._bodies]

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Shut down the worker pool. Further steps will fail."""
        if not self._pool.is_shutdown:
            self._pool.shutdown()

    def _warn_if_unsoftened(self, softening: float) -> None:
        if softening == 0.0:
            warnings.warn(
                "softening=0 leaves close encounters bounded only by the force ceiling.",
                AccuracyWarning,
                stacklevel=3,
            )

    def __repr__(self) -> str:
        return (
            f"Simulation(bodies={len(self._bodies)}, theta={self.theta}, "
            f"softening={self._softening}, workers={self._pool.size}, t={self._time:.6g})"
        )


class DirectSimulation(BaseSimulation):
    """
    Exact O(n^2) gravitational simulation.

    Uses the same integrator, softening and force ceiling as Simulation,
    with every pair summed explicitly. Intended for small systems and as a
    reference when judging Barnes-Hut accuracy.
    """

    def _compute_accelerations(self) -> None:
        positions, _, masses = body_arrays(self._bodies)
        acc = direct_accelerations(positions, masses, self._softening, FORCE_CEILING)
        for body, (ax, ay) in zip(self._bodies, acc):
            body.acceleration = Vector2D(float(ax), float(ay))

    def __repr__(self) -> str:
        return (
            f"DirectSimulation(bodies={len(self._bodies)}, "
            f"softening={self._softening}, t={self._time:.6g})"
        )


__all__ = [
    "Simulation",
    "DirectSimulation",
    "AccuracyWarning",
    "MAX_RECOMMENDED_THETA",
]
