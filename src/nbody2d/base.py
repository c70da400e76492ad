"""
Base class for simulation orchestrators.

This module provides the abstract base that every force model plugs into:

- Body collection management (add, remove by position, reset, replace)
- Event system (start/tick/end events)
- The kick-drift-kick leapfrog step with all-or-nothing semantics
- Read-only array accessors for rendering layers

Subclasses only decide how accelerations are computed from the current
positions.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np

if TYPE_CHECKING:
    from typing_extensions import Self

from .body import Body
from .constants import DEFAULT_SOFTENING
from .metrics import body_arrays
from .types import Event, EventCallback, EventType, Vector2D, VectorLike, as_vector
from .validation import validate_softening, validate_time_step

logger = logging.getLogger(__name__)

_BodyState = Tuple[Vector2D, Vector2D, Vector2D]


class NonFiniteStateError(RuntimeError):
    """Raised when a step produces a NaN or infinite position or velocity."""

    pass


class BaseSimulation(ABC):
    """
    Abstract base class for all simulations.

    Provides shared infrastructure:
    - Event system (start/tick/end events)
    - Body management via methods and read-only properties
    - Leapfrog integration (kick-drift-kick)
    - Rollback of a failed step

    Example:
        sim = SomeSimulation(bodies=[Body(mass=1.0), Body(mass=3e-6, ...)])
        sim.run(steps=365, dt=1 / 365.25)

        for body in sim.bodies:
            print(body.position)
    """

    def __init__(
        self,
        *,
        bodies: Optional[Iterable[Body]] = None,
        softening: float = DEFAULT_SOFTENING,
        on_start: Optional[EventCallback] = None,
        on_tick: Optional[EventCallback] = None,
        on_end: Optional[EventCallback] = None,
    ) -> None:
        """
        Initialize simulation with configuration.

        Args:
            bodies: Initial bodies, stored in the given order
            softening: Plummer softening length in AU
            on_start: Callback for start event
            on_tick: Callback for tick event (after every step)
            on_end: Callback for end event
        """
        self._bodies: List[Body] = []
        self._softening: float = validate_softening(softening)
        self._time: float = 0.0
        self._step_count: int = 0
        self._accelerations_stale: bool = True
        self._events: dict[EventType, EventCallback] = {}

        if bodies is not None:
            self.add_bodies(bodies)

        # Register event callbacks
        if on_start:
            self._events[EventType.start] = on_start
        if on_tick:
            self._events[EventType.tick] = on_tick
        if on_end:
            self._events[EventType.end] = on_end

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def bodies(self) -> Sequence[Body]:
        """Bodies in insertion order (read-only view)."""
        return tuple(self._bodies)

    @property
    def body_count(self) -> int:
        return len(self._bodies)

    @property
    def softening(self) -> float:
        """Get softening length in AU."""
        return self._softening

    @softening.setter
    def softening(self, value: float) -> None:
        """Set softening length; applies from the next force evaluation."""
        self._softening = validate_softening(value)
        self._softening_changed()

    @property
    def time(self) -> float:
        """Simulated time elapsed in years."""
        return self._time

    @property
    def step_count(self) -> int:
        """Number of completed steps."""
        return self._step_count

    # -------------------------------------------------------------------------
    # Event System
    # -------------------------------------------------------------------------

    def on(self, event: EventType | str, callback: EventCallback) -> Self:
        """
        Subscribe to a simulation event.

        Args:
            event: Event type (EventType enum or string name)
            callback: Function to call when event fires

        Returns:
            self (for chaining)
        """
        if isinstance(event, str):
            event = EventType[event]
        self._events[event] = callback
        return self

    def trigger(self, event: Event) -> None:
        """
        Trigger an event, calling the registered callback.

        Args:
            event: Event payload with type and optional data
        """
        event_type = event.get("type")
        if event_type is not None and event_type in self._events:
            self._events[event_type](event)

    def _event(self, event_type: EventType) -> Event:
        return {
            "type": event_type,
            "time": self._time,
            "step": self._step_count,
            "body_count": len(self._bodies),
        }

    # -------------------------------------------------------------------------
    # Body Management
    # -------------------------------------------------------------------------

    def add_body(self, body: Body) -> Body:
        """
        Append a body.

        Returns:
            The stored body. It stays valid until it is removed or reset().
        """
        self._bodies.append(body)
        self._accelerations_stale = True
        return body

    def add_bodies(self, bodies: Iterable[Body]) -> None:
        """Append several bodies, keeping their order."""
        for body in bodies:
            self._bodies.append(body)
        self._accelerations_stale = True

    def find_body_at(self, position: VectorLike, tolerance: float = 0.0) -> Optional[Body]:
        """
        Most recently added body at a position.

        Args:
            position: World position in AU
            tolerance: Match distance. 0 requires an exact position match.

        Returns:
            The matching body, or None
        """
        target = as_vector(position)
        for body in reversed(self._bodies):
            if tolerance > 0.0:
                if body.position.distance_to(target) <= tolerance:
                    return body
            elif body.position == target:
                return body
        return None

    def remove_body_at(self, position: VectorLike, tolerance: float = 0.0) -> Optional[Body]:
        """
        Remove the most recently added body at a position.

        No match is a no-op.

        Returns:
            The removed body, or None
        """
        body = self.find_body_at(position, tolerance)
        if body is None:
            return None
        for i in range(len(self._bodies) - 1, -1, -1):
            if self._bodies[i] is body:
                del self._bodies[i]
                break
        self._accelerations_stale = True
        return body

    def reset(self) -> None:
        """Remove all bodies and rewind the clock."""
        self._bodies.clear()
        self._time = 0.0
        self._step_count = 0
        self._accelerations_stale = True

    def replace_bodies(self, bodies: Iterable[Body]) -> None:
        """Replace the whole state (reset followed by add_bodies)."""
        self.reset()
        self.add_bodies(bodies)

    # -------------------------------------------------------------------------
    # Read Accessors
    # -------------------------------------------------------------------------

    def positions(self) -> np.ndarray:
        """(n, 2) array of positions."""
        return body_arrays(self._bodies)[0]

    def velocities(self) -> np.ndarray:
        """(n, 2) array of velocities."""
        return body_arrays(self._bodies)[1]

    def masses(self) -> np.ndarray:
        """(n,) array of masses."""
        return body_arrays(self._bodies)[2]

    # -------------------------------------------------------------------------
    # Lifecycle Methods
    # -------------------------------------------------------------------------

    def _softening_changed(self) -> None:
        """Hook for subclasses that cache the softening length."""
        pass

    def compute_accelerations(self) -> None:
        """Evaluate every body's acceleration from the current positions."""
        self._compute_accelerations()
        self._accelerations_stale = False

    @abstractmethod
    def _compute_accelerations(self) -> None:
        """
        Overwrite body.acceleration for every body.

        Subclasses must implement this to perform the actual force model.
        """
        pass

    def step(self, dt: float) -> Self:
        """
        Advance the simulation by one kick-drift-kick step.

        If any phase raises, every body is restored to its state before the
        step and the exception propagates.

        Args:
            dt: Time step in years

        Returns:
            self (for chaining)

        Raises:
            InvalidTimeStepError: If dt is not finite
            NonFiniteStateError: If the drift produced a non-finite position
        """
        dt = validate_time_step(dt)
        bodies = self._bodies
        half = dt * 0.5
        snapshot = self._snapshot()

        try:
            if self._accelerations_stale:
                self.compute_accelerations()

            for body in bodies:
                body.kick(half)
            for body in bodies:
                body.drift(dt)
            self._check_finite()

            self.compute_accelerations()

            for body in bodies:
                body.kick(half)
        except Exception:
            self._restore(snapshot)
            self._accelerations_stale = True
            logger.debug(
                "Step %d at t=%.6g failed; restored %d bodies",
                self._step_count + 1,
                self._time,
                len(snapshot),
            )
            raise

        self._time += dt
        self._step_count += 1
        self.trigger(self._event(EventType.tick))
        return self

    def update(self, dt: float) -> Self:
        """Advance by one fixed step. Entry point for time-stepping drivers."""
        return self.step(dt)

    def run(self, steps: int, dt: float) -> Self:
        """
        Run a fixed number of steps.

        Fires start event, steps, fires end event.

        Args:
            steps: Number of steps
            dt: Time step in years

        Returns:
            self (for chaining)
        """
        dt = validate_time_step(dt)
        self.trigger(self._event(EventType.start))
        for _ in range(max(0, int(steps))):
            self.step(dt)
        self.trigger(self._event(EventType.end))
        return self

    def close(self) -> None:
        """Release resources held by the simulation."""
        pass

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def _snapshot(self) -> List[_BodyState]:
        return [(b.position, b.velocity, b.acceleration) for b in self._bodies]

    def _restore(self, snapshot: List[_BodyState]) -> None:
        for body, (position, velocity, acceleration) in zip(self._bodies, snapshot):
            body.position = position
            body.velocity = velocity
            body.acceleration = acceleration

    def _check_finite(self) -> None:
        for i, body in enumerate(self._bodies):
            if not (body.position.is_finite() and body.velocity.is_finite()):
                raise NonFiniteStateError(
                    f"Body {i} left the finite range at t={self._time:.6g} yr: {body!r}"
                )


__all__ = [
    "BaseSimulation",
    "NonFiniteStateError",
]
