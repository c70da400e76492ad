"""
Common types for the simulation.

This module provides the fundamental value types used across the package:
- Vector2D: Immutable 2D vector with arithmetic operators
- Color: RGBA tuple used for presentation only
- EventType: Simulation lifecycle events
- Event: Event payload for callbacks
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Callable, Iterable, Optional, Tuple, TypedDict, Union


@dataclass(frozen=True)
class Vector2D:
    """
    Immutable 2D floating-point vector.

    Equality is exact component-wise comparison, which the tree relies on
    to detect coincident positions.
    """

    x: float = 0.0
    y: float = 0.0

    @classmethod
    def zero(cls) -> Vector2D:
        return cls(0.0, 0.0)

    @classmethod
    def from_iterable(cls, values: Iterable[float]) -> Vector2D:
        """Build a vector from any 2-element iterable (tuple, list, array)."""
        x, y = values
        return cls(float(x), float(y))

    def __add__(self, other: Vector2D) -> Vector2D:
        return Vector2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2D) -> Vector2D:
        return Vector2D(self.x - other.x, self.y - other.y)

    def __neg__(self) -> Vector2D:
        return Vector2D(-self.x, -self.y)

    def __mul__(self, scalar: float) -> Vector2D:
        return Vector2D(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vector2D:
        return Vector2D(self.x / scalar, self.y / scalar)

    def __iter__(self):
        yield self.x
        yield self.y

    def dot(self, other: Vector2D) -> float:
        return self.x * other.x + self.y * other.y

    def mag_sq(self) -> float:
        """Squared magnitude (avoids the square root)."""
        return self.x * self.x + self.y * self.y

    def mag(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y)

    def normalized(self) -> Vector2D:
        """Unit vector in the same direction; the zero vector maps to zero."""
        m = self.mag()
        if m == 0.0:
            return Vector2D(0.0, 0.0)
        return Vector2D(self.x / m, self.y / m)

    def distance_to(self, other: Vector2D) -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def __repr__(self) -> str:
        return f"Vector2D({self.x:.6g}, {self.y:.6g})"


Color = Tuple[int, int, int, int]
"""RGBA color, 0-255 per channel. Never read by the physics."""

WHITE: Color = (255, 255, 255, 255)


class EventType(IntEnum):
    """
    Simulation lifecycle events.

    - start: A run() has begun
    - tick: Fired once per completed step
    - end: A run() has finished
    """

    start = 0
    tick = 1
    end = 2


class Event(TypedDict, total=False):
    """Event payload passed to event listeners."""

    type: EventType
    time: float
    step: int
    body_count: int


EventCallback = Callable[[Optional[Event]], None]

VectorLike = Union[Vector2D, Tuple[float, float], Iterable[float]]
"""Input type for positions and velocities: Vector2D or any (x, y) pair."""


def as_vector(value: VectorLike) -> Vector2D:
    """Coerce a Vector2D or an (x, y) pair into a Vector2D."""
    if isinstance(value, Vector2D):
        return value
    return Vector2D.from_iterable(value)


__all__ = [
    "Vector2D",
    "Color",
    "WHITE",
    "EventType",
    "Event",
    "EventCallback",
    "VectorLike",
    "as_vector",
]
