"""
Physical state of a single point mass and its leapfrog integration steps.
"""

from __future__ import annotations

from typing import Optional

from .types import WHITE, Color, Vector2D, VectorLike, as_vector
from .validation import validate_mass, validate_vector


class Body:
    """
    A point mass.

    Attributes:
        position: Position in AU
        velocity: Velocity in AU/yr
        acceleration: Acceleration in AU/yr^2 from the last force evaluation
        radius: Display radius in AU (presentation only)
        color: RGBA display color (presentation only)

    A body with zero mass is a tracer: it is accelerated by the others but
    never inserted into the tree, so it exerts no force.

    Bodies compare by identity; two bodies with equal state are still
    distinct bodies.

    Example:
        sun = Body(mass=1.0)
        earth = Body(mass=3e-6, position=(1.0, 0.0), velocity=(0.0, 2 * math.pi))
    """

    def __init__(
        self,
        mass: float = 0.0,
        position: Optional[VectorLike] = None,
        velocity: Optional[VectorLike] = None,
        acceleration: Optional[VectorLike] = None,
        radius: float = 0.0,
        color: Color = WHITE,
    ) -> None:
        """
        Initialize body.

        Args:
            mass: Mass in solar masses (>= 0)
            position: Initial position, defaults to the origin
            velocity: Initial velocity, defaults to zero
            acceleration: Initial acceleration, defaults to zero
            radius: Display radius in AU
            color: RGBA display color

        Raises:
            InvalidMassError: If mass is negative or not finite
            InvalidBodyError: If position or velocity is not finite
        """
        self._mass: float = validate_mass(mass)
        self.position: Vector2D = validate_vector(
            as_vector(position) if position is not None else Vector2D.zero(), "position"
        )
        self.velocity: Vector2D = validate_vector(
            as_vector(velocity) if velocity is not None else Vector2D.zero(), "velocity"
        )
        self.acceleration: Vector2D = (
            as_vector(acceleration) if acceleration is not None else Vector2D.zero()
        )
        self.radius: float = float(radius)
        self.color: Color = color

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def mass(self) -> float:
        """Get mass in solar masses."""
        return self._mass

    @mass.setter
    def mass(self, value: float) -> None:
        """Set mass; negative or non-finite values raise InvalidMassError."""
        self._mass = validate_mass(value)

    @property
    def is_tracer(self) -> bool:
        """True if the body has zero mass."""
        return self._mass == 0.0

    @property
    def momentum(self) -> Vector2D:
        return self.velocity * self._mass

    @property
    def kinetic_energy(self) -> float:
        return 0.5 * self._mass * self.velocity.mag_sq()

    # -------------------------------------------------------------------------
    # Integration
    # -------------------------------------------------------------------------

    def kick(self, dt: float) -> None:
        """Advance velocity by dt using the current acceleration."""
        v = self.velocity
        a = self.acceleration
        self.velocity = Vector2D(v.x + a.x * dt, v.y + a.y * dt)

    def drift(self, dt: float) -> None:
        """Advance position by dt using the current velocity."""
        p = self.position
        v = self.velocity
        self.position = Vector2D(p.x + v.x * dt, p.y + v.y * dt)

    def apply_force(self, force: Vector2D) -> None:
        """
        Accumulate a force into the acceleration (a += F / m).

        A tracer has no inertial mass to divide by. This fails the
        assertion in normal runs; with assertions disabled (python -O) the
        force is ignored.
        """
        assert self._mass > 0.0, "apply_force on a zero-mass body"
        if self._mass <= 0.0:
            return
        a = self.acceleration
        self.acceleration = Vector2D(a.x + force.x / self._mass, a.y + force.y / self._mass)

    def copy(self) -> Body:
        """Return an independent body with the same state."""
        return Body(
            mass=self._mass,
            position=self.position,
            velocity=self.velocity,
            acceleration=self.acceleration,
            radius=self.radius,
            color=self.color,
        )

    def __repr__(self) -> str:
        return (
            f"Body(mass={self._mass:.3g}, position=({self.position.x:.3f}, "
            f"{self.position.y:.3f}), velocity=({self.velocity.x:.3f}, {self.velocity.y:.3f}))"
        )


__all__ = ["Body"]
