"""Tests for Body state and integration steps."""

import math

import pytest

from nbody2d import Body, InvalidBodyError, InvalidMassError, Vector2D
from nbody2d.types import WHITE


class TestBodyCreation:
    """Tests for constructing bodies."""

    def test_defaults(self):
        """A bare body is a tracer at rest at the origin."""
        body = Body()
        assert body.mass == 0.0
        assert body.position == Vector2D(0.0, 0.0)
        assert body.velocity == Vector2D(0.0, 0.0)
        assert body.acceleration == Vector2D(0.0, 0.0)
        assert body.radius == 0.0
        assert body.color == WHITE
        assert body.is_tracer

    def test_tuples_are_coerced(self):
        """Positions and velocities accept (x, y) pairs."""
        body = Body(mass=1.0, position=(1.0, 2.0), velocity=[3, 4])
        assert body.position == Vector2D(1.0, 2.0)
        assert body.velocity == Vector2D(3.0, 4.0)
        assert not body.is_tracer

    def test_negative_mass_raises(self):
        """Negative mass raises InvalidMassError."""
        with pytest.raises(InvalidMassError, match="mass must be >= 0"):
            Body(mass=-1.0)

    def test_nan_mass_raises(self):
        """NaN mass raises InvalidMassError."""
        with pytest.raises(InvalidMassError, match="mass must be finite"):
            Body(mass=float("nan"))

    def test_mass_setter_validates(self):
        """Assigning a negative mass raises and keeps the old value."""
        body = Body(mass=1.0)
        with pytest.raises(InvalidMassError):
            body.mass = -2.0
        assert body.mass == 1.0

    def test_non_finite_position_raises(self):
        """An infinite position raises InvalidBodyError."""
        with pytest.raises(InvalidBodyError, match="position must be finite"):
            Body(mass=1.0, position=(math.inf, 0.0))

    def test_identity_equality(self):
        """Bodies with equal state are still distinct."""
        a = Body(mass=1.0)
        b = Body(mass=1.0)
        assert a != b
        assert a == a


class TestBodyIntegration:
    """Tests for kick, drift and force accumulation."""

    def test_kick(self):
        """kick() adds acceleration * dt to the velocity."""
        body = Body(mass=1.0, velocity=(1.0, 0.0), acceleration=(2.0, -4.0))
        body.kick(0.5)
        assert body.velocity == Vector2D(2.0, -2.0)
        assert body.position == Vector2D(0.0, 0.0)

    def test_drift(self):
        """drift() adds velocity * dt to the position."""
        body = Body(mass=1.0, position=(1.0, 1.0), velocity=(2.0, -2.0))
        body.drift(0.25)
        assert body.position == Vector2D(1.5, 0.5)

    def test_apply_force(self):
        """apply_force() accumulates F / m."""
        body = Body(mass=2.0)
        body.apply_force(Vector2D(4.0, 2.0))
        body.apply_force(Vector2D(2.0, 0.0))
        assert body.acceleration == Vector2D(3.0, 1.0)

    def test_apply_force_on_tracer_asserts(self):
        """Forces on a zero-mass body fail fast."""
        body = Body(mass=0.0)
        with pytest.raises(AssertionError, match="zero-mass"):
            body.apply_force(Vector2D(1.0, 0.0))

    def test_momentum_and_energy(self):
        """Momentum and kinetic energy follow from mass and velocity."""
        body = Body(mass=2.0, velocity=(3.0, 4.0))
        assert body.momentum == Vector2D(6.0, 8.0)
        assert body.kinetic_energy == 25.0

    def test_copy_is_independent(self):
        """A copy carries the state but moves on its own."""
        body = Body(mass=1.0, position=(1.0, 0.0), velocity=(0.0, 1.0), radius=0.1)
        clone = body.copy()
        clone.drift(1.0)

        assert clone is not body
        assert clone.mass == 1.0
        assert clone.radius == 0.1
        assert body.position == Vector2D(1.0, 0.0)
        assert clone.position == Vector2D(1.0, 1.0)
