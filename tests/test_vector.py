"""Tests for the Vector2D value type."""

import math

import pytest

from nbody2d.types import Vector2D, as_vector


class TestVectorArithmetic:
    """Tests for vector operators."""

    def test_add_sub(self):
        """Addition and subtraction are component-wise."""
        a = Vector2D(1.0, 2.0)
        b = Vector2D(3.0, -1.0)
        assert a + b == Vector2D(4.0, 1.0)
        assert a - b == Vector2D(-2.0, 3.0)
        assert -a == Vector2D(-1.0, -2.0)

    def test_scalar_ops(self):
        """Scalars multiply from either side and divide."""
        v = Vector2D(2.0, -4.0)
        assert v * 0.5 == Vector2D(1.0, -2.0)
        assert 0.5 * v == Vector2D(1.0, -2.0)
        assert v / 2.0 == Vector2D(1.0, -2.0)

    def test_dot_and_magnitude(self):
        """dot, mag_sq and mag agree."""
        v = Vector2D(3.0, 4.0)
        assert v.dot(Vector2D(1.0, 1.0)) == 7.0
        assert v.mag_sq() == 25.0
        assert v.mag() == 5.0

    def test_normalized(self):
        """Normalized vectors have unit length; zero stays zero."""
        assert Vector2D(3.0, 4.0).normalized() == Vector2D(0.6, 0.8)
        assert Vector2D.zero().normalized() == Vector2D(0.0, 0.0)

    def test_distance(self):
        """distance_to is the Euclidean distance."""
        assert Vector2D(1.0, 1.0).distance_to(Vector2D(4.0, 5.0)) == 5.0

    def test_is_finite(self):
        """NaN and infinity are not finite."""
        assert Vector2D(1.0, 2.0).is_finite()
        assert not Vector2D(math.nan, 0.0).is_finite()
        assert not Vector2D(0.0, -math.inf).is_finite()


class TestVectorConversion:
    """Tests for building vectors from other values."""

    def test_iteration(self):
        """Vectors unpack as (x, y)."""
        x, y = Vector2D(1.5, -2.5)
        assert (x, y) == (1.5, -2.5)
        assert Vector2D(1.5, -2.5).as_tuple() == (1.5, -2.5)

    def test_as_vector(self):
        """Pairs are converted, vectors returned as is."""
        v = Vector2D(1.0, 2.0)
        assert as_vector(v) is v
        assert as_vector((1, 2)) == v
        assert as_vector([1.0, 2.0]) == v

    def test_wrong_length(self):
        """Anything other than two components is rejected."""
        with pytest.raises(ValueError):
            Vector2D.from_iterable((1.0, 2.0, 3.0))

    def test_immutable(self):
        """Vectors are frozen."""
        v = Vector2D(1.0, 2.0)
        with pytest.raises(AttributeError):
            v.x = 5.0
