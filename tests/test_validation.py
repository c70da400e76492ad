"""Tests for input validation module."""

import math

import pytest

from nbody2d.types import Vector2D
from nbody2d.validation import (
    InvalidBodyError,
    InvalidMassError,
    InvalidSofteningError,
    InvalidThetaError,
    InvalidTimeStepError,
    InvalidWorkerCountError,
    ValidationError,
    validate_mass,
    validate_softening,
    validate_theta,
    validate_time_step,
    validate_vector,
    validate_worker_count,
)


class TestMassValidation:
    """Tests for mass validation."""

    def test_valid_mass(self):
        """Positive mass is returned as float."""
        assert validate_mass(2) == 2.0

    def test_zero_mass_allowed(self):
        """Zero mass marks a tracer."""
        assert validate_mass(0) == 0.0

    def test_negative_mass_raises(self):
        """Negative mass raises InvalidMassError."""
        with pytest.raises(InvalidMassError, match="mass must be >= 0"):
            validate_mass(-1e-9)

    def test_infinite_mass_raises(self):
        """Infinite mass raises InvalidMassError."""
        with pytest.raises(InvalidMassError, match="mass must be finite"):
            validate_mass(math.inf)

    def test_non_number_raises(self):
        """Non-numeric mass raises InvalidMassError."""
        with pytest.raises(InvalidMassError, match="must be a number"):
            validate_mass("heavy")


class TestVectorValidation:
    """Tests for vector validation."""

    def test_valid_vector(self):
        """Finite vectors pass through."""
        v = Vector2D(1.0, 2.0)
        assert validate_vector(v) is v

    def test_nan_vector_raises(self):
        """NaN components raise InvalidBodyError naming the field."""
        with pytest.raises(InvalidBodyError, match="velocity must be finite"):
            validate_vector(Vector2D(math.nan, 0.0), "velocity")


class TestTimeStepValidation:
    """Tests for time step validation."""

    def test_valid_time_step(self):
        """Positive steps are accepted."""
        assert validate_time_step(0.01) == 0.01

    def test_negative_time_step_allowed(self):
        """Negative steps run the integrator backwards."""
        assert validate_time_step(-0.01) == -0.01

    def test_infinite_time_step_raises(self):
        """Infinite dt raises InvalidTimeStepError."""
        with pytest.raises(InvalidTimeStepError, match="dt must be finite"):
            validate_time_step(math.inf)

    def test_non_number_raises(self):
        """Non-numeric dt raises InvalidTimeStepError."""
        with pytest.raises(InvalidTimeStepError, match="dt must be a number"):
            validate_time_step(None)


class TestSolverParameterValidation:
    """Tests for theta, softening and worker count."""

    def test_theta(self):
        """Zero and positive theta are accepted."""
        assert validate_theta(0) == 0.0
        assert validate_theta(0.5) == 0.5

    def test_negative_theta_raises(self):
        """Negative theta raises InvalidThetaError."""
        with pytest.raises(InvalidThetaError, match="theta must be"):
            validate_theta(-0.5)

    def test_nan_theta_raises(self):
        """NaN theta raises InvalidThetaError."""
        with pytest.raises(InvalidThetaError):
            validate_theta(math.nan)

    def test_non_numeric_theta_raises(self):
        """None or a non-numeric string raises InvalidThetaError."""
        with pytest.raises(InvalidThetaError, match="theta must be a number"):
            validate_theta(None)
        with pytest.raises(InvalidThetaError, match="theta must be a number"):
            validate_theta("wide")

    def test_non_numeric_softening_raises(self):
        """None raises InvalidSofteningError."""
        with pytest.raises(InvalidSofteningError, match="softening must be a number"):
            validate_softening(None)

    def test_softening(self):
        """Zero softening is legal."""
        assert validate_softening(0.0) == 0.0

    def test_negative_softening_raises(self):
        """Negative softening raises InvalidSofteningError."""
        with pytest.raises(InvalidSofteningError, match="softening must be"):
            validate_softening(-1e-3)

    def test_worker_count(self):
        """None means detect; positive integers pass."""
        assert validate_worker_count(None) is None
        assert validate_worker_count(8) == 8

    def test_bool_worker_count_raises(self):
        """Booleans are not worker counts."""
        with pytest.raises(InvalidWorkerCountError, match="must be an integer"):
            validate_worker_count(True)


class TestExceptionHierarchy:
    """Tests for exception inheritance."""

    def test_all_inherit_from_validation_error(self):
        """All validation exceptions inherit from ValidationError."""
        for exc in (
            InvalidBodyError,
            InvalidMassError,
            InvalidTimeStepError,
            InvalidThetaError,
            InvalidSofteningError,
            InvalidWorkerCountError,
        ):
            assert issubclass(exc, ValidationError)

    def test_validation_error_is_value_error(self):
        """ValidationError inherits from ValueError."""
        assert issubclass(ValidationError, ValueError)

    def test_mass_error_is_body_error(self):
        """A bad mass is a kind of bad body."""
        assert issubclass(InvalidMassError, InvalidBodyError)
