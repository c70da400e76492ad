"""
Input validation utilities for the simulation.

Provides centralized validation functions for body state, time steps,
and solver parameters. Raises descriptive exceptions on invalid input.
"""

from __future__ import annotations

import math
from typing import Any, Optional

from .types import Vector2D


class ValidationError(ValueError):
    """Base exception for simulation validation errors."""

    pass


class InvalidBodyError(ValidationError):
    """Raised when a body's position or velocity is malformed."""

    pass


class InvalidMassError(InvalidBodyError):
    """Raised when a body mass is negative or not finite."""

    pass


class InvalidTimeStepError(ValidationError):
    """Raised when a time step is not a finite number."""

    pass


class InvalidThetaError(ValidationError):
    """Raised when the Barnes-Hut opening angle is invalid."""

    pass


class InvalidSofteningError(ValidationError):
    """Raised when the softening length is invalid."""

    pass


class InvalidWorkerCountError(ValidationError):
    """Raised when a thread pool size is invalid."""

    pass


def validate_mass(mass: Any) -> float:
    """
    Validate a body mass.

    Zero is allowed and marks a tracer body.

    Args:
        mass: Mass in solar masses

    Returns:
        Validated mass as float

    Raises:
        InvalidMassError: If mass is negative, NaN or infinite
    """
    try:
        value = float(mass)
    except (TypeError, ValueError):
        raise InvalidMassError(f"mass must be a number, got {mass!r}") from None
    if not math.isfinite(value):
        raise InvalidMassError(f"mass must be finite, got {value}")
    if value < 0:
        raise InvalidMassError(f"mass must be >= 0, got {value}")
    return value


def validate_vector(value: Vector2D, name: str = "vector") -> Vector2D:
    """
    Validate that a vector has finite components.

    Raises:
        InvalidBodyError: If either component is NaN or infinite
    """
    if not value.is_finite():
        raise InvalidBodyError(f"{name} must be finite, got ({value.x}, {value.y})")
    return value


def validate_time_step(dt: Any) -> float:
    """
    Validate a time step in years.

    Negative steps are legal: the integrator is time-reversible.

    Raises:
        InvalidTimeStepError: If dt is not a finite number
    """
    try:
        value = float(dt)
    except (TypeError, ValueError):
        raise InvalidTimeStepError(f"dt must be a number, got {dt!r}") from None
    if not math.isfinite(value):
        raise InvalidTimeStepError(f"dt must be finite, got {value}")
    return value


def validate_theta(theta: Any) -> float:
    """
    Validate the Barnes-Hut opening angle.

    Raises:
        InvalidThetaError: If theta is negative or not finite
    """
    try:
        value = float(theta)
    except (TypeError, ValueError):
        raise InvalidThetaError(f"theta must be a number, got {theta!r}") from None
    if not math.isfinite(value) or value < 0:
        raise InvalidThetaError(f"theta must be a finite number >= 0, got {theta}")
    return value


def validate_softening(softening: Any) -> float:
    """
    Validate the softening length in AU.

    Raises:
        InvalidSofteningError: If softening is negative or not finite
    """
    try:
        value = float(softening)
    except (TypeError, ValueError):
        raise InvalidSofteningError(f"softening must be a number, got {softening!r}") from None
    if not math.isfinite(value) or value < 0:
        raise InvalidSofteningError(f"softening must be a finite number >= 0, got {softening}")
    return value


def validate_worker_count(workers: Optional[int]) -> Optional[int]:
    """
    Validate a thread pool size. None means "detect".

    Raises:
        InvalidWorkerCountError: If workers is not an integer >= 1
    """
    if workers is None:
        return None
    if isinstance(workers, bool) or not isinstance(workers, int):
        raise InvalidWorkerCountError(f"workers must be an integer, got {workers!r}")
    if workers < 1:
        raise InvalidWorkerCountError(f"workers must be >= 1, got {workers}")
    return workers


__all__ = [
    "ValidationError",
    "InvalidBodyError",
    "InvalidMassError",
    "InvalidTimeStepError",
    "InvalidThetaError",
    "InvalidSofteningError",
    "InvalidWorkerCountError",
    "validate_mass",
    "validate_vector",
    "validate_time_step",
    "validate_theta",
    "validate_softening",
    "validate_worker_count",
]
