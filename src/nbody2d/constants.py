"""
Physical and numerical constants.

Units throughout the package are astronomical units (AU), solar masses
and years. In these units the gravitational constant is 4*pi^2, so a
massless body on a circular orbit of radius 1 AU around one solar mass
has a period of exactly one year.
"""

from __future__ import annotations

import math

DAYS_PER_YEAR = 365.25

# Gravitational constant in AU^3 / (M_sun * yr^2)
GC = 4.0 * math.pi * math.pi

# 0.01 days, in years
TIME_STEP = 1.0 / (DAYS_PER_YEAR * 100.0)

DEFAULT_THETA = 0.5

# Plummer softening length in AU
DEFAULT_SOFTENING = 1e-3

# Ceiling on GC * m / (d^2 + eps^2)^1.5 for a single aggregate
FORCE_CEILING = 1e10

# Bounding quad is grown by this factor and never smaller than MIN_QUAD_SIZE
QUAD_PADDING = 1.1
MIN_QUAD_SIZE = 1e-6
EMPTY_QUAD_SIZE = 10.0


__all__ = [
    "DAYS_PER_YEAR",
    "GC",
    "TIME_STEP",
    "DEFAULT_THETA",
    "DEFAULT_SOFTENING",
    "FORCE_CEILING",
    "QUAD_PADDING",
    "MIN_QUAD_SIZE",
    "EMPTY_QUAD_SIZE",
]
