"""
Initial-condition generators.

Each generator returns a fresh list of bodies ready to be handed to
Simulation.add_bodies() or Simulation.replace_bodies():

- random_system: a star with randomly placed planets on circular orbits
- disk_system: a rotating disk of equal-mass bodies around a central mass
- solar_system: Sun, Earth and Mars
- kepler_pair: an isolated two-body orbit in its center-of-mass frame

Generators that draw random numbers take a ``seed`` for reproducible
systems.
"""

from __future__ import annotations

import math
import random
from typing import List, Optional

from .body import Body
from .constants import GC
from .types import Color, Vector2D
from .validation import ValidationError, validate_mass

# Orbital radii of random planets, in AU
MIN_ORBIT_RADIUS = 0.5
MAX_ORBIT_RADIUS = 5.0

# Planet masses are drawn log-uniformly from 10^-8 to 10^-4 solar masses
MIN_LOG_MASS = -8.0
MAX_LOG_MASS = -4.0

STAR_COLOR: Color = (253, 249, 0, 255)
PLANET_COLORS: List[Color] = [
    (0, 121, 241, 255),
    (230, 41, 55, 255),
    (0, 228, 48, 255),
    (255, 161, 0, 255),
    (200, 122, 255, 255),
    (102, 191, 255, 255),
]


def radius_for_mass(mass: float) -> float:
    """
    Display radius in AU scaled from the order of magnitude of the mass.

    A 1e-8 solar-mass body gets 0.02 AU and each decade adds 0.005 AU.
    Tracers get the smallest radius.
    """
    if mass <= 0.0:
        return 0.02
    return max(0.02, 0.02 + 0.005 * (math.log10(mass) + 8.0))


def circular_velocity(central_mass: float, offset: Vector2D) -> Vector2D:
    """
    Velocity for a counter-clockwise circular orbit.

    Args:
        central_mass: Mass being orbited, in solar masses
        offset: Position relative to that mass

    Returns:
        Velocity perpendicular to offset with magnitude sqrt(GC * M / r)
    """
    r = offset.mag()
    if r == 0.0 or central_mass <= 0.0:
        return Vector2D.zero()
    speed = math.sqrt(GC * central_mass / r)
    return Vector2D(-offset.y / r * speed, offset.x / r * speed)


def random_system(
    count: int,
    central_mass: bool = True,
    seed: Optional[int] = None,
) -> List[Body]:
    """
    Random planetary system.

    Planets are placed at a uniform random angle and a radius between
    MIN_ORBIT_RADIUS and MAX_ORBIT_RADIUS. With a central star each planet
    starts on a circular orbit around it; without one the planets start at
    rest and collapse under their own gravity.

    Args:
        count: Number of planets (the star is extra)
        central_mass: Put a one solar mass star at the origin
        seed: Random seed for a reproducible system

    Returns:
        Bodies, star first when present
    """
    rng = random.Random(seed)
    bodies: List[Body] = []
    star_mass = 0.0

    if central_mass:
        star_mass = 1.0
        bodies.append(Body(mass=star_mass, radius=0.05, color=STAR_COLOR))

    for i in range(max(0, int(count))):
        mass = 10.0 ** rng.uniform(MIN_LOG_MASS, MAX_LOG_MASS)
        angle = rng.uniform(0.0, 2.0 * math.pi)
        r = rng.uniform(MIN_ORBIT_RADIUS, MAX_ORBIT_RADIUS)
        position = Vector2D(r * math.cos(angle), r * math.sin(angle))
        bodies.append(
            Body(
                mass=mass,
                position=position,
                velocity=circular_velocity(star_mass, position),
                radius=radius_for_mass(mass),
                color=PLANET_COLORS[i % len(PLANET_COLORS)],
            )
        )

    return bodies


def disk_system(
    count: int,
    radius: float = MAX_ORBIT_RADIUS,
    inner_radius: float = MIN_ORBIT_RADIUS,
    central_mass: float = 1.0,
    body_mass: float = 1e-6,
    seed: Optional[int] = None,
) -> List[Body]:
    """
    Rotating disk of equal-mass bodies around a central mass.

    Bodies are spread uniformly over the annulus between inner_radius and
    radius. Each one moves on the circular orbit set by the central mass
    plus the disk mass inside its radius.

    Args:
        count: Number of disk bodies
        radius: Outer disk radius in AU
        inner_radius: Inner disk radius in AU
        central_mass: Central mass in solar masses; 0 for a self-gravitating disk
        body_mass: Mass of each disk body
        seed: Random seed

    Returns:
        Bodies, the central mass first when it is non-zero

    Raises:
        ValidationError: If the radii do not describe an annulus
        InvalidMassError: If a mass is negative or not finite
    """
    if not (0.0 <= inner_radius < radius):
        raise ValidationError(
            f"need 0 <= inner_radius < radius, got inner_radius={inner_radius}, radius={radius}"
        )
    central_mass = validate_mass(central_mass)
    body_mass = validate_mass(body_mass)

    rng = random.Random(seed)
    count = max(0, int(count))

    # Uniform in area: r^2 is uniform between the squared radii
    inner_sq = inner_radius * inner_radius
    outer_sq = radius * radius
    radii = sorted(math.sqrt(rng.uniform(inner_sq, outer_sq)) for _ in range(count))

    bodies: List[Body] = []
    if central_mass > 0.0:
        bodies.append(Body(mass=central_mass, radius=radius_for_mass(central_mass), color=STAR_COLOR))

    for inside, r in enumerate(radii):
        angle = rng.uniform(0.0, 2.0 * math.pi)
        position = Vector2D(r * math.cos(angle), r * math.sin(angle))
        enclosed = central_mass + inside * body_mass
        bodies.append(
            Body(
                mass=body_mass,
                position=position,
                velocity=circular_velocity(enclosed, position),
                radius=radius_for_mass(body_mass),
                color=PLANET_COLORS[inside % len(PLANET_COLORS)],
            )
        )

    return bodies


def solar_system() -> List[Body]:
    """Sun, Earth and Mars with their mean orbital speeds."""
    return [
        Body(mass=1.0, radius=0.05, color=STAR_COLOR),
        Body(
            mass=3e-6,
            position=(1.0, 0.0),
            velocity=(0.0, 2.0 * math.pi),
            radius=0.01,
            color=PLANET_COLORS[0],
        ),
        Body(
            mass=3.2e-7,
            position=(1.52, 0.0),
            velocity=(0.0, 5.08),
            radius=0.005,
            color=PLANET_COLORS[1],
        ),
    ]


def kepler_pair(
    primary_mass: float = 1.0,
    secondary_mass: float = 3e-6,
    semi_major_axis: float = 1.0,
    eccentricity: float = 0.0,
) -> List[Body]:
    """
    Two bodies on a bound Kepler orbit, starting at periapsis.

    Both bodies are placed in the center-of-mass frame, so the center of
    mass sits at the origin and total momentum is zero. The period is
    2 * pi * sqrt(a^3 / (GC * (m1 + m2))) years.

    Args:
        primary_mass: Mass of the first body
        secondary_mass: Mass of the second body (0 for a test particle)
        semi_major_axis: Semi-major axis of the relative orbit in AU
        eccentricity: Orbital eccentricity, 0 <= e < 1

    Returns:
        [primary, secondary]

    Raises:
        ValidationError: If the orbit is not a bound ellipse
    """
    m1 = validate_mass(primary_mass)
    m2 = validate_mass(secondary_mass)
    total = m1 + m2
    if total <= 0.0:
        raise ValidationError("kepler_pair needs a positive total mass")
    if semi_major_axis <= 0.0:
        raise ValidationError(f"semi_major_axis must be > 0, got {semi_major_axis}")
    if not (0.0 <= eccentricity < 1.0):
        raise ValidationError(f"eccentricity must be in [0, 1), got {eccentricity}")

    periapsis = semi_major_axis * (1.0 - eccentricity)
    speed = math.sqrt(GC * total * (1.0 + eccentricity) / periapsis)

    f1 = m2 / total
    f2 = m1 / total
    primary = Body(
        mass=m1,
        position=(-f1 * periapsis, 0.0),
        velocity=(0.0, -f1 * speed),
        radius=radius_for_mass(m1),
        color=STAR_COLOR,
    )
    secondary = Body(
        mass=m2,
        position=(f2 * periapsis, 0.0),
        velocity=(0.0, f2 * speed),
        radius=radius_for_mass(m2),
        color=PLANET_COLORS[0],
    )
    return [primary, secondary]


def orbital_period(total_mass: float, semi_major_axis: float) -> float:
    """Kepler's third law in years."""
    return 2.0 * math.pi * math.sqrt(semi_major_axis**3 / (GC * total_mass))


__all__ = [
    "random_system",
    "disk_system",
    "solar_system",
    "kepler_pair",
    "radius_for_mass",
    "circular_velocity",
    "orbital_period",
    "MIN_ORBIT_RADIUS",
    "MAX_ORBIT_RADIUS",
]
