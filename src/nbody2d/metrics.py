"""
Simulation diagnostics.

Provides conserved quantities and reference calculations:
- Total mass, center of mass and linear momentum
- Kinetic, potential and total energy
- Relative energy drift between two snapshots
- Exact pairwise accelerations (the O(n^2) reference for Barnes-Hut)

All functions work on any sequence of bodies, so they can be applied to
Simulation.bodies at any point between steps.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Sequence, Tuple

import numpy as np

from .constants import DEFAULT_SOFTENING, FORCE_CEILING, GC
from .types import Vector2D

if TYPE_CHECKING:
    from .base import BaseSimulation
    from .body import Body


def body_arrays(bodies: Sequence[Body]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Pack body state into numpy arrays.

    Returns:
        (positions, velocities, masses) with shapes (n, 2), (n, 2), (n,)
    """
    n = len(bodies)
    positions = np.empty((n, 2))
    velocities = np.empty((n, 2))
    masses = np.empty(n)
    for i, body in enumerate(bodies):
        positions[i] = (body.position.x, body.position.y)
        velocities[i] = (body.velocity.x, body.velocity.y)
        masses[i] = body.mass
    return positions, velocities, masses


def direct_accelerations(
    positions: np.ndarray,
    masses: np.ndarray,
    softening: float = DEFAULT_SOFTENING,
    ceiling: float = FORCE_CEILING,
) -> np.ndarray:
    """
    Exact softened accelerations by pairwise summation.

    Each pair uses the same coefficient as the tree query,
    min(GC * m / (d^2 + eps^2)^1.5, ceiling), so the two agree to rounding
    when theta = 0. A body's own term has zero offset and adds nothing.

    Args:
        positions: (n, 2) array of positions in AU
        masses: (n,) array of masses in solar masses
        softening: Softening length in AU
        ceiling: Upper bound on the per-pair coefficient

    Returns:
        (n, 2) array of accelerations in AU/yr^2

    Time Complexity: O(n^2) time and memory
    """
    positions = np.asarray(positions, dtype=float)
    masses = np.asarray(masses, dtype=float)
    n = positions.shape[0]
    if n == 0:
        return np.zeros((0, 2))

    # offsets[i, j] points from body i to body j
    offsets = positions[np.newaxis, :, :] - positions[:, np.newaxis, :]
    dist_sq = np.einsum("ijk,ijk->ij", offsets, offsets) + softening * softening

    coef = np.zeros_like(dist_sq)
    nonzero = dist_sq > 0.0
    coef[nonzero] = (GC * np.broadcast_to(masses, dist_sq.shape)[nonzero]) / (
        dist_sq[nonzero] * np.sqrt(dist_sq[nonzero])
    )
    np.minimum(coef, ceiling, out=coef)

    return np.einsum("ij,ijk->ik", coef, offsets)


def total_mass(bodies: Sequence[Body]) -> float:
    return float(sum(b.mass for b in bodies))


def center_of_mass(bodies: Sequence[Body]) -> Vector2D:
    """
    Mass-weighted mean position.

    Returns the origin when there is no mass at all.
    """
    positions, _, masses = body_arrays(bodies)
    m = masses.sum()
    if m == 0.0:
        return Vector2D.zero()
    x, y = (positions * masses[:, np.newaxis]).sum(axis=0) / m
    return Vector2D(float(x), float(y))


def total_momentum(bodies: Sequence[Body]) -> Vector2D:
    _, velocities, masses = body_arrays(bodies)
    if masses.size == 0:
        return Vector2D.zero()
    px, py = (velocities * masses[:, np.newaxis]).sum(axis=0)
    return Vector2D(float(px), float(py))


def kinetic_energy(bodies: Sequence[Body]) -> float:
    """Sum of m v^2 / 2 in M_sun AU^2 / yr^2."""
    _, velocities, masses = body_arrays(bodies)
    return float(0.5 * np.sum(masses * np.einsum("ij,ij->i", velocities, velocities)))


def potential_energy(bodies: Sequence[Body], softening: float = DEFAULT_SOFTENING) -> float:
    """
    Softened gravitational potential energy.

    Sum over unordered pairs of -GC m_i m_j / sqrt(d^2 + eps^2). Pairs
    at zero separation with zero softening are left out.
    """
    positions, _, masses = body_arrays(bodies)
    n = masses.size
    if n < 2:
        return 0.0

    i, j = np.triu_indices(n, k=1)
    offsets = positions[j] - positions[i]
    dist = np.sqrt(np.einsum("ij,ij->i", offsets, offsets) + softening * softening)
    valid = dist > 0.0
    return float(-GC * np.sum(masses[i][valid] * masses[j][valid] / dist[valid]))


def total_energy(bodies: Sequence[Body], softening: float = DEFAULT_SOFTENING) -> float:
    return kinetic_energy(bodies) + potential_energy(bodies, softening)


def energy_drift(initial: float, current: float) -> float:
    """
    Relative energy change |(E - E0) / E0|.

    Falls back to the absolute change when E0 is zero.
    """
    if initial == 0.0:
        return abs(current)
    return abs((current - initial) / initial)


def simulation_summary(simulation: BaseSimulation) -> Dict[str, Any]:
    """
    Compute all diagnostics for the current state of a simulation.

    Args:
        simulation: Any simulation (Barnes-Hut or direct)

    Returns:
        Dict with keys: time, steps, body_count, total_mass, center_of_mass,
        momentum, kinetic_energy, potential_energy, total_energy
    """
    bodies = simulation.bodies
    softening = simulation.softening
    ke = kinetic_energy(bodies)
    pe = potential_energy(bodies, softening)
    return {
        "time": simulation.time,
        "steps": simulation.step_count,
        "body_count": len(bodies),
        "total_mass": total_mass(bodies),
        "center_of_mass": center_of_mass(bodies).as_tuple(),
        "momentum": total_momentum(bodies).as_tuple(),
        "kinetic_energy": ke,
        "potential_energy": pe,
        "total_energy": ke + pe,
    }


__all__ = [
    "body_arrays",
    "direct_accelerations",
    "total_mass",
    "center_of_mass",
    "total_momentum",
    "kinetic_energy",
    "potential_energy",
    "total_energy",
    "energy_drift",
    "simulation_summary",
]
