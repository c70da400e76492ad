"""
nbody2d: 2D Barnes-Hut gravity simulation in Python.

This package simulates point masses under mutual Newtonian gravity in two
dimensions. Forces are approximated with a Barnes-Hut quadtree and
evaluated in parallel on a reusable worker thread pool; bodies are
advanced with a kick-drift-kick leapfrog integrator.

Units are astronomical units, solar masses and years.

Available components:
- simulation: Barnes-Hut and direct-summation simulations
- spatial: Index-addressed quadtree with stackless force query
- parallel: Fixed-size thread pool with a quiescence barrier
- initial_conditions: Random systems, disks and presets
- metrics: Energy, momentum and other conserved quantities
"""

import logging

__version__ = "0.1.0"

# Base classes for building simulations
from .base import BaseSimulation, NonFiniteStateError

# Bodies
from .body import Body

# Physical constants
from .constants import (
    DEFAULT_SOFTENING,
    DEFAULT_THETA,
    FORCE_CEILING,
    GC,
    TIME_STEP,
)

# Initial conditions
from .initial_conditions import (
    disk_system,
    kepler_pair,
    orbital_period,
    random_system,
    solar_system,
)

# Diagnostics
from .metrics import (
    center_of_mass,
    direct_accelerations,
    energy_drift,
    kinetic_energy,
    potential_energy,
    simulation_summary,
    total_energy,
    total_mass,
    total_momentum,
)

# Worker pool
from .parallel import PoolShutdownError, ThreadPool, default_worker_count, partition_ranges

# Simulations
from .simulation import AccuracyWarning, DirectSimulation, Simulation

# Spatial data structures
from .spatial import BarnesHutTree, Quad, TreeNode, TreeStructureError
from .types import Event, EventType, Vector2D

# Validation utilities
from .validation import (
    InvalidBodyError,
    InvalidMassError,
    InvalidSofteningError,
    InvalidThetaError,
    InvalidTimeStepError,
    InvalidWorkerCountError,
    ValidationError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Version
    "__version__",
    # Shared types
    "Vector2D",
    "EventType",
    "Event",
    "Body",
    # Constants
    "GC",
    "TIME_STEP",
    "DEFAULT_THETA",
    "DEFAULT_SOFTENING",
    "FORCE_CEILING",
    # Simulations
    "BaseSimulation",
    "Simulation",
    "DirectSimulation",
    "AccuracyWarning",
    "NonFiniteStateError",
    # Spatial data structures
    "BarnesHutTree",
    "Quad",
    "TreeNode",
    "TreeStructureError",
    # Worker pool
    "ThreadPool",
    "PoolShutdownError",
    "default_worker_count",
    "partition_ranges",
    # Initial conditions
    "random_system",
    "disk_system",
    "solar_system",
    "kepler_pair",
    "orbital_period",
    # Metrics
    "total_mass",
    "center_of_mass",
    "total_momentum",
    "kinetic_energy",
    "potential_energy",
    "total_energy",
    "energy_drift",
    "direct_accelerations",
    "simulation_summary",
    # Validation
    "ValidationError",
    "InvalidBodyError",
    "InvalidMassError",
    "InvalidTimeStepError",
    "InvalidThetaError",
    "InvalidSofteningError",
    "InvalidWorkerCountError",
]
