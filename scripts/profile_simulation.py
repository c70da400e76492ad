"""
Profiling script for nbody2d performance analysis.

Profiles tree construction and force evaluation for several system sizes.
cProfile only sees the calling thread, so the query scenarios use
compute_accelerations_serial() to keep the tree walk visible; the step
scenarios show the time spent waiting on the pool instead.
"""

import argparse
import cProfile
import io
import pstats
import time
from pstats import SortKey

from nbody2d import BarnesHutTree, Simulation, disk_system, random_system


def _bodies(n, seed=42):
    return random_system(n, seed=seed)


# =============================================================================
# Tree Profiles
# =============================================================================

def profile_tree_build_medium():
    """Profile tree rebuild: 1000 bodies, 20 rebuilds."""
    bodies = _bodies(1000)
    tree = BarnesHutTree()
    for _ in range(20):
        tree.rebuild(bodies)


def profile_tree_build_large():
    """Profile tree rebuild: 10000 bodies, 5 rebuilds."""
    bodies = _bodies(10000)
    tree = BarnesHutTree()
    for _ in range(5):
        tree.rebuild(bodies)


def profile_query_medium():
    """Profile serial force query: 1000 bodies."""
    with Simulation(bodies=_bodies(1000), workers=1) as sim:
        for _ in range(5):
            sim.compute_accelerations_serial()


def profile_query_exact():
    """Profile serial force query at theta=0: 500 bodies."""
    with Simulation(bodies=_bodies(500), theta=0.0, workers=1) as sim:
        sim.compute_accelerations_serial()


def profile_query_disk():
    """Profile serial force query on a clustered disk: 2000 bodies."""
    with Simulation(bodies=disk_system(2000, seed=42), workers=1) as sim:
        for _ in range(2):
            sim.compute_accelerations_serial()


# =============================================================================
# Step Profiles
# =============================================================================

def profile_steps_small():
    """Profile full steps: 100 bodies, 200 steps."""
    with Simulation(bodies=_bodies(100), workers=2) as sim:
        sim.run(steps=200, dt=1e-3)


def profile_steps_large():
    """Profile full steps: 2000 bodies, 10 steps."""
    with Simulation(bodies=_bodies(2000)) as sim:
        sim.run(steps=10, dt=1e-3)


SCENARIOS = [
    ("tree-medium", "Tree rebuild, 1000 bodies", profile_tree_build_medium),
    ("tree-large", "Tree rebuild, 10000 bodies", profile_tree_build_large),
    ("query-medium", "Serial query, 1000 bodies", profile_query_medium),
    ("query-exact", "Serial query theta=0, 500 bodies", profile_query_exact),
    ("query-disk", "Serial query on a disk, 2000 bodies", profile_query_disk),
    ("steps-small", "Pooled steps, 100 bodies", profile_steps_small),
    ("steps-large", "Pooled steps, 2000 bodies", profile_steps_large),
]


def time_scenario(label, func, top=10):
    """
    Run one scenario, optionally under cProfile.

    Args:
        label: Heading printed above the scenario output
        func: Zero-argument scenario function
        top: Number of hottest functions to list. 0 disables profiling.

    Returns:
        Wall-clock seconds spent in func
    """
    print(f"\n## {label}")

    profiler = cProfile.Profile() if top > 0 else None
    start = time.perf_counter()
    if profiler is None:
        func()
    else:
        profiler.runcall(func)
    seconds = time.perf_counter() - start
    print(f"wall time: {seconds:.3f}s")

    if profiler is not None:
        report = io.StringIO()
        stats = pstats.Stats(profiler, stream=report)
        stats.strip_dirs().sort_stats(SortKey.CUMULATIVE).print_stats(top)
        # Skip the pstats preamble, keep the column header and rows
        body = report.getvalue().splitlines()
        header = next((i for i, row in enumerate(body) if row.lstrip().startswith("ncalls")), 0)
        for row in body[header:]:
            if row.strip():
                print(row)

    return seconds


def main():
    parser = argparse.ArgumentParser(description="Profile nbody2d scenarios")
    parser.add_argument(
        "scenarios",
        nargs="*",
        metavar="KEY",
        help="Scenario keys to run (default: all). Keys: "
        + ", ".join(key for key, _, _ in SCENARIOS),
    )
    parser.add_argument("--top", type=int, default=10, help="Hot functions per scenario, 0 to only time")
    args = parser.parse_args()

    selected = [s for s in SCENARIOS if not args.scenarios or s[0] in args.scenarios]
    if not selected:
        parser.error(f"no scenario matches {args.scenarios}")

    timings = {}
    for key, label, func in selected:
        try:
            timings[key] = time_scenario(label, func, top=args.top)
        except Exception as exc:
            print(f"failed: {type(exc).__name__}: {exc}")
            timings[key] = None

    width = max(len(key) for key in timings)
    print(f"\n{'key':<{width}}  seconds")
    for key, seconds in timings.items():
        shown = "failed" if seconds is None else f"{seconds:8.3f}"
        print(f"{key:<{width}}  {shown}")


if __name__ == "__main__":
    main()
