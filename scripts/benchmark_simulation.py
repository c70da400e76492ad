#!/usr/bin/env python3
"""
Benchmark the Barnes-Hut simulation against direct summation.

Usage:
    python scripts/benchmark_simulation.py [--bodies N,...] [--steps S] [--workers W,...]

Examples:
    python scripts/benchmark_simulation.py
    python scripts/benchmark_simulation.py --bodies 100,1000,5000 --steps 10
    python scripts/benchmark_simulation.py --workers 1,2,4,8 --theta 0.7
    python scripts/benchmark_simulation.py --direct --output results.json
"""

from __future__ import annotations

import argparse
import json
import logging
import time
from typing import Any

from nbody2d import (
    TIME_STEP,
    DirectSimulation,
    Simulation,
    energy_drift,
    random_system,
    total_energy,
)


def benchmark_simulation(
    simulation_class: type,
    count: int,
    steps: int,
    dt: float,
    seed: int = 42,
    **kwargs: Any,
) -> dict[str, Any]:
    """
    Benchmark a single simulation configuration.

    Returns:
        Dict with timing and energy drift
    """
    bodies = random_system(count, seed=seed)

    with simulation_class(bodies=bodies, **kwargs) as sim:
        initial = total_energy(sim.bodies, sim.softening)
        # First step includes the initial force evaluation
        sim.step(dt)

        start = time.perf_counter()
        sim.run(steps=steps, dt=dt)
        elapsed = time.perf_counter() - start

        drift = energy_drift(initial, total_energy(sim.bodies, sim.softening))

    return {
        "time_seconds": elapsed,
        "seconds_per_step": elapsed / max(1, steps),
        "num_bodies": len(bodies),
        "energy_drift": drift,
    }


def run_benchmarks(
    counts: list[int],
    workers: list[int],
    steps: int = 20,
    theta: float = 0.5,
    dt: float = TIME_STEP,
    direct: bool = False,
) -> list[dict]:
    """Run benchmarks over body counts and pool sizes."""
    configurations: dict[str, tuple[type, dict[str, Any]]] = {
        f"BH w={w}": (Simulation, {"theta": theta, "workers": w}) for w in workers
    }
    if direct:
        configurations["Direct"] = (DirectSimulation, {})

    results = []

    print(f"\nBenchmarking {len(configurations)} configurations on {len(counts)} system sizes")
    print(f"Steps: {steps}, dt: {dt:.3g} yr, theta: {theta}")
    print("=" * 80)

    for count in counts:
        print(f"\n{count} bodies (+1 star)")
        print("-" * 60)

        for name, (simulation_class, kwargs) in configurations.items():
            # Direct summation holds an n x n matrix per step
            if simulation_class is DirectSimulation and count > 5000:
                print(f"  {name:12s}: SKIPPED (O(n^2) memory)")
                continue

            try:
                result = benchmark_simulation(simulation_class, count, steps, dt, **kwargs)
                print(
                    f"  {name:12s}: {result['time_seconds']:.4f}s "
                    f"({result['seconds_per_step'] * 1000:.2f} ms/step, "
                    f"drift {result['energy_drift']:.2e})"
                )
                results.append({"configuration": name, **result})
            except Exception as e:
                print(f"  {name:12s}: ERROR - {e}")

    # Summary
    print("\n" + "=" * 80)
    print("SUMMARY (ms per step)")
    print("=" * 80)

    names = list(configurations.keys())
    print(f"{'Bodies':<10s}", end="")
    for name in names:
        print(f"{name:>12s}", end="")
    print()
    print("-" * (10 + 12 * len(names)))

    for count in counts:
        print(f"{count:<10d}", end="")
        for name in names:
            matching = [
                r for r in results if r["num_bodies"] == count + 1 and r["configuration"] == name
            ]
            if matching:
                print(f"{matching[0]['seconds_per_step'] * 1000:>12.2f}", end="")
            else:
                print(f"{'--':>12s}", end="")
        print()

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark the Barnes-Hut simulation")
    parser.add_argument("--bodies", default="100,500,2000", help="Comma-separated body counts")
    parser.add_argument("--workers", default="1,4", help="Comma-separated pool sizes")
    parser.add_argument("--steps", type=int, default=20, help="Timed steps per run")
    parser.add_argument("--theta", type=float, default=0.5, help="Barnes-Hut opening angle")
    parser.add_argument("--dt", type=float, default=TIME_STEP, help="Time step in years")
    parser.add_argument("--direct", action="store_true", help="Also time direct summation")
    parser.add_argument("--output", help="Output JSON file for results")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log tree rebuilds")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    results = run_benchmarks(
        counts=[int(n) for n in args.bodies.split(",")],
        workers=[int(w) for w in args.workers.split(",")],
        steps=args.steps,
        theta=args.theta,
        dt=args.dt,
        direct=args.direct,
    )

    if args.output and results:
        with open(args.output, "w") as f:
            json.dump(results, f, indent=2)
        print(f"\nResults saved to {args.output}")


if __name__ == "__main__":
    main()
