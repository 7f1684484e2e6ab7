"""
Headless orchestration script for the bank queue simulation.
Drives the tick engine for several seeds, runs the exact reference model
alongside, and writes reports.
"""

from pathlib import Path
import logging
import sys

# Ensure root directory is in path for config import
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

import numpy as np
import config
from bank_queue import theory
from bank_queue.driver import TickDriver
from bank_queue.engine import SimulationEngine
from bank_queue.event_log import EventLog
from bank_queue.metrics import MetricsComputer
from bank_queue.reference_model import run_reference


def run_single_simulation(run_id: int = 0, speed: float = config.SPEED_OPTIONS[-1]) -> dict:
    """Run one driven engine + reference simulation.

    Args:
        run_id: Identifier for this run (seed offset)
        speed: Speed multiplier for the driver

    Returns:
        Dictionary with results
    """
    seed = config.RANDOM_SEED_BASE + run_id

    event_log = EventLog(output_dir=config.LOG_DIR, run_id=f"engine_run{run_id}")
    engine = SimulationEngine(
        arrival_rate=config.ARRIVAL_RATE,
        service_rate=config.SERVICE_RATE,
        speed_multiplier=speed,
        catch_up=config.CATCH_UP,
        seed=seed,
        event_log=event_log,
    )
    driver = TickDriver(engine=engine)
    driver.start()

    print(f"[Run {run_id}] Driving engine...")
    snapshot = driver.run(config.RUN_DURATION)
    print(f"[Run {run_id}] Engine reached t={snapshot.clock:.1f} s.")

    reference = run_reference(
        duration=snapshot.clock,
        arrival_rate=config.ARRIVAL_RATE,
        service_rate=config.SERVICE_RATE,
        seed=seed + 1000,
    )

    metrics_computer = MetricsComputer(
        snapshot=snapshot,
        arrival_rate=config.ARRIVAL_RATE,
        service_rate=config.SERVICE_RATE,
        reference_stats=reference.stats,
        reference_clock=snapshot.clock,
        output_dir=config.REPORT_DIR,
        run_id=f"run{run_id}",
    )

    report = metrics_computer.generate_report()
    metrics_computer.save_report_json(report)
    metrics_computer.plot_history()

    print(f"[Run {run_id}] Report saved.")

    return report


def run_batch_simulation(num_seeds: int = config.NUM_SEEDS):
    """Run multiple simulations with different seeds.

    Args:
        num_seeds: Number of independent runs
    """
    expected = theory.summary(config.ARRIVAL_RATE, config.SERVICE_RATE)

    print(f"Bank Queue Simulation (M/M/1)")
    print(f"=" * 50)
    print(f"Configuration:")
    print(f"  Arrival rate: {config.ARRIVAL_RATE} customers/min")
    print(f"  Service rate: {config.SERVICE_RATE} customers/min")
    print(f"  Traffic intensity: {expected['traffic_intensity']:.2f}")
    print(f"  Wall-clock per run: {config.RUN_DURATION} s at x{config.SPEED_OPTIONS[-1]:.0f}")
    print(f"  Catch-up mode: {config.CATCH_UP}")
    print(f"  Number of runs: {num_seeds}")
    print(f"=" * 50)

    all_reports = []

    for run_id in range(num_seeds):
        print(f"\n--- Run {run_id + 1}/{num_seeds} ---")
        report = run_single_simulation(run_id)
        all_reports.append(report)

    print(f"\n{'=' * 50}")
    print(f"SUMMARY")
    print(f"{'=' * 50}")

    for key, label, unit in [
        ("avg_wait", "Average Wait", "s"),
        ("avg_sojourn", "Average Time in System", "s"),
        ("utilization", "Utilization", ""),
    ]:
        engine_values = [r["engine"][key] for r in all_reports]
        reference_values = [r["reference"][key] for r in all_reports]
        print(f"\n{label}:")
        print(f"  Engine mean:    {np.mean(engine_values):.3f} {unit}")
        print(f"  Engine std:     {np.std(engine_values):.3f} {unit}")
        print(f"  Reference mean: {np.mean(reference_values):.3f} {unit}")

    print(f"\nTheory:")
    print(f"  Expected wait:    {expected['expected_wait']:.3f} s")
    print(f"  Expected sojourn: {expected['expected_sojourn']:.3f} s")
    print(f"  Utilization:      {expected['utilization']:.3f}")

    print(f"\n{'=' * 50}")
    print(f"Outputs:")
    print(f"  Event logs: {config.LOG_DIR}")
    print(f"  Reports:   {config.REPORT_DIR}")
    print(f"  Plots:     {config.PLOT_DIR}")
    print(f"{'=' * 50}")


def main():
    """Entry point for the simulation."""
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s - %(levelname)s - %(message)s")
    run_batch_simulation(num_seeds=config.NUM_SEEDS)


if __name__ == "__main__":
    main()
