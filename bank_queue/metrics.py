"""
Metrics computation and reporting.
Compares the tick engine with M/M/1 theory and the exact reference model.
"""

import json
import math
from pathlib import Path
from typing import Dict, Optional
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import config
from bank_queue import theory
from bank_queue.snapshot import Snapshot, json_safe
from bank_queue.stats import StatsAccumulator


def relative_error_pct(observed: float, expected: float) -> float:
    """Absolute relative error in percent, nan when undefined."""
    if expected == 0 or not math.isfinite(expected):
        return float("nan")
    return abs(observed - expected) / abs(expected) * 100


class MetricsComputer:
    """Compute performance metrics and generate reports."""

    def __init__(
        self,
        snapshot: Snapshot,
        arrival_rate: float,
        service_rate: float,
        reference_stats: Optional[StatsAccumulator] = None,
        reference_clock: float = 0.0,
        output_dir: str = config.REPORT_DIR,
        run_id: str = "default",
    ):
        """Initialize metrics computer.

        Args:
            snapshot: Final engine snapshot
            arrival_rate: Arrival rate the run used (per minute)
            service_rate: Service rate the run used (per minute)
            reference_stats: Totals from the reference model, if one ran
            reference_clock: Simulated duration of the reference run
            output_dir: Output directory for reports
            run_id: Identifier for this run
        """
        self.snapshot = snapshot
        self.arrival_rate = arrival_rate
        self.service_rate = service_rate
        self.reference_stats = reference_stats
        self.reference_clock = reference_clock
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.run_id = run_id

    def engine_metrics(self) -> Dict[str, float]:
        stats = self.snapshot.stats
        return {
            "clock": self.snapshot.clock,
            "customers_created": self.snapshot.customers_created,
            "total_served": stats.total_served,
            "queue_length": self.snapshot.queue_length,
            "avg_wait": stats.avg_wait,
            "avg_sojourn": stats.avg_sojourn,
            "utilization": stats.utilization,
            "throughput_per_min": stats.throughput * 60.0,
        }

    def reference_metrics(self) -> Dict[str, float]:
        if self.reference_stats is None:
            return {}
        ref = self.reference_stats
        return {
            "clock": self.reference_clock,
            "total_served": ref.total_served,
            "avg_wait": ref.average_wait(),
            "avg_sojourn": ref.average_sojourn(),
            "utilization": ref.utilization(self.reference_clock),
            "throughput_per_min": ref.throughput(self.reference_clock) * 60.0,
        }

    def compute_errors(self) -> Dict[str, float]:
        """Relative errors of the engine against theory, in percent."""
        expected = theory.summary(self.arrival_rate, self.service_rate)
        stats = self.snapshot.stats
        return {
            "avg_wait_error_pct": relative_error_pct(stats.avg_wait, expected["expected_wait"]),
            "avg_sojourn_error_pct": relative_error_pct(stats.avg_sojourn, expected["expected_sojourn"]),
            "utilization_error_pct": relative_error_pct(stats.utilization, expected["utilization"]),
        }

    def mean_history_length(self) -> float:
        """Mean of the sampled queue lengths still in the window."""
        if not self.snapshot.history:
            return 0.0
        return float(np.mean([s.queue_length for s in self.snapshot.history]))

    def generate_report(self) -> Dict:
        """Generate comprehensive metrics report.

        Returns:
            Report dictionary
        """
        return {
            "run_id": self.run_id,
            "parameters": {
                "arrival_rate": self.arrival_rate,
                "service_rate": self.service_rate,
            },
            "engine": self.engine_metrics(),
            "theory": theory.summary(self.arrival_rate, self.service_rate),
            "reference": self.reference_metrics(),
            "errors": self.compute_errors(),
            "history": {
                "samples": len(self.snapshot.history),
                "mean_queue_length": self.mean_history_length(),
            },
        }

    def save_report_json(self, report: Dict) -> str:
        """Save report as JSON file.

        Args:
            report: Report dictionary

        Returns:
            Path to saved file
        """
        path = self.output_dir / f"report_{self.run_id}.json"

        def default_serializer(obj):
            if isinstance(obj, np.ndarray):
                return obj.tolist()
            if isinstance(obj, (np.integer, np.floating)):
                return float(obj)
            return str(obj)

        # Infinite theory values and undefined errors are written as null
        with open(path, "w") as f:
            json.dump(json_safe(report), f, indent=2, default=default_serializer, allow_nan=False)

        return str(path)

    def history_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            [(s.second, s.queue_length) for s in self.snapshot.history],
            columns=["second", "queue_length"],
        )

    def plot_history(self) -> str:
        """Plot the sampled queue length over the rolling window.

        Returns:
            Path to saved figure, empty if there is nothing to plot
        """
        df = self.history_dataframe()
        if df.empty:
            return ""

        fig, ax = plt.subplots(figsize=(12, 6))
        ax.step(df["second"], df["queue_length"], where="post", linewidth=2, label="Queue length")

        expected = theory.expected_queue_length(self.arrival_rate, self.service_rate)
        if math.isfinite(expected):
            ax.axhline(expected, color="r", linestyle="--", label="Theoretical Lq", linewidth=2)

        ax.set_xlabel("Simulation Time (s)")
        ax.set_ylabel("Customers Waiting")
        ax.set_title("Queue Length History")
        ax.legend()
        ax.grid(True, alpha=0.3)

        path = self.output_dir.parent / "plots" / f"history_{self.run_id}.png"
        path.parent.mkdir(parents=True, exist_ok=True)
        plt.tight_layout()
        plt.savefig(path, dpi=150)
        plt.close(fig)

        return str(path)
