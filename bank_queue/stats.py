"""Running statistics for served customers."""

from dataclasses import dataclass


@dataclass
class StatsAccumulator:
    """Running totals folded in at each departure."""
    total_served: int = 0
    total_wait_time: float = 0.0
    total_system_time: float = 0.0
    busy_time: float = 0.0

    def record(self, wait: float, sojourn: float, service_duration: float):
        """Fold one departed customer into the totals."""
        self.total_served += 1
        self.total_wait_time += wait
        self.total_system_time += sojourn
        self.busy_time += service_duration

    def clear(self):
        """Zero every total."""
        self.total_served = 0
        self.total_wait_time = 0.0
        self.total_system_time = 0.0
        self.busy_time = 0.0

    def average_wait(self) -> float:
        """Calculate average time spent in queue before service."""
        if self.total_served > 0:
            return self.total_wait_time / self.total_served
        return 0.0

    def average_sojourn(self) -> float:
        """Calculate average time spent in the system."""
        if self.total_served > 0:
            return self.total_system_time / self.total_served
        return 0.0

    def utilization(self, clock: float) -> float:
        """Fraction of elapsed simulated time the teller was busy."""
        if clock > 0:
            return min(max(self.busy_time / clock, 0.0), 1.0)
        return 0.0

    def throughput(self, clock: float) -> float:
        """Served customers per simulated second."""
        if clock > 0:
            return self.total_served / clock
        return 0.0
