"""Immutable views of engine state handed to the renderer each tick."""

import math
from dataclasses import dataclass, asdict
from typing import Optional, Tuple
from bank_queue.history import HistorySample


def json_safe(value):
    """Replace non-finite floats with None, recursing into containers."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    return value


@dataclass(frozen=True)
class CustomerView:
    """Read-only copy of a customer."""
    id: int
    arrival_time: float
    service_duration: float
    start_service_time: Optional[float] = None


@dataclass(frozen=True)
class StatsView:
    """Raw totals plus derived averages."""
    total_served: int
    total_wait_time: float
    total_system_time: float
    busy_time: float
    avg_wait: float
    avg_sojourn: float
    utilization: float
    throughput: float


@dataclass(frozen=True)
class Snapshot:
    """Externally visible engine state at the end of a tick."""
    clock: float
    queue: Tuple[CustomerView, ...]
    server: Optional[CustomerView]
    stats: StatsView
    history: Tuple[HistorySample, ...]
    next_arrival: float
    next_departure: float
    customers_created: int

    @property
    def queue_length(self) -> int:
        return len(self.queue)

    @property
    def busy(self) -> bool:
        return self.server is not None

    def to_dict(self) -> dict:
        """Plain dict form for JSON reports; infinite event times become None."""
        data = asdict(self)
        data["history"] = [{"second": s.second, "queue_length": s.queue_length} for s in self.history]
        return json_safe(data)
