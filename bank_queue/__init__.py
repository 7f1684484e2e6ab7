"""Single-channel bank queue (M/M/1) simulation engine."""

from bank_queue.engine import Customer, SimulationEngine
from bank_queue.errors import DegenerateAdvanceError, InvalidRateError, SimulationError
from bank_queue.snapshot import Snapshot

__all__ = [
    "Customer",
    "SimulationEngine",
    "Snapshot",
    "SimulationError",
    "InvalidRateError",
    "DegenerateAdvanceError",
]
