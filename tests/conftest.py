"""Shared fixtures for the queue tests."""

import pytest
from bank_queue.engine import SimulationEngine


class FixedUniform:
    """Uniform source that replays a sequence, repeating the last value."""

    def __init__(self, *values):
        self.values = list(values) or [0.5]
        self.calls = 0

    def random(self):
        value = self.values[min(self.calls, len(self.values) - 1)]
        self.calls += 1
        return value


@pytest.fixture
def half_engine():
    """Engine whose every uniform draw is 0.5."""
    return SimulationEngine(arrival_rate=4, service_rate=5, rng=FixedUniform(0.5))
