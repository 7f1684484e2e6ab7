"""
Queue-length history for trend display.
Samples on whole simulated-second boundaries into a bounded rolling window.
"""

import math
from collections import deque
from typing import List, NamedTuple
import config


class HistorySample(NamedTuple):
    """Queue length observed at a whole simulated second."""
    second: int
    queue_length: int


class HistorySampler:
    """Rolling window of queue-length samples."""

    def __init__(self, capacity: int = config.HISTORY_CAPACITY):
        """Initialize history sampler.

        Args:
            capacity: Maximum number of samples kept, oldest evicted first
        """
        if capacity < 1:
            raise ValueError(f"history capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.samples = deque(maxlen=capacity)

    def observe(self, previous_clock: float, clock: float, queue_length: int) -> bool:
        """Observe the queue once per advance.

        A sample is recorded only when the whole-second part of the clock
        moved forward during the advance; crossing several boundaries in one
        call still records a single sample.

        Args:
            previous_clock: Clock before the advance
            clock: Clock after the advance
            queue_length: Queue length at the end of the advance

        Returns:
            True if a sample was recorded
        """
        second = math.floor(clock)
        if second <= math.floor(previous_clock):
            return False
        self.samples.append(HistorySample(second, queue_length))
        return True

    def clear(self):
        """Drop every sample."""
        self.samples.clear()

    def to_list(self) -> List[HistorySample]:
        """Return samples oldest first."""
        return list(self.samples)

    def __len__(self) -> int:
        return len(self.samples)
