"""
Random variate generation for the queue.
Exponential interarrival and service times via inverse-CDF sampling.
"""

from typing import Optional
import numpy as np
from bank_queue.errors import check_rate


class ExponentialSampler:
    """Draw exponential samples from rates expressed per minute."""

    def __init__(self, rng=None, seed: Optional[int] = None):
        """Initialize sampler.

        Args:
            rng: Uniform source with a ``random()`` method returning values
                in [0, 1) (a numpy Generator by default)
            seed: Seed for the default generator, ignored when rng is given
        """
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def uniform(self) -> float:
        """Draw U from the open interval (0, 1)."""
        u = float(self.rng.random())
        while u <= 0.0:
            u = float(self.rng.random())
        return u

    def sample(self, rate_per_minute: float) -> float:
        """Sample an exponential duration in seconds.

        Args:
            rate_per_minute: Mean number of events per minute

        Returns:
            Positive duration in simulated seconds
        """
        rate_per_second = check_rate("rate_per_minute", rate_per_minute) / 60.0
        return float(-np.log(self.uniform()) / rate_per_second)
