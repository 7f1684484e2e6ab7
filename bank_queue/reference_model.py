"""
Reference model: exact next-event M/M/1 on SimPy.
Used to check the tick engine against an event-calendar simulation.
"""

import logging
import simpy
from typing import Optional
import config
from bank_queue.errors import check_rate
from bank_queue.stats import StatsAccumulator
from bank_queue.variates import ExponentialSampler

logger = logging.getLogger(__name__)


class ReferenceQueue:
    """Single teller served FIFO, simulated event by event."""

    def __init__(
        self,
        env: simpy.Environment,
        arrival_rate: float = config.ARRIVAL_RATE,
        service_rate: float = config.SERVICE_RATE,
        rng=None,
        seed: Optional[int] = None,
    ):
        """Initialize reference model.

        Args:
            env: SimPy environment, time unit is the simulated second
            arrival_rate: Customers arriving per minute
            service_rate: Customers served per minute
            rng: Uniform source for the sampler
            seed: Seed for the default generator
        """
        self.env = env
        self.arrival_rate = check_rate("arrival_rate", arrival_rate)
        self.service_rate = check_rate("service_rate", service_rate)
        self.sampler = ExponentialSampler(rng=rng, seed=seed)

        # Capacity 1: one teller
        self.teller = simpy.Resource(env, capacity=1)

        self.customer_counter = 0
        self.stats = StatsAccumulator()

    def arrival_process(self):
        """SimPy process: generate customer arrivals."""
        while True:
            yield self.env.timeout(self.sampler.sample(self.arrival_rate))

            self.customer_counter += 1
            service_time = self.sampler.sample(self.service_rate)
            self.env.process(self.service_process(self.customer_counter, self.env.now, service_time))

    def service_process(self, customer_id: int, arrival_time: float, service_time: float):
        """SimPy process: wait for the teller, get served, leave."""
        with self.teller.request() as req:
            yield req
            start = self.env.now
            yield self.env.timeout(service_time)

        self.stats.record(start - arrival_time, self.env.now - arrival_time, service_time)
        logger.debug("Reference customer %s left at t=%.2f", customer_id, self.env.now)

    def run(self):
        """Start the reference simulation."""
        self.env.process(self.arrival_process())

    @property
    def queue_length(self) -> int:
        return len(self.teller.queue)


def run_reference(
    duration: float,
    arrival_rate: float = config.ARRIVAL_RATE,
    service_rate: float = config.SERVICE_RATE,
    seed: Optional[int] = None,
) -> ReferenceQueue:
    """Run the reference model for a span of simulated seconds."""
    env = simpy.Environment()
    model = ReferenceQueue(env, arrival_rate, service_rate, seed=seed)
    model.run()
    env.run(until=duration)
    return model
