"""
Simulation engine for the single-channel bank queue.
Tick-driven M/M/1 process: the driver hands over elapsed simulated time,
the engine fires arrivals and departures whose scheduled instants were crossed.
"""

import logging
import math
from collections import deque
from dataclasses import dataclass
from typing import Optional
import config
from bank_queue.errors import DegenerateAdvanceError, check_rate
from bank_queue.event_log import Event, EventLog
from bank_queue.history import HistorySampler
from bank_queue.snapshot import CustomerView, Snapshot, StatsView
from bank_queue.stats import StatsAccumulator
from bank_queue.variates import ExponentialSampler

logger = logging.getLogger(__name__)


@dataclass
class Customer:
    """A bank customer flowing through the queue."""
    id: int
    arrival_time: float
    service_duration: float
    start_service_time: Optional[float] = None

    def view(self) -> CustomerView:
        return CustomerView(
            id=self.id,
            arrival_time=self.arrival_time,
            service_duration=self.service_duration,
            start_service_time=self.start_service_time,
        )


class SimulationEngine:
    """Single-server queue advanced in discrete ticks."""

    def __init__(
        self,
        arrival_rate: float = config.ARRIVAL_RATE,
        service_rate: float = config.SERVICE_RATE,
        speed_multiplier: float = config.SPEED_MULTIPLIER,
        history_capacity: int = config.HISTORY_CAPACITY,
        catch_up: bool = config.CATCH_UP,
        rng=None,
        seed: Optional[int] = None,
        event_log: Optional[EventLog] = None,
    ):
        """Initialize engine and schedule the first arrival.

        Args:
            arrival_rate: Customers arriving per minute (λ)
            service_rate: Customers served per minute (μ)
            speed_multiplier: Simulated seconds per wall-clock second, kept
                for the driver
            history_capacity: Number of queue-length samples kept
            catch_up: Fire every event crossed during an advance instead of
                at most one arrival and one departure
            rng: Uniform source for the exponential sampler
            seed: Seed for the default generator
            event_log: Optional EventLog receiving every transition
        """
        self.arrival_rate = check_rate("arrival_rate", arrival_rate)
        self.service_rate = check_rate("service_rate", service_rate)
        self.speed_multiplier = check_rate("speed_multiplier", speed_multiplier)
        self.catch_up = catch_up
        self.event_log = event_log

        self.sampler = ExponentialSampler(rng=rng, seed=seed)
        self.stats = StatsAccumulator()
        self.history = HistorySampler(capacity=history_capacity)
        self.queue = deque()
        self.server: Optional[Customer] = None

        self.clock = 0.0
        self.next_arrival = 0.0
        self.next_departure = math.inf
        self._next_id = 1

        self._restart()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def reset(self, arrival_rate: Optional[float] = None, service_rate: Optional[float] = None):
        """Return to time zero with an empty system.

        Args:
            arrival_rate: New arrival rate, keeps the current one if None
            service_rate: New service rate, keeps the current one if None
        """
        new_arrival = self.arrival_rate if arrival_rate is None else check_rate("arrival_rate", arrival_rate)
        new_service = self.service_rate if service_rate is None else check_rate("service_rate", service_rate)

        self.arrival_rate = new_arrival
        self.service_rate = new_service
        self._restart()
        logger.info(
            "Engine reset: arrival_rate=%.2f/min service_rate=%.2f/min, first arrival at t=%.2f",
            self.arrival_rate, self.service_rate, self.next_arrival,
        )

    def reconfigure(
        self,
        arrival_rate: Optional[float] = None,
        service_rate: Optional[float] = None,
        speed_multiplier: Optional[float] = None,
    ):
        """Change parameters for future draws only.

        Already scheduled arrivals and the in-service departure keep the
        instants they were sampled with.
        """
        updates = {}
        if arrival_rate is not None:
            updates["arrival_rate"] = check_rate("arrival_rate", arrival_rate)
        if service_rate is not None:
            updates["service_rate"] = check_rate("service_rate", service_rate)
        if speed_multiplier is not None:
            updates["speed_multiplier"] = check_rate("speed_multiplier", speed_multiplier)

        for name, value in updates.items():
            setattr(self, name, value)
        if updates:
            logger.info("Engine reconfigured at t=%.2f: %s", self.clock, updates)

    def _restart(self):
        """Clear every piece of run state and sample the first arrival."""
        self.clock = 0.0
        self.queue.clear()
        self.server = None
        self.stats.clear()
        self.history.clear()
        self._next_id = 1
        self.next_departure = math.inf
        self.next_arrival = self.sampler.sample(self.arrival_rate)
        if self.event_log is not None:
            self.event_log.clear()

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    @property
    def busy(self) -> bool:
        return self.server is not None

    @property
    def customers_created(self) -> int:
        return self._next_id - 1

    def advance(self, delta: float) -> Snapshot:
        """Advance simulated time and fire the events that came due.

        In the default mode at most one arrival and then at most one
        departure fire per call, both stamped with the post-advance clock.
        A delta much longer than the mean interarrival time therefore
        under-fires arrivals; a fast tick cadence catches up over
        subsequent calls. With ``catch_up`` every crossed event fires at
        its own scheduled instant.

        Args:
            delta: Simulated seconds to advance, non-negative and finite

        Returns:
            Snapshot of the state after the advance
        """
        try:
            delta = float(delta)
        except (TypeError, ValueError):
            raise DegenerateAdvanceError(delta) from None
        if not math.isfinite(delta) or delta < 0:
            raise DegenerateAdvanceError(delta)

        previous_clock = self.clock
        if self.catch_up:
            self._advance_exact(previous_clock + delta)
        else:
            self._advance_tick(previous_clock + delta)

        self.history.observe(previous_clock, self.clock, len(self.queue))
        return self.snapshot()

    def _advance_tick(self, target: float):
        self.clock = target
        if self.clock >= self.next_arrival:
            self._fire_arrival(self.clock)
        if self.server is not None and self.clock >= self.next_departure:
            self._fire_departure(self.clock)

    def _advance_exact(self, target: float):
        while True:
            event_time = min(self.next_arrival, self.next_departure)
            if event_time > target:
                break
            self.clock = max(self.clock, event_time)
            # Arrivals win ties
            if self.next_arrival <= self.next_departure:
                self._fire_arrival(self.clock)
            else:
                self._fire_departure(self.clock)
        self.clock = target

    def _fire_arrival(self, now: float):
        customer = Customer(
            id=self._next_id,
            arrival_time=self.next_arrival,
            service_duration=self.sampler.sample(self.service_rate),
        )
        self._next_id += 1
        self._log("arrival", now, customer)
        logger.debug("Customer %s arrived at t=%.2f (scheduled %.2f)", customer.id, now, customer.arrival_time)

        if self.server is None:
            self._start_service(customer, now)
        else:
            self.queue.append(customer)

        self.next_arrival += self.sampler.sample(self.arrival_rate)

    def _fire_departure(self, now: float):
        finished = self.server
        wait = finished.start_service_time - finished.arrival_time
        sojourn = now - finished.arrival_time
        self.stats.record(wait, sojourn, finished.service_duration)
        self.server = None
        self._log("departure", now, finished, finished.service_duration)
        logger.debug("Customer %s departed at t=%.2f after waiting %.2f", finished.id, now, wait)

        if self.queue:
            self._start_service(self.queue.popleft(), now)
        else:
            self.next_departure = math.inf

    def _start_service(self, customer: Customer, now: float):
        customer.start_service_time = now
        self.server = customer
        self.next_departure = now + customer.service_duration
        self._log("service_start", now, customer, customer.service_duration)

    def _log(self, event_type: str, now: float, customer: Customer, service_time: Optional[float] = None):
        if self.event_log is None:
            return
        self.event_log.log_event(Event(
            timestamp=now,
            event_type=event_type,
            customer_id=customer.id,
            queue_length=len(self.queue),
            service_time=service_time,
        ))

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def snapshot(self) -> Snapshot:
        """Copy of the externally visible state."""
        return Snapshot(
            clock=self.clock,
            queue=tuple(c.view() for c in self.queue),
            server=self.server.view() if self.server is not None else None,
            stats=StatsView(
                total_served=self.stats.total_served,
                total_wait_time=self.stats.total_wait_time,
                total_system_time=self.stats.total_system_time,
                busy_time=self.stats.busy_time,
                avg_wait=self.stats.average_wait(),
                avg_sojourn=self.stats.average_sojourn(),
                utilization=self.stats.utilization(self.clock),
                throughput=self.stats.throughput(self.clock),
            ),
            history=tuple(self.history.to_list()),
            next_arrival=self.next_arrival,
            next_departure=self.next_departure,
            customers_created=self.customers_created,
        )
