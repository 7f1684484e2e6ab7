"""
Tests for the tick-driven simulation engine.
"""

import dataclasses
import json
import math
import pytest
from bank_queue.engine import Customer, SimulationEngine
from bank_queue.errors import DegenerateAdvanceError, InvalidRateError
from bank_queue.event_log import EventLog
from conftest import FixedUniform

INTERARRIVAL_HALF = math.log(2) * 15.0  # U = 0.5 at 4 / min
SERVICE_HALF = math.log(2) * 12.0  # U = 0.5 at 5 / min


def test_initial_state(half_engine):
    """Fresh engine is idle with one arrival scheduled."""
    snap = half_engine.snapshot()

    assert snap.clock == 0.0
    assert snap.server is None
    assert snap.queue == ()
    assert snap.next_departure == math.inf
    assert snap.next_arrival == pytest.approx(INTERARRIVAL_HALF)
    assert snap.customers_created == 0


def test_single_large_advance_fires_one_arrival(half_engine):
    """A 1000 s delta processes only the first due arrival."""
    half_engine.reset(arrival_rate=4, service_rate=5)
    snap = half_engine.advance(1000)

    assert snap.customers_created == 1
    assert snap.queue_length == 0
    customer = snap.server
    assert customer.id == 1
    assert customer.arrival_time == pytest.approx(INTERARRIVAL_HALF)
    assert customer.service_duration == pytest.approx(SERVICE_HALF)
    # Service starts at the post-advance clock, not the scheduled arrival
    assert customer.start_service_time == 1000
    assert snap.next_departure == pytest.approx(1000 + SERVICE_HALF)
    assert snap.next_arrival == pytest.approx(2 * INTERARRIVAL_HALF)
    assert snap.stats.total_served == 0


def test_catch_up_processes_every_event():
    """In catch-up mode a 1000 s delta fires every crossed event at its own instant."""
    engine = SimulationEngine(arrival_rate=4, service_rate=5, rng=FixedUniform(0.5), catch_up=True)
    snap = engine.advance(1000)

    arrivals = int(1000 // INTERARRIVAL_HALF)
    assert snap.customers_created == arrivals
    assert snap.stats.total_served == arrivals - 1
    assert snap.stats.total_wait_time == pytest.approx(0.0, abs=1e-9)
    assert snap.stats.busy_time == pytest.approx((arrivals - 1) * SERVICE_HALF)
    assert snap.server.start_service_time == pytest.approx(snap.server.arrival_time)
    assert snap.clock == 1000


def test_departure_promotes_queue_head():
    """Departure at t=10 moves the next queued customer into service."""
    engine = SimulationEngine(arrival_rate=4, service_rate=5, rng=FixedUniform(0.5))
    engine.clock = 9.0
    engine.next_arrival = 100.0
    engine.server = Customer(id=1, arrival_time=0.0, service_duration=10.0, start_service_time=0.0)
    engine.next_departure = 10.0
    engine.queue.extend([
        Customer(id=2, arrival_time=1.0, service_duration=5.0),
        Customer(id=3, arrival_time=2.0, service_duration=4.0),
    ])
    engine._next_id = 4

    snap = engine.advance(1.0)

    assert snap.clock == 10.0
    assert snap.stats.total_served == 1
    assert snap.stats.total_wait_time == 0.0
    assert snap.stats.total_system_time == 10.0
    assert snap.stats.busy_time == 10.0
    assert snap.server.id == 2
    assert snap.server.start_service_time == 10.0
    assert snap.next_departure == 15.0
    assert snap.queue_length == 1
    assert snap.queue[0].id == 3


def test_last_departure_idles_server():
    engine = SimulationEngine(rng=FixedUniform(0.5))
    engine.next_arrival = 100.0
    engine.server = Customer(id=1, arrival_time=0.0, service_duration=2.0, start_service_time=0.0)
    engine.next_departure = 2.0
    engine._next_id = 2

    snap = engine.advance(3.0)

    assert snap.server is None
    assert snap.next_departure == math.inf
    assert snap.stats.total_served == 1
    assert snap.stats.total_system_time == 3.0


def test_arrival_processed_before_departure():
    """Both events due in one advance: the arrival queues, then the departure promotes it."""
    engine = SimulationEngine(rng=FixedUniform(0.5))
    engine.clock = 4.0
    engine.next_arrival = 5.0
    engine.server = Customer(id=1, arrival_time=0.0, service_duration=5.0, start_service_time=0.0)
    engine.next_departure = 5.0
    engine._next_id = 2

    snap = engine.advance(1.0)

    assert snap.stats.total_served == 1
    assert snap.server.id == 2
    assert snap.server.start_service_time == 5.0
    assert snap.queue_length == 0


def test_catch_up_arrival_processed_before_departure():
    """Exact stepping breaks a tie at t=5 in favour of the arrival."""
    log = EventLog()
    engine = SimulationEngine(rng=FixedUniform(0.5), catch_up=True, event_log=log)
    engine.clock = 4.0
    engine.next_arrival = 5.0
    engine.server = Customer(id=1, arrival_time=0.0, service_duration=5.0, start_service_time=0.0)
    engine.next_departure = 5.0
    engine._next_id = 2

    snap = engine.advance(1.0)

    assert snap.stats.total_served == 1
    assert snap.server.id == 2
    assert snap.server.start_service_time == 5.0
    assert snap.queue_length == 0
    assert [(e.event_type, e.customer_id) for e in log.events] == [
        ("arrival", 2),
        ("departure", 1),
        ("service_start", 2),
    ]


def test_conservation_fifo_and_bounds():
    """Invariants hold on every tick of a seeded run."""
    log = EventLog()
    engine = SimulationEngine(arrival_rate=9, service_rate=10, seed=3, event_log=log)
    last_clock = 0.0

    for _ in range(20000):
        snap = engine.advance(0.25)
        in_server = 1 if snap.busy else 0
        assert snap.stats.total_served + snap.queue_length + in_server == snap.customers_created
        assert snap.clock >= last_clock
        assert snap.stats.busy_time <= snap.clock
        assert 0.0 <= snap.stats.utilization <= 1.0
        assert all(c.start_service_time is None for c in snap.queue)
        last_clock = snap.clock

    departed = [e.customer_id for e in log.get_departures()]
    assert departed == sorted(departed)
    assert len(departed) > 100

    starts = {e.customer_id: e.timestamp for e in log.get_events_by_type("service_start")}
    arrivals = {e.customer_id: e.timestamp for e in log.get_arrivals()}
    for customer_id in departed:
        assert starts[customer_id] >= arrivals[customer_id]
    assert engine.stats.total_wait_time >= 0


def test_reset_is_idempotent():
    """Two resets in a row differ only in the freshly sampled next arrival."""
    engine = SimulationEngine(arrival_rate=10, service_rate=6, seed=11)
    for _ in range(500):
        engine.advance(1.0)

    engine.reset(arrival_rate=10, service_rate=6)
    first = engine.snapshot()
    engine.reset(arrival_rate=10, service_rate=6)
    second = engine.snapshot()

    assert dataclasses.replace(first, next_arrival=0.0) == dataclasses.replace(second, next_arrival=0.0)
    assert second.clock == 0.0
    assert second.customers_created == 0
    assert second.history == ()
    assert second.stats.total_served == 0
    assert second.next_arrival > 0

    engine.advance(10000)
    assert engine.snapshot().server.id == 1


def test_reset_rejects_bad_rate_without_mutating():
    engine = SimulationEngine(arrival_rate=4, service_rate=5, seed=5)
    engine.advance(50.0)
    before = engine.snapshot()

    with pytest.raises(InvalidRateError):
        engine.reset(arrival_rate=6, service_rate=0)

    assert engine.snapshot() == before
    assert engine.arrival_rate == 4


def test_reconfigure_is_all_or_nothing():
    engine = SimulationEngine(arrival_rate=4, service_rate=5, seed=5)

    with pytest.raises(InvalidRateError):
        engine.reconfigure(arrival_rate=8, speed_multiplier=-1)

    assert engine.arrival_rate == 4
    assert engine.speed_multiplier == 1.0


def test_reconfigure_keeps_scheduled_events(half_engine):
    """New rates apply only from the next draw on."""
    half_engine.advance(INTERARRIVAL_HALF)
    scheduled_arrival = half_engine.next_arrival
    scheduled_departure = half_engine.next_departure

    half_engine.reconfigure(arrival_rate=12, service_rate=15, speed_multiplier=20)

    assert half_engine.next_arrival == scheduled_arrival
    assert half_engine.next_departure == scheduled_departure
    assert half_engine.speed_multiplier == 20

    # Next arrival fires; its service and the following interarrival use the new rates
    half_engine.advance(scheduled_arrival - half_engine.clock)
    newcomer = half_engine.queue[-1] if half_engine.queue else half_engine.server
    assert newcomer.service_duration == pytest.approx(math.log(2) * 4.0)
    assert half_engine.next_arrival == pytest.approx(scheduled_arrival + math.log(2) * 5.0)


@pytest.mark.parametrize("delta", [-0.1, float("nan"), float("inf"), None])
def test_advance_rejects_degenerate_delta(half_engine, delta):
    before = half_engine.snapshot()

    with pytest.raises(DegenerateAdvanceError):
        half_engine.advance(delta)

    assert half_engine.snapshot() == before


def test_zero_advance_is_a_no_op(half_engine):
    before = half_engine.snapshot()
    assert half_engine.advance(0.0) == before


def test_snapshot_is_detached(half_engine):
    """Later advances never change a snapshot already handed out."""
    half_engine.advance(INTERARRIVAL_HALF)
    snap = half_engine.snapshot()
    assert snap.server.id == 1

    half_engine.advance(100.0)

    assert half_engine.server.id == 2
    assert snap.server.id == 1
    assert snap.server.start_service_time == pytest.approx(INTERARRIVAL_HALF)
    with pytest.raises(dataclasses.FrozenInstanceError):
        snap.server.start_service_time = 0.0
    assert isinstance(snap.queue, tuple)


def test_snapshot_to_dict():
    engine = SimulationEngine(seed=2)
    for _ in range(200):
        engine.advance(1.0)
    data = engine.snapshot().to_dict()

    assert data["clock"] == 200.0
    assert set(data["stats"]) >= {"avg_wait", "avg_sojourn", "utilization", "throughput"}
    assert data["history"][-1]["second"] == 200
    assert len(data["history"]) == 30


def test_snapshot_to_dict_is_strict_json(half_engine):
    """An idle teller's infinite departure time serializes as null."""
    data = half_engine.snapshot().to_dict()

    text = json.dumps(data, allow_nan=False)

    assert data["next_departure"] is None
    assert json.loads(text)["next_arrival"] == pytest.approx(INTERARRIVAL_HALF)

    half_engine.advance(INTERARRIVAL_HALF)
    busy = half_engine.snapshot().to_dict()
    assert busy["next_departure"] == pytest.approx(INTERARRIVAL_HALF + SERVICE_HALF)
    assert busy["server"]["id"] == 1


def test_critical_load_grows_without_breaking():
    """At ρ = 1 the queue builds up; statistics stay non-negative."""

    def mean_queue_length(arrival_rate, service_rate):
        engine = SimulationEngine(arrival_rate=arrival_rate, service_rate=service_rate, seed=17)
        total = 0
        for _ in range(20000):
            snap = engine.advance(2.0)
            total += snap.queue_length
            assert snap.stats.total_wait_time >= 0
            assert snap.stats.total_system_time >= snap.stats.total_wait_time
            assert 0.0 <= snap.stats.utilization <= 1.0
        return total / 20000

    assert mean_queue_length(6, 6) > mean_queue_length(3, 6)


def test_catch_up_matches_long_run_averages():
    """Exact stepping converges on the M/M/1 steady state."""
    engine = SimulationEngine(arrival_rate=3, service_rate=6, seed=21, catch_up=True)
    for _ in range(2000):
        engine.advance(100.0)

    stats = engine.snapshot().stats
    assert stats.utilization == pytest.approx(0.5, abs=0.05)
    assert stats.avg_sojourn == pytest.approx(20.0, rel=0.2)
