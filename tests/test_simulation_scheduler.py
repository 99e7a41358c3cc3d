"""
Tests for src/simulation/scheduler.py, events.py and engine.py modules.

Tests cover:
- Event ordering
- Scheduler push/pop/drain
- SimulationEngine starting committed trips in time order
"""

import pytest

from src.simulation.engine import SimulationEngine
from src.simulation.events import Event, EventType, create_start_trip_event
from src.simulation.ledger import Person, TripLedger, TripStatus
from src.simulation.network import PathConstraints, create_demo_map
from src.simulation.scheduler import Scheduler
from src.trips.model import (
    BuildingEndpoint,
    CarID,
    JustWalking,
    ParkNear,
    SidewalkSpot,
    TripPurpose,
    UsingParkedCar,
)
from src.trips.spawner import TripSpawner
from src.trips.validation import TripPlan


class TestEvent:
    """Tests for Event."""

    def test_create_start_trip_event(self):
        event = create_start_trip_event(120.0, trip_id=4, person=2, spec="spec")
        assert event.event_type == EventType.START_TRIP
        assert event.time == 120.0
        assert event.agent_id == 2
        assert event.data == {"trip_id": 4, "spec": "spec"}

    def test_ordering_ignores_payload(self):
        """Events compare by time and sequence only."""
        a = Event(time=10.0, seq=1, data={"trip_id": 9})
        b = Event(time=10.0, seq=2, data={"trip_id": 1})
        c = Event(time=5.0, seq=3)
        assert sorted([a, b, c]) == [c, a, b]

    def test_none_data_becomes_empty(self):
        assert Event(time=0.0, data=None).data == {}


class TestScheduler:
    """Tests for Scheduler."""

    def test_pops_in_time_order(self):
        scheduler = Scheduler()
        for t in [30.0, 10.0, 20.0]:
            scheduler.push(t, Event(time=0.0))
        assert [scheduler.pop().time for _ in range(3)] == [10.0, 20.0, 30.0]

    def test_push_sets_time(self):
        """The push time wins over whatever the event held."""
        scheduler = Scheduler()
        scheduler.push(42.0, Event(time=0.0))
        assert scheduler.peek_time() == 42.0

    def test_ties_pop_in_push_order(self):
        """Same-time events come out in the order they were pushed."""
        scheduler = Scheduler()
        for trip_id in range(5):
            scheduler.push(100.0, create_start_trip_event(100.0, trip_id, 0, None))
        assert [e.data["trip_id"] for e in scheduler.drain()] == [0, 1, 2, 3, 4]

    def test_len_and_drain(self):
        scheduler = Scheduler()
        scheduler.push(1.0, Event(time=1.0))
        scheduler.push(2.0, Event(time=2.0))
        assert len(scheduler) == 2
        assert len(list(scheduler.drain())) == 2
        assert len(scheduler) == 0
        assert scheduler.peek_time() is None

    def test_pop_empty_raises(self):
        with pytest.raises(IndexError):
            Scheduler().pop()


class TestSimulationEngine:
    """Tests for SimulationEngine."""

    @pytest.fixture
    def committed(self):
        """A map, ledger and scheduler with four committed trips."""
        network = create_demo_map()
        ledger = TripLedger()
        for person_id in range(4):
            ledger.add_person(Person(person_id))
        walk = JustWalking(
            SidewalkSpot.building(0, network), SidewalkSpot.building(2, network)
        )
        drive = UsingParkedCar(CarID(9), 0, ParkNear(2))
        plans = [
            TripPlan(0, 300.0, walk, BuildingEndpoint(0), TripPurpose.WORK),
            TripPlan(1, 100.0, drive, BuildingEndpoint(0), TripPurpose.WORK),
            TripPlan(2, 200.0, walk, BuildingEndpoint(0), TripPurpose.WORK),
            TripPlan(
                3, 50.0, walk, BuildingEndpoint(0), TripPurpose.WORK, cancelled=True
            ),
        ]
        scheduler = Scheduler()
        spawner = TripSpawner()
        spawner.schedule_trips(plans)
        spawner.finalize(network, ledger, scheduler)
        return network, ledger, scheduler

    def test_starts_trips_in_time_order(self, committed):
        network, ledger, scheduler = committed
        result = SimulationEngine(network, ledger, scheduler).run()

        assert result.started == [1, 2, 0]
        assert result.end_time == 300.0
        assert ledger.get_trip(2).started_at == 200.0
        assert ledger.get_trip(3).status == TripStatus.CANCELLED
        assert result.metrics["started_trips"] == 3

    def test_records_path_requests(self, committed):
        """Walks get a pedestrian request, parked cars get none."""
        network, ledger, scheduler = committed
        requests = []
        SimulationEngine(network, ledger, scheduler, pathfinder=requests.append).run()

        assert len(requests) == 2
        assert all(r.constraints == PathConstraints.PEDESTRIAN for r in requests)
        assert ledger.get_trip(1).path_request is None
        assert ledger.get_trip(0).path_request == requests[1]

    def test_run_until(self, committed):
        """Events after the cutoff stay queued."""
        network, ledger, scheduler = committed
        result = SimulationEngine(network, ledger, scheduler).run(until=150.0)

        assert result.started == [1]
        assert len(scheduler) == 2
        assert ledger.get_trip(0).status == TripStatus.SCHEDULED
