"""
Tests for src/simulation/ledger.py module.

Tests cover:
- Person registration and lookup
- new_trip id assignment and checks
- Cancelling and starting trips
- Summary metrics and DataFrame export
"""

import pandas as pd
import pytest

from src.simulation.ledger import Person, TripLedger, TripStatus
from src.simulation.network import Position, create_demo_map
from src.trips.errors import UnknownPersonError
from src.trips.model import (
    BuildingEndpoint,
    SidewalkSpot,
    SpotKind,
    TripMode,
    TripPurpose,
    Walk,
)


@pytest.fixture
def network():
    return create_demo_map()


@pytest.fixture
def ledger():
    ledger = TripLedger()
    ledger.add_person(Person(0))
    ledger.add_person(Person(1))
    return ledger


def add_walk(ledger, network, person=0, start_time=0.0, mode=TripMode.WALK):
    return ledger.new_trip(
        person,
        start_time,
        BuildingEndpoint(0),
        mode,
        TripPurpose.WORK,
        False,
        [Walk(SidewalkSpot.building(2, network))],
        network,
    )


class TestPeople:
    """Tests for person lookup."""

    def test_get_person(self, ledger):
        assert ledger.get_person(1).person_id == 1

    def test_unknown_person(self, ledger):
        """Missing people raise an error that is also a KeyError."""
        with pytest.raises(UnknownPersonError, match="Person 7"):
            ledger.get_person(7)
        with pytest.raises(KeyError):
            ledger.get_person(7)


class TestNewTrip:
    """Tests for registering trips."""

    def test_ids_are_sequential(self, ledger, network):
        ids = [add_walk(ledger, network, person=i % 2) for i in range(4)]
        assert ids == [0, 1, 2, 3]
        assert ledger.get_person(0).trips == [0, 2]
        assert ledger.get_person(1).trips == [1, 3]

    def test_record_fields(self, ledger, network):
        trip_id = add_walk(ledger, network, start_time=900.0)
        trip = ledger.get_trip(trip_id)
        assert trip.start_time == 900.0
        assert trip.mode == TripMode.WALK
        assert trip.purpose == TripPurpose.WORK
        assert trip.status == TripStatus.SCHEDULED
        assert len(trip.legs) == 1

    def test_empty_legs_rejected(self, ledger, network):
        with pytest.raises(ValueError, match="no legs"):
            ledger.new_trip(
                0, 0.0, BuildingEndpoint(0), TripMode.WALK, TripPurpose.HOME,
                False, [], network,
            )

    def test_invalid_walk_position_rejected(self, ledger, network):
        """Walk legs must end somewhere on the map."""
        bad_spot = SidewalkSpot(SpotKind.BUILDING, Position(3, 999.0), 0)
        with pytest.raises(ValueError, match="invalid position"):
            ledger.new_trip(
                0, 0.0, BuildingEndpoint(0), TripMode.WALK, TripPurpose.HOME,
                False, [Walk(bad_spot)], network,
            )

    def test_unknown_person_rejected(self, ledger, network):
        with pytest.raises(UnknownPersonError):
            add_walk(ledger, network, person=5)


class TestTripStatus:
    """Tests for cancelling and starting trips."""

    def test_cancel_unstarted_trip(self, ledger, network):
        trip_id = add_walk(ledger, network)
        ledger.cancel_unstarted_trip(trip_id, "closed")
        trip = ledger.get_trip(trip_id)
        assert trip.status == TripStatus.CANCELLED
        assert trip.cancel_reason == "closed"

    def test_cannot_cancel_twice(self, ledger, network):
        trip_id = add_walk(ledger, network)
        ledger.cancel_unstarted_trip(trip_id, "closed")
        with pytest.raises(ValueError, match="CANCELLED"):
            ledger.cancel_unstarted_trip(trip_id, "closed again")

    def test_start_trip(self, ledger, network):
        trip_id = add_walk(ledger, network)
        trip = ledger.start_trip(trip_id, 60.0)
        assert trip.status == TripStatus.STARTED
        assert trip.started_at == 60.0

    def test_cannot_start_cancelled_trip(self, ledger, network):
        trip_id = add_walk(ledger, network)
        ledger.cancel_unstarted_trip(trip_id, "closed")
        with pytest.raises(ValueError):
            ledger.start_trip(trip_id, 60.0)


class TestReporting:
    """Tests for metrics and export."""

    def test_empty_summary(self):
        metrics = TripLedger().get_summary_metrics()
        assert metrics["total_trips"] == 0
        assert metrics["avg_legs"] == 0.0

    def test_summary_metrics(self, ledger, network):
        add_walk(ledger, network)
        add_walk(ledger, network, mode=TripMode.DRIVE)
        cancelled = add_walk(ledger, network)
        ledger.cancel_unstarted_trip(cancelled, "closed")
        ledger.start_trip(0, 10.0)

        metrics = ledger.get_summary_metrics()
        assert metrics["total_trips"] == 3
        assert metrics["cancelled_trips"] == 1
        assert metrics["started_trips"] == 1
        assert metrics["avg_legs"] == pytest.approx(1.0)
        assert metrics["mode_shares"]["WALK"] == pytest.approx(2 / 3)

    def test_to_dataframe(self, ledger, network):
        add_walk(ledger, network, start_time=5.0)
        df = ledger.to_dataframe()
        assert isinstance(df, pd.DataFrame)
        assert len(df) == 1
        assert df.loc[0, "mode"] == "WALK"
        assert df.loc[0, "status"] == "SCHEDULED"
        assert df.loc[0, "n_legs"] == 1

    def test_empty_dataframe(self):
        assert TripLedger().to_dataframe().empty

    def test_reset_keeps_people(self, ledger, network):
        add_walk(ledger, network)
        ledger.reset()
        assert ledger.trips == []
        assert ledger.get_person(0).trips == []
