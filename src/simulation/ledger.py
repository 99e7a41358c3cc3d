"""
Registry of people and the trips they take.

The spawner registers every committed trip here, cancelled or not, so
reporting can account for suppressed demand as well as real trips.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Optional

import numpy as np
import pandas as pd

from ..trips.errors import UnknownPersonError
from .network import MapView

if TYPE_CHECKING:
    from ..trips.model import (
        CarID,
        PathRequest,
        TripEndpoint,
        TripLeg,
        TripMode,
        TripPurpose,
    )


class TripStatus(Enum):
    """Lifecycle of a registered trip."""

    SCHEDULED = auto()  # Waiting for its start event
    CANCELLED = auto()  # Registered but never started
    STARTED = auto()  # Start event fired


@dataclass
class Person:
    """Someone who makes trips."""

    person_id: int
    vehicles: list[CarID] = field(default_factory=list)
    trips: list[int] = field(default_factory=list)


@dataclass
class TripRecord:
    """Record of a registered trip."""

    trip_id: int
    person: int
    start_time: float
    start_endpoint: TripEndpoint
    mode: TripMode
    purpose: TripPurpose
    modified: bool
    legs: list[TripLeg]
    status: TripStatus = TripStatus.SCHEDULED
    cancel_reason: Optional[str] = None
    started_at: Optional[float] = None
    path_request: Optional[PathRequest] = None


class TripLedger:
    """
    Assigns trip ids and tracks trip status.

    Ids are handed out sequentially, so committing the same plans in the
    same order always produces the same ids. Not thread safe.
    """

    def __init__(self):
        self.people: dict[int, Person] = {}
        self.trips: list[TripRecord] = []

    def add_person(self, person: Person) -> None:
        """Register a person."""
        self.people[person.person_id] = person

    def get_person(self, person_id: int) -> Person:
        """Look up a person; they must already be registered."""
        try:
            return self.people[person_id]
        except KeyError:
            raise UnknownPersonError(
                f"Person {person_id} isn't registered in the trip ledger"
            ) from None

    def get_trip(self, trip_id: int) -> TripRecord:
        return self.trips[trip_id]

    def new_trip(
        self,
        person: int,
        start_time: float,
        start_endpoint: TripEndpoint,
        mode: TripMode,
        purpose: TripPurpose,
        modified: bool,
        legs: list[TripLeg],
        network: MapView,
    ) -> int:
        """
        Register a trip for a person.

        Args:
            person: Person taking the trip
            start_time: Simulation time the trip should start
            start_endpoint: Where the trip is recorded as starting
            mode: Primary mode for reporting
            purpose: Trip purpose
            modified: Whether a scenario modifier edited this trip
            legs: Ordered legs; must not be empty
            network: Map used to check leg positions

        Returns:
            The new trip's id
        """
        if not legs:
            raise ValueError(f"Trip for person {person} has no legs")
        for leg in legs:
            spot = getattr(leg, "spot", None)
            if spot is not None and spot.sidewalk_pos is not None:
                if not network.is_valid_position(spot.sidewalk_pos):
                    raise ValueError(
                        f"Trip for person {person} walks to invalid "
                        f"position {spot.sidewalk_pos}"
                    )

        owner = self.get_person(person)
        trip_id = len(self.trips)
        self.trips.append(
            TripRecord(
                trip_id=trip_id,
                person=person,
                start_time=start_time,
                start_endpoint=start_endpoint,
                mode=mode,
                purpose=purpose,
                modified=modified,
                legs=list(legs),
            )
        )
        owner.trips.append(trip_id)
        return trip_id

    def cancel_unstarted_trip(self, trip_id: int, reason: str) -> None:
        """Mark a scheduled trip as cancelled before it ever started."""
        trip = self.get_trip(trip_id)
        if trip.status != TripStatus.SCHEDULED:
            raise ValueError(
                f"Can't cancel trip {trip_id}; it's already {trip.status.name}"
            )
        trip.status = TripStatus.CANCELLED
        trip.cancel_reason = reason

    def start_trip(
        self,
        trip_id: int,
        time: float,
        path_request: Optional[PathRequest] = None,
    ) -> TripRecord:
        """Mark a scheduled trip as started."""
        trip = self.get_trip(trip_id)
        if trip.status != TripStatus.SCHEDULED:
            raise ValueError(
                f"Can't start trip {trip_id}; it's {trip.status.name}"
            )
        trip.status = TripStatus.STARTED
        trip.started_at = time
        trip.path_request = path_request
        return trip

    def get_summary_metrics(self) -> dict[str, Any]:
        """
        Compute summary metrics over registered trips.

        Returns:
            Dictionary of aggregate metrics
        """
        if not self.trips:
            return {
                "total_trips": 0,
                "cancelled_trips": 0,
                "started_trips": 0,
                "avg_legs": 0.0,
            }

        statuses = [t.status for t in self.trips]
        n_legs = np.array([len(t.legs) for t in self.trips])

        mode_counts: dict[str, int] = {}
        for t in self.trips:
            mode_counts[t.mode.name] = mode_counts.get(t.mode.name, 0) + 1

        return {
            "total_trips": len(self.trips),
            "cancelled_trips": statuses.count(TripStatus.CANCELLED),
            "started_trips": statuses.count(TripStatus.STARTED),
            "modified_trips": sum(1 for t in self.trips if t.modified),
            "avg_legs": float(np.mean(n_legs)),
            "mode_shares": {
                mode: count / len(self.trips) for mode, count in mode_counts.items()
            },
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Convert trip records to DataFrame."""
        if not self.trips:
            return pd.DataFrame()

        records = [
            {
                "trip_id": t.trip_id,
                "person": t.person,
                "start_time": t.start_time,
                "mode": t.mode.name,
                "purpose": t.purpose.name,
                "modified": t.modified,
                "n_legs": len(t.legs),
                "status": t.status.name,
                "cancel_reason": t.cancel_reason,
                "started_at": t.started_at,
            }
            for t in self.trips
        ]

        return pd.DataFrame(records)

    def reset(self) -> None:
        """Forget all trips, keeping people registered."""
        self.trips = []
        for person in self.people.values():
            person.trips = []
