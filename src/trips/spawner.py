"""
Commit validated trip plans to the ledger and scheduler.

Validation runs in parallel and produces TripPlans. TripSpawner collects
them and finalize() commits them one at a time: build legs, register the
trip, then either cancel it or schedule its start.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Optional

from ..simulation.config import SpawnConfig
from ..simulation.events import create_start_trip_event
from ..simulation.network import MapView
from .errors import MalformedTripError, UnfinalizableTripError
from .model import (
    Drive,
    DrivingGoal,
    JustWalking,
    ParkNear,
    RideBus,
    SidewalkSpot,
    SpawningFailure,
    TripLeg,
    TripMode,
    TripSpec,
    UsingBike,
    UsingParkedCar,
    UsingTransit,
    VehicleAppearing,
    VehicleType,
    Walk,
)
from .validation import FallbackKind, TripPlan

if TYPE_CHECKING:
    from ..simulation.ledger import TripLedger
    from ..simulation.scheduler import Scheduler

logger = logging.getLogger(__name__)


@dataclass
class SpawnReport:
    """What happened to a batch of plans during finalize()."""

    trip_ids: list[int] = field(default_factory=list)
    scheduled: int = 0
    cancelled: int = 0
    failures: list[TripPlan] = field(default_factory=list)
    fallback_counts: dict[FallbackKind, int] = field(default_factory=dict)

    def summary(self) -> dict[str, Any]:
        """Flatten the report for logging or tabulation."""
        return {
            "registered": len(self.trip_ids),
            "scheduled": self.scheduled,
            "cancelled": self.cancelled,
            "failed": len(self.failures),
            **{
                f"fallback_{kind.name.lower()}": self.fallback_counts.get(kind, 0)
                for kind in FallbackKind
            },
        }


def _walk_from_parking(goal: DrivingGoal, network: MapView) -> list[TripLeg]:
    # Border goals leave the map in the vehicle; there's nothing to walk to
    if isinstance(goal, ParkNear):
        return [Walk(SidewalkSpot.building(goal.building, network))]
    return []


def trip_legs(spec: TripSpec, network: MapView) -> tuple[list[TripLeg], TripMode]:
    """
    Turn a validated spec into the legs the trip will step through.

    Returns:
        (legs, mode) where mode is what the trip is recorded as

    Raises:
        UnfinalizableTripError: spec is a SpawningFailure, which has no legs
    """
    match spec:
        case VehicleAppearing(_, goal, vehicle_id):
            legs = [Drive(vehicle_id, goal)] + _walk_from_parking(goal, network)
            if vehicle_id.vehicle_type == VehicleType.BIKE:
                return legs, TripMode.BIKE
            return legs, TripMode.DRIVE

        case SpawningFailure(vehicle_id, error_message):
            # TODO Register failed trips with the ledger once it can record a
            # trip that never had legs; until then finalize() filters these.
            raise UnfinalizableTripError(
                f"Can't build legs for a spawning failure "
                f"(vehicle {vehicle_id}): {error_message}"
            )

        case UsingParkedCar(vehicle_id, _, goal):
            legs = [
                Walk(SidewalkSpot.deferred_parking_spot()),
                Drive(vehicle_id, goal),
            ] + _walk_from_parking(goal, network)
            return legs, TripMode.DRIVE

        case JustWalking(_, goal):
            return [Walk(goal)], TripMode.WALK

        case UsingBike(vehicle_id, start_building, goal):
            rack = SidewalkSpot.bike_rack(start_building, network)
            if rack is None:
                raise MalformedTripError(
                    f"Bike trip from building {start_building} has no rack to "
                    "walk to; it should have been replaced during validation"
                )
            legs = [Walk(rack), Drive(vehicle_id, goal)] + _walk_from_parking(
                goal, network
            )
            return legs, TripMode.BIKE

        case UsingTransit(_, goal, route_id, boarding_stop, alighting_stop):
            legs = [
                Walk(SidewalkSpot.bus_stop(boarding_stop, network)),
                RideBus(route_id, alighting_stop),
            ]
            if alighting_stop is not None:
                legs.append(Walk(goal))
            return legs, TripMode.TRANSIT

        case _:
            raise TypeError(f"Unknown trip spec: {spec!r}")


class TripSpawner:
    """
    Buffer of validated plans waiting to be committed.

    Many validation calls can feed schedule_trips(); finalize() then runs
    on a single thread because it assigns trip ids and pushes onto the
    shared scheduler.
    """

    def __init__(self, config: Optional[SpawnConfig] = None):
        self.config = config or SpawnConfig()
        self.trips: list[TripPlan] = []

    def schedule_trips(self, plans: Iterable[TripPlan]) -> None:
        """Add a batch of plans, keeping their order."""
        self.trips.extend(plans)

    @property
    def pending(self) -> tuple[TripPlan, ...]:
        return tuple(self.trips)

    def __len__(self) -> int:
        return len(self.trips)

    def finalize(
        self,
        network: MapView,
        ledger: TripLedger,
        scheduler: Scheduler,
    ) -> SpawnReport:
        """
        Commit every buffered plan, in buffer order, and empty the buffer.

        Plans holding a SpawningFailure are set aside in the report
        instead of being registered. Cancelled plans are registered and
        immediately cancelled; the rest get a start event at start_time.

        Raises:
            UnknownPersonError: a plan's person isn't in the ledger
        """
        plans, self.trips = self.trips, []
        report = SpawnReport()

        runnable: list[TripPlan] = []
        for plan in plans:
            # Failures are checked too, even though they are never registered
            ledger.get_person(plan.person)
            for fallback in plan.fallbacks:
                report.fallback_counts[fallback.kind] = (
                    report.fallback_counts.get(fallback.kind, 0) + 1
                )
            if isinstance(plan.spec, SpawningFailure):
                logger.warning(
                    f"Not spawning trip for person {plan.person} at "
                    f"{plan.start_time:.0f}s: {plan.spec.error_message}"
                )
                report.failures.append(plan)
            else:
                runnable.append(plan)

        n_plans = len(runnable)
        logger.info(
            f"Spawning {n_plans:,} trips "
            f"({len(report.failures):,} failed validation)"
        )

        for i, plan in enumerate(runnable, start=1):
            person = ledger.get_person(plan.person)
            legs, mode = trip_legs(plan.spec, network)
            trip_id = ledger.new_trip(
                person.person_id,
                plan.start_time,
                plan.trip_start,
                mode,
                plan.purpose,
                plan.modified,
                legs,
                network,
            )
            report.trip_ids.append(trip_id)

            if plan.cancelled:
                ledger.cancel_unstarted_trip(trip_id, self.config.cancel_reason)
                report.cancelled += 1
            else:
                scheduler.push(
                    plan.start_time,
                    create_start_trip_event(
                        plan.start_time, trip_id, person.person_id, plan.spec
                    ),
                )
                report.scheduled += 1

            if self.config.progress_interval and i % self.config.progress_interval == 0:
                logger.info(f"Spawned {i:,}/{n_plans:,} trips")

        logger.info(
            f"Spawned {report.scheduled:,} trips, "
            f"cancelled {report.cancelled:,}"
        )
        return report
