"""
Trip validation and fallback resolution.

validate() checks a proposed TripSpec against the map and returns either
the same spec, a walking fallback, or a SpawningFailure. It only reads the
map, so it can run on many threads at once; schedule_trip() and
validate_batch() wrap its output into TripPlans for the spawner to commit.
"""

from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Callable, Iterable, Optional

from ..simulation.config import SpawnConfig
from ..simulation.network import MapView
from .errors import MalformedTripError
from .model import (
    Border,
    DrivingGoal,
    JustWalking,
    ParkNear,
    PersonID,
    SidewalkSpot,
    SpawningFailure,
    TripEndpoint,
    TripPurpose,
    TripSpec,
    UsingBike,
    UsingParkedCar,
    UsingTransit,
    VehicleAppearing,
    goal_pos,
)

logger = logging.getLogger(__name__)


class FallbackKind(Enum):
    """How the validator rewrote a spec."""

    BIKE_TO_WALK = auto()
    SPAWNING_FAILURE = auto()


@dataclass(frozen=True)
class FallbackEvent:
    """Emitted whenever validation replaces a spec."""

    kind: FallbackKind
    original: TripSpec
    replacement: TripSpec
    reason: str


@dataclass(frozen=True)
class TripPlan:
    """A validated trip, waiting to be committed by the spawner."""

    person: PersonID
    start_time: float  # Simulation time in seconds
    spec: TripSpec
    trip_start: TripEndpoint
    purpose: TripPurpose
    cancelled: bool = False
    modified: bool = False  # edited by a scenario modifier; reporting only
    fallbacks: tuple[FallbackEvent, ...] = ()


@dataclass
class TripRequest:
    """A raw trip request from a scenario or demand generator."""

    person: PersonID
    start_time: float
    spec: TripSpec
    trip_start: TripEndpoint
    purpose: TripPurpose = TripPurpose.HOME
    cancelled: bool = False
    modified: bool = False


def validate(
    spec: TripSpec,
    network: MapView,
    on_fallback: Optional[Callable[[FallbackEvent], None]] = None,
) -> TripSpec:
    """
    Validate a trip spec, replacing it if it can't run as requested.

    Args:
        spec: The requested trip
        network: Map to check against; only read
        on_fallback: Called with a FallbackEvent when the spec is replaced

    Returns:
        The original spec, a JustWalking fallback, or a SpawningFailure

    Raises:
        MalformedTripError: the request is degenerate or out of bounds
    """
    match spec:
        case VehicleAppearing(start_pos, goal, vehicle_id):
            lane_length = network.lane_length(start_pos.lane)
            if start_pos.dist_along >= lane_length:
                raise MalformedTripError(
                    f"Can't spawn {vehicle_id} at {start_pos}; "
                    f"the lane is only {lane_length:.1f}m long"
                )

            constraints = vehicle_id.path_constraints()
            if goal_pos(goal, constraints, network) is None:
                return _replace(
                    spec,
                    SpawningFailure(
                        vehicle_id=vehicle_id,
                        error_message=(
                            f"goal_pos to {goal!r} for a {constraints.name} failed"
                        ),
                    ),
                    FallbackKind.SPAWNING_FAILURE,
                    f"no goal position for {goal!r} as {constraints.name}",
                    on_fallback,
                )
            return spec

        case JustWalking(start, goal):
            if start == goal:
                raise MalformedTripError(
                    f"A trip just walking from {start} to {goal} "
                    "doesn't make sense"
                )
            return spec

        case UsingBike():
            return _validate_bike(spec, network, on_fallback)

        case SpawningFailure() | UsingParkedCar() | UsingTransit():
            return spec

        case _:
            raise TypeError(f"Unknown trip spec: {spec!r}")


def _validate_bike(
    spec: UsingBike,
    network: MapView,
    on_fallback: Optional[Callable[[FallbackEvent], None]],
) -> TripSpec:
    """Fall back to walking when bike racks don't line up."""
    start_building, goal = spec.start_building, spec.goal
    backup = _walking_backup(start_building, goal, network)
    if backup is not None and backup.start == backup.goal:
        raise MalformedTripError(
            f"A bike trip from building {start_building} back to itself "
            "doesn't make sense"
        )

    start_rack = SidewalkSpot.bike_rack(start_building, network)
    if start_rack is not None:
        if isinstance(goal, ParkNear):
            goal_rack = SidewalkSpot.bike_rack(goal.building, network)
            if goal_rack is None:
                return _replace(
                    spec,
                    backup,
                    FallbackKind.BIKE_TO_WALK,
                    f"no biking connection for goal building {goal.building}",
                    on_fallback,
                )
            if start_rack.sidewalk_pos.lane == goal_rack.sidewalk_pos.lane:
                return _replace(
                    spec,
                    backup,
                    FallbackKind.BIKE_TO_WALK,
                    f"buildings {start_building} and {goal.building} "
                    "share a sidewalk",
                    on_fallback,
                )
        return spec

    if backup is not None:
        return _replace(
            spec,
            backup,
            FallbackKind.BIKE_TO_WALK,
            f"no bike rack at building {start_building}",
            on_fallback,
        )

    return _replace(
        spec,
        SpawningFailure(
            vehicle_id=spec.vehicle_id,
            error_message=(
                f"Can't start biking from building {start_building} "
                f"and can't walk either! Goal is {goal!r}"
            ),
        ),
        FallbackKind.SPAWNING_FAILURE,
        f"no bike rack at building {start_building} and no walking route",
        on_fallback,
    )


def _walking_backup(
    start_building: int, goal: DrivingGoal, network: MapView
) -> Optional[JustWalking]:
    """Walk between the same endpoints, if pedestrians can reach the goal."""
    start = SidewalkSpot.building(start_building, network)
    match goal:
        case ParkNear(building):
            return JustWalking(start, SidewalkSpot.building(building, network))
        case Border(intersection, _):
            end = SidewalkSpot.end_at_border(intersection, network)
            if end is None:
                return None
            return JustWalking(start, end)


def _replace(
    original: TripSpec,
    replacement: TripSpec,
    kind: FallbackKind,
    reason: str,
    on_fallback: Optional[Callable[[FallbackEvent], None]],
) -> TripSpec:
    event = FallbackEvent(kind, original, replacement, reason)
    logger.info(
        f"Fallback applied: {type(original).__name__} -> "
        f"{type(replacement).__name__} ({kind.name}), reason={reason}"
    )
    if on_fallback is not None:
        on_fallback(event)
    return replacement


def schedule_trip(
    person: PersonID,
    start_time: float,
    spec: TripSpec,
    trip_start: TripEndpoint,
    purpose: TripPurpose,
    cancelled: bool,
    modified: bool,
    network: MapView,
) -> TripPlan:
    """
    Validate one trip and wrap it into a plan.

    Doesn't schedule anything; call it from as many threads as you like,
    then hand all the plans to TripSpawner.schedule_trips().
    """
    fallbacks: list[FallbackEvent] = []
    spec = validate(spec, network, on_fallback=fallbacks.append)
    return TripPlan(
        person=person,
        start_time=start_time,
        spec=spec,
        trip_start=trip_start,
        purpose=purpose,
        cancelled=cancelled,
        modified=modified,
        fallbacks=tuple(fallbacks),
    )


def validate_batch(
    requests: Iterable[TripRequest],
    network: MapView,
    config: Optional[SpawnConfig] = None,
) -> list[TripPlan]:
    """
    Validate many trip requests, optionally on a thread pool.

    Args:
        requests: Raw trip requests
        network: Shared read-only map
        config: Controls parallelism (defaults to SpawnConfig())

    Returns:
        One TripPlan per request, in request order

    Raises:
        MalformedTripError: any request is malformed; the batch is abandoned
    """
    config = config or SpawnConfig()
    requests = list(requests)

    def plan(request: TripRequest) -> TripPlan:
        return schedule_trip(
            request.person,
            request.start_time,
            request.spec,
            request.trip_start,
            request.purpose,
            request.cancelled,
            request.modified,
            network,
        )

    if not config.parallel or len(requests) < 2:
        return [plan(request) for request in requests]

    logger.info(
        f"Validating {len(requests):,} trips on up to "
        f"{config.n_workers or 'default'} workers"
    )
    with concurrent.futures.ThreadPoolExecutor(
        max_workers=config.n_workers
    ) as pool:
        return list(pool.map(plan, requests))
