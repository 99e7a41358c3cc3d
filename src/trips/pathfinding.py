"""
Derive the first path request for a trip spec.
"""

from __future__ import annotations

from typing import Optional

from ..simulation.network import MapView, PathConstraints
from .errors import MalformedTripError
from .model import (
    JustWalking,
    PathRequest,
    SidewalkSpot,
    SpawningFailure,
    TripSpec,
    UsingBike,
    UsingParkedCar,
    UsingTransit,
    VehicleAppearing,
    goal_pos,
)


def path_request(spec: TripSpec, network: MapView) -> Optional[PathRequest]:
    """
    Build the request for the path a trip needs first, if it's known yet.

    Bike trips only ask for the walk to the rack; the ride is routed once
    biking begins. Parked cars return None because the parking subsystem
    decides where the car is.

    Returns:
        A PathRequest, or None if the endpoint can't be known ahead of time
    """
    match spec:
        case VehicleAppearing(start_pos, goal, vehicle_id):
            constraints = vehicle_id.path_constraints()
            end = goal_pos(goal, constraints, network)
            if end is None:
                raise MalformedTripError(
                    f"No goal position for {goal!r} as {constraints.name}; "
                    "this spec should have been replaced during validation"
                )
            return PathRequest(start_pos, end, constraints)

        case JustWalking(start, goal):
            return PathRequest(
                start.sidewalk_pos, goal.sidewalk_pos, PathConstraints.PEDESTRIAN
            )

        case UsingBike(_, start_building, _):
            rack = SidewalkSpot.bike_rack(start_building, network)
            if rack is None:
                raise MalformedTripError(
                    f"Building {start_building} has no bike rack; "
                    "this spec should have been replaced during validation"
                )
            return PathRequest(
                network.get_b(start_building).sidewalk_pos,
                rack.sidewalk_pos,
                PathConstraints.PEDESTRIAN,
            )

        case UsingTransit(start, _, _, boarding_stop):
            return PathRequest(
                start.sidewalk_pos,
                SidewalkSpot.bus_stop(boarding_stop, network).sidewalk_pos,
                PathConstraints.PEDESTRIAN,
            )

        case SpawningFailure() | UsingParkedCar():
            return None

        case _:
            raise TypeError(f"Unknown trip spec: {spec!r}")
