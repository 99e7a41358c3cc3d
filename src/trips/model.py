"""
Trip specifications and the records built from them.

A TripSpec describes how a trip starts and ends before any legs are
computed. Every variant is a frozen dataclass; the validator replaces a
spec wholesale instead of editing it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Union

from ..simulation.network import (
    BuildingID,
    BusRouteID,
    BusStopID,
    IntersectionID,
    LaneID,
    MapView,
    PathConstraints,
    Position,
)

PersonID = int
TripID = int


class VehicleType(Enum):
    """Kinds of vehicles a person can own or ride."""

    CAR = auto()
    BUS = auto()
    BIKE = auto()


@dataclass(frozen=True)
class CarID:
    """Identifies a vehicle along with its type."""

    id: int
    vehicle_type: VehicleType = VehicleType.CAR

    def path_constraints(self) -> PathConstraints:
        """Bikes path as bikes, everything else as a car."""
        if self.vehicle_type == VehicleType.BIKE:
            return PathConstraints.BIKE
        return PathConstraints.CAR

    def __str__(self) -> str:
        return f"{self.vehicle_type.name.lower()} #{self.id}"


class TripMode(Enum):
    """Primary mode a trip is recorded under."""

    WALK = auto()
    BIKE = auto()
    TRANSIT = auto()
    DRIVE = auto()


class TripPurpose(Enum):
    """Why a person is making a trip."""

    HOME = auto()
    WORK = auto()
    SCHOOL = auto()
    ESCORT = auto()
    PERSONAL_BUSINESS = auto()
    SHOPPING = auto()
    MEAL = auto()
    LEISURE = auto()
    RECREATION = auto()
    MEDICAL = auto()
    PARK_AND_RIDE_TRANSFER = auto()


# Driving goals


@dataclass(frozen=True)
class ParkNear:
    """Drive to somewhere near a building and park."""

    building: BuildingID


@dataclass(frozen=True)
class Border:
    """Leave the map at a border intersection through a specific lane."""

    intersection: IntersectionID
    lane: LaneID


DrivingGoal = Union[ParkNear, Border]


def goal_pos(
    goal: DrivingGoal, constraints: PathConstraints, network: MapView
) -> Optional[Position]:
    """
    Resolve where a vehicle trip physically ends.

    Cars end at the building's parking position, bikes at its biking
    connection. A border goal ends at the end of its lane, but only if the
    vehicle may use that lane and the lane really leads to the border.

    Returns:
        The end position, or None if this goal can't be reached this way
    """
    match goal:
        case ParkNear(building):
            bldg = network.get_b(building)
            if constraints == PathConstraints.BIKE:
                return bldg.biking_pos
            return bldg.parking_pos
        case Border(intersection, lane_id):
            lane = network.get_l(lane_id)
            if lane.dst_i != intersection or not constraints.can_use(lane):
                return None
            return Position(lane_id, lane.length)
        case _:
            raise TypeError(f"Not a driving goal: {goal!r}")


# Sidewalk spots


class SpotKind(Enum):
    """What a sidewalk spot connects to."""

    BUILDING = auto()
    BIKE_RACK = auto()
    BUS_STOP = auto()
    BORDER = auto()
    DEFERRED_PARKING = auto()


@dataclass(frozen=True)
class SidewalkSpot:
    """
    A place pedestrians start or finish walking.

    target holds the building, stop or intersection id the spot belongs
    to. A deferred parking spot has no position until the parking
    subsystem picks one.
    """

    kind: SpotKind
    sidewalk_pos: Optional[Position]
    target: Optional[int] = None

    @classmethod
    def building(cls, building_id: BuildingID, network: MapView) -> SidewalkSpot:
        bldg = network.get_b(building_id)
        return cls(SpotKind.BUILDING, bldg.sidewalk_pos, building_id)

    @classmethod
    def bike_rack(
        cls, building_id: BuildingID, network: MapView
    ) -> Optional[SidewalkSpot]:
        """The rack serving a building, if it has one."""
        rack_pos = network.get_b(building_id).bike_rack_pos
        if rack_pos is None:
            return None
        return cls(SpotKind.BIKE_RACK, rack_pos, building_id)

    @classmethod
    def bus_stop(cls, stop_id: BusStopID, network: MapView) -> SidewalkSpot:
        return cls(SpotKind.BUS_STOP, network.get_bs(stop_id).sidewalk_pos, stop_id)

    @classmethod
    def end_at_border(
        cls, intersection_id: IntersectionID, network: MapView
    ) -> Optional[SidewalkSpot]:
        """Walk off the map at a border, if a sidewalk leads there."""
        lane_id = network.pedestrian_border_lane(intersection_id)
        if lane_id is None:
            return None
        return cls(
            SpotKind.BORDER,
            Position(lane_id, network.lane_length(lane_id)),
            intersection_id,
        )

    @classmethod
    def deferred_parking_spot(cls) -> SidewalkSpot:
        return cls(SpotKind.DEFERRED_PARKING, None)


# Trip endpoints


@dataclass(frozen=True)
class BuildingEndpoint:
    building: BuildingID


@dataclass(frozen=True)
class BorderEndpoint:
    intersection: IntersectionID


@dataclass(frozen=True)
class PositionEndpoint:
    pos: Position


TripEndpoint = Union[BuildingEndpoint, BorderEndpoint, PositionEndpoint]


# Legs


@dataclass(frozen=True)
class Walk:
    """Walk to a sidewalk spot."""

    spot: SidewalkSpot


@dataclass(frozen=True)
class Drive:
    """Drive or bike a vehicle to a goal."""

    vehicle: CarID
    goal: DrivingGoal


@dataclass(frozen=True)
class RideBus:
    """Ride a route until a stop, or to the end of the route if stop is None."""

    route: BusRouteID
    stop: Optional[BusStopID] = None


TripLeg = Union[Walk, Drive, RideBus]


# Trip specifications


@dataclass(frozen=True)
class VehicleAppearing:
    """A vehicle appears at an exact position. Used for border spawns."""

    start_pos: Position
    goal: DrivingGoal
    vehicle_id: CarID  # must be an off-map vehicle owned by the person
    retry_if_no_room: bool = True


@dataclass(frozen=True)
class SpawningFailure:
    """Validation couldn't produce a runnable trip."""

    vehicle_id: Optional[CarID]
    error_message: str


@dataclass(frozen=True)
class UsingParkedCar:
    """Walk to a car parked near a building, then drive."""

    vehicle_id: CarID  # must be a parked vehicle owned by the person
    start_building: BuildingID
    goal: DrivingGoal


@dataclass(frozen=True)
class JustWalking:
    start: SidewalkSpot
    goal: SidewalkSpot


@dataclass(frozen=True)
class UsingBike:
    """Walk to a bike rack, ride, then maybe walk to a building."""

    vehicle_id: CarID
    start_building: BuildingID
    goal: DrivingGoal


@dataclass(frozen=True)
class UsingTransit:
    """Walk to a stop and ride. No alighting stop means ride to the end."""

    start: SidewalkSpot
    goal: SidewalkSpot
    route_id: BusRouteID
    boarding_stop: BusStopID
    alighting_stop: Optional[BusStopID] = None


TripSpec = Union[
    VehicleAppearing,
    SpawningFailure,
    UsingParkedCar,
    JustWalking,
    UsingBike,
    UsingTransit,
]


@dataclass(frozen=True)
class PathRequest:
    """What to hand the pathfinder."""

    start: Position
    end: Position
    constraints: PathConstraints
