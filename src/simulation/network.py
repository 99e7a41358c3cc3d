"""
Lane-level road network representation for trip spawning.

Provides the read-only geometry queries the spawner needs: lane lengths,
position validity, building connections, bus stops and border crossings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional

import numpy as np

LaneID = int
IntersectionID = int
BuildingID = int
BusStopID = int
BusRouteID = int


class LaneType(Enum):
    """Kinds of lanes in the network."""

    DRIVING = auto()
    BIKING = auto()
    BUS = auto()
    SIDEWALK = auto()


class PathConstraints(Enum):
    """Which lanes a path is allowed to use."""

    CAR = auto()
    BIKE = auto()
    BUS = auto()
    PEDESTRIAN = auto()

    def can_use(self, lane: Lane) -> bool:
        """Check whether this kind of traveler may use a lane."""
        match self:
            case PathConstraints.CAR:
                return lane.lane_type == LaneType.DRIVING
            case PathConstraints.BIKE:
                return lane.lane_type in (LaneType.DRIVING, LaneType.BIKING)
            case PathConstraints.BUS:
                return lane.lane_type in (LaneType.DRIVING, LaneType.BUS)
            case PathConstraints.PEDESTRIAN:
                return lane.lane_type == LaneType.SIDEWALK


@dataclass(frozen=True)
class Position:
    """A point some distance along a lane."""

    lane: LaneID
    dist_along: float  # meters from the start of the lane

    def __str__(self) -> str:
        return f"{self.dist_along:.1f}m along lane {self.lane}"


@dataclass
class Intersection:
    """A node in the road network. Border intersections lead off the map."""

    intersection_id: IntersectionID
    location: tuple[float, float]  # x, y in meters
    is_border: bool = False


@dataclass
class Lane:
    """A directed lane running from one intersection to another."""

    lane_id: LaneID
    lane_type: LaneType
    src_i: IntersectionID
    dst_i: IntersectionID
    length: float = 0.0


@dataclass
class Building:
    """A building and its connections to the surrounding lanes."""

    building_id: BuildingID
    sidewalk_pos: Position
    parking_pos: Optional[Position] = None  # where a car parks to reach it
    biking_pos: Optional[Position] = None  # where a bike stops to reach it
    bike_rack_pos: Optional[Position] = None  # sidewalk position of the rack


@dataclass
class BusStop:
    """A bus stop, reachable from a sidewalk and served from a driving lane."""

    stop_id: BusStopID
    sidewalk_pos: Position
    driving_pos: Position


@dataclass
class BusRoute:
    """An ordered list of stops served by buses."""

    route_id: BusRouteID
    name: str
    stops: list[BusStopID] = field(default_factory=list)


@dataclass
class MapView:
    """
    Read-only map for the spawner.

    Populated once with the add_* methods, then only queried. Queries
    never mutate, so the map can be shared across validation threads.
    """

    intersections: dict[IntersectionID, Intersection] = field(default_factory=dict)
    lanes: dict[LaneID, Lane] = field(default_factory=dict)
    buildings: dict[BuildingID, Building] = field(default_factory=dict)
    bus_stops: dict[BusStopID, BusStop] = field(default_factory=dict)
    bus_routes: dict[BusRouteID, BusRoute] = field(default_factory=dict)

    def add_intersection(self, intersection: Intersection) -> None:
        """Add an intersection to the map."""
        self.intersections[intersection.intersection_id] = intersection

    def add_lane(self, lane: Lane) -> None:
        """Add a lane, deriving its length from its endpoints if not given."""
        if lane.length <= 0.0:
            src = np.asarray(self.intersections[lane.src_i].location, dtype=float)
            dst = np.asarray(self.intersections[lane.dst_i].location, dtype=float)
            lane.length = float(np.hypot(*(dst - src)))
        self.lanes[lane.lane_id] = lane

    def add_building(self, building: Building) -> None:
        """Add a building to the map."""
        self.buildings[building.building_id] = building

    def add_bus_stop(self, stop: BusStop) -> None:
        """Add a bus stop to the map."""
        self.bus_stops[stop.stop_id] = stop

    def add_bus_route(self, route: BusRoute) -> None:
        """Add a bus route to the map."""
        self.bus_routes[route.route_id] = route

    def get_i(self, intersection_id: IntersectionID) -> Intersection:
        return self.intersections[intersection_id]

    def get_l(self, lane_id: LaneID) -> Lane:
        return self.lanes[lane_id]

    def get_b(self, building_id: BuildingID) -> Building:
        return self.buildings[building_id]

    def get_bs(self, stop_id: BusStopID) -> BusStop:
        return self.bus_stops[stop_id]

    def get_br(self, route_id: BusRouteID) -> BusRoute:
        return self.bus_routes[route_id]

    def lane_length(self, lane_id: LaneID) -> float:
        """Length of a lane in meters."""
        return self.get_l(lane_id).length

    def is_valid_position(self, pos: Position) -> bool:
        """A position is valid if its lane exists and it lies on the lane."""
        lane = self.lanes.get(pos.lane)
        if lane is None:
            return False
        return 0.0 <= pos.dist_along <= lane.length

    def pedestrian_border_lane(
        self, intersection_id: IntersectionID
    ) -> Optional[LaneID]:
        """
        Find a sidewalk that ends at a border intersection.

        Returns:
            The lowest such lane id, or None if pedestrians can't leave the
            map there
        """
        if not self.get_i(intersection_id).is_border:
            return None
        candidates = [
            lane.lane_id
            for lane in self.lanes.values()
            if lane.dst_i == intersection_id and lane.lane_type == LaneType.SIDEWALK
        ]
        return min(candidates) if candidates else None


def create_demo_map() -> MapView:
    """
    Create a small straight-corridor map for tests and demos.

    Layout (x in meters):

        i0 (border) --100-- i1 --200-- i2 --150-- i3 (border)

    Lanes:
        0: driving i0->i1, 1: sidewalk i0->i1
        2: driving i1->i2, 3: sidewalk i1->i2, 4: bike lane i1->i2
        5: driving i2->i3, 6: sidewalk i2->i3
        7: driving i1->i0 (cars can exit at i0, pedestrians can't)

    Buildings 0 and 1 have bike racks on the same sidewalk (lane 3),
    building 2 has no rack, building 3 has a rack on lane 1.

    Returns:
        MapView for the demo corridor
    """
    network = MapView()

    for intersection_id, x, is_border in [
        (0, 0.0, True),
        (1, 100.0, False),
        (2, 300.0, False),
        (3, 450.0, True),
    ]:
        network.add_intersection(
            Intersection(intersection_id, (x, 0.0), is_border=is_border)
        )

    for lane_id, lane_type, src, dst in [
        (0, LaneType.DRIVING, 0, 1),
        (1, LaneType.SIDEWALK, 0, 1),
        (2, LaneType.DRIVING, 1, 2),
        (3, LaneType.SIDEWALK, 1, 2),
        (4, LaneType.BIKING, 1, 2),
        (5, LaneType.DRIVING, 2, 3),
        (6, LaneType.SIDEWALK, 2, 3),
        (7, LaneType.DRIVING, 1, 0),
    ]:
        network.add_lane(Lane(lane_id, lane_type, src, dst))

    network.add_building(
        Building(
            building_id=0,
            sidewalk_pos=Position(3, 20.0),
            parking_pos=Position(2, 20.0),
            biking_pos=Position(4, 20.0),
            bike_rack_pos=Position(3, 25.0),
        )
    )
    network.add_building(
        Building(
            building_id=1,
            sidewalk_pos=Position(3, 150.0),
            parking_pos=Position(2, 150.0),
            biking_pos=Position(4, 150.0),
            bike_rack_pos=Position(3, 155.0),
        )
    )
    network.add_building(
        Building(
            building_id=2,
            sidewalk_pos=Position(6, 50.0),
            parking_pos=Position(5, 50.0),
        )
    )
    network.add_building(
        Building(
            building_id=3,
            sidewalk_pos=Position(1, 40.0),
            parking_pos=Position(0, 40.0),
            biking_pos=Position(0, 40.0),
            bike_rack_pos=Position(1, 45.0),
        )
    )

    network.add_bus_stop(
        BusStop(0, sidewalk_pos=Position(3, 100.0), driving_pos=Position(2, 100.0))
    )
    network.add_bus_stop(
        BusStop(1, sidewalk_pos=Position(6, 100.0), driving_pos=Position(5, 100.0))
    )
    network.add_bus_route(BusRoute(0, "Corridor Local", stops=[0, 1]))

    return network
