"""Trip specifications, validation and spawning."""

from .errors import MalformedTripError, UnfinalizableTripError, UnknownPersonError
from .model import (
    Border,
    BorderEndpoint,
    BuildingEndpoint,
    CarID,
    Drive,
    JustWalking,
    ParkNear,
    PathRequest,
    PositionEndpoint,
    RideBus,
    SidewalkSpot,
    SpawningFailure,
    SpotKind,
    TripMode,
    TripPurpose,
    UsingBike,
    UsingParkedCar,
    UsingTransit,
    VehicleAppearing,
    VehicleType,
    Walk,
    goal_pos,
)
from .pathfinding import path_request
from .spawner import SpawnReport, TripSpawner, trip_legs
from .validation import (
    FallbackEvent,
    FallbackKind,
    TripPlan,
    TripRequest,
    schedule_trip,
    validate,
    validate_batch,
)

__all__ = [
    # Errors
    "MalformedTripError",
    "UnfinalizableTripError",
    "UnknownPersonError",
    # Model
    "CarID",
    "VehicleType",
    "TripMode",
    "TripPurpose",
    "ParkNear",
    "Border",
    "goal_pos",
    "SidewalkSpot",
    "SpotKind",
    "BuildingEndpoint",
    "BorderEndpoint",
    "PositionEndpoint",
    "Walk",
    "Drive",
    "RideBus",
    "VehicleAppearing",
    "SpawningFailure",
    "UsingParkedCar",
    "JustWalking",
    "UsingBike",
    "UsingTransit",
    "PathRequest",
    # Validation
    "FallbackEvent",
    "FallbackKind",
    "TripPlan",
    "TripRequest",
    "schedule_trip",
    "validate",
    "validate_batch",
    # Spawning
    "SpawnReport",
    "TripSpawner",
    "trip_legs",
    "path_request",
]
