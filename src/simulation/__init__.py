"""
Simulation collaborators for trip spawning.

Provides the map, trip ledger, event scheduler and configuration the
spawner commits trips into. The event loop lives in
src.simulation.engine.
"""

from .config import SpawnConfig, load_config, setup_logging
from .events import Event, EventType, create_start_trip_event
from .network import (
    Building,
    BusRoute,
    BusStop,
    Intersection,
    Lane,
    LaneType,
    MapView,
    PathConstraints,
    Position,
    create_demo_map,
)
from .scheduler import Scheduler
from .ledger import Person, TripLedger, TripRecord, TripStatus

__all__ = [
    # Config
    "SpawnConfig",
    "load_config",
    "setup_logging",
    # Events
    "Event",
    "EventType",
    "create_start_trip_event",
    "Scheduler",
    # Network
    "MapView",
    "Building",
    "BusRoute",
    "BusStop",
    "Intersection",
    "Lane",
    "LaneType",
    "PathConstraints",
    "Position",
    "create_demo_map",
    # Ledger
    "Person",
    "TripLedger",
    "TripRecord",
    "TripStatus",
]
