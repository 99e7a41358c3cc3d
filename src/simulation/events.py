"""
Event types for the simulation scheduler.

Defines the events that drive the discrete-event simulation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Optional


class EventType(Enum):
    """Types of events in the simulation."""

    START_TRIP = auto()  # A committed trip begins its first leg


@dataclass(order=True)
class Event:
    """
    A simulation event.

    Events are ordered by time, then by the order they were pushed, so
    events at the same time come out deterministically.
    """

    time: float  # Simulation time in seconds
    seq: int = 0  # Assigned by the scheduler on push
    event_type: EventType = field(default=EventType.START_TRIP, compare=False)
    agent_id: Optional[int] = field(default=None, compare=False)
    data: dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self):
        if self.data is None:
            self.data = {}


def create_start_trip_event(
    time: float,
    trip_id: int,
    person: int,
    spec: Any,
) -> Event:
    """Create an event that starts a committed trip."""
    return Event(
        time=time,
        event_type=EventType.START_TRIP,
        agent_id=person,
        data={
            "trip_id": trip_id,
            "spec": spec,
        },
    )
