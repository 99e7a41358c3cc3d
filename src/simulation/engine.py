"""
Event-driven simulation engine.

Pops events off the scheduler in time order and starts the trips the
spawner committed. Movement along legs happens elsewhere; this loop only
hands each starting trip its first path request.
"""

from __future__ import annotations

import logging
import time as time_module
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from ..trips.model import PathRequest
from ..trips.pathfinding import path_request
from .events import Event, EventType
from .ledger import TripLedger
from .network import MapView
from .scheduler import Scheduler

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    """Results from a simulation run."""

    metrics: dict[str, Any]
    started: list[int] = field(default_factory=list)  # trip ids in start order
    end_time: float = 0.0
    duration_seconds: float = 0.0


class SimulationEngine:
    """
    Processes events from the scheduler and coordinates the ledger.

    Args:
        network: Map the trips run on
        ledger: Where committed trips are registered
        scheduler: Queue holding start events
        pathfinder: Called with each trip's first PathRequest, if any
    """

    def __init__(
        self,
        network: MapView,
        ledger: TripLedger,
        scheduler: Scheduler,
        pathfinder: Optional[Callable[[PathRequest], None]] = None,
    ):
        self.network = network
        self.ledger = ledger
        self.scheduler = scheduler
        self.pathfinder = pathfinder

        self.current_time: float = 0.0
        self.started: list[int] = []
        self.is_running: bool = False

        # Event handlers
        self._handlers: dict[EventType, Callable[[Event], None]] = {
            EventType.START_TRIP: self._handle_start_trip,
        }

    def run(self, until: Optional[float] = None) -> SimulationResult:
        """
        Run until the scheduler is empty or the next event is after until.

        Returns:
            SimulationResult with ledger metrics and the start order
        """
        start_wall_time = time_module.time()
        self.is_running = True

        while self.scheduler and self.is_running:
            next_time = self.scheduler.peek_time()
            if until is not None and next_time > until:
                break

            event = self.scheduler.pop()
            self.current_time = event.time

            handler = self._handlers.get(event.event_type)
            if handler:
                handler(event)

        self.is_running = False

        return SimulationResult(
            metrics=self.ledger.get_summary_metrics(),
            started=list(self.started),
            end_time=self.current_time,
            duration_seconds=time_module.time() - start_wall_time,
        )

    def stop(self) -> None:
        """Stop the simulation."""
        self.is_running = False

    # Event Handlers

    def _handle_start_trip(self, event: Event) -> None:
        """Start a trip and request its first path."""
        trip_id = event.data["trip_id"]
        request = path_request(event.data["spec"], self.network)

        self.ledger.start_trip(trip_id, event.time, request)
        self.started.append(trip_id)
        logger.debug(f"Started trip {trip_id} at {event.time:.0f}s")

        if request is not None and self.pathfinder is not None:
            self.pathfinder(request)
