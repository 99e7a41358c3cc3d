"""
Time-ordered event queue driving the simulation clock.
"""

from __future__ import annotations

import heapq
import itertools
from typing import Iterator, Optional

from .events import Event


class Scheduler:
    """
    Min-heap of events keyed by simulation time.

    Not thread safe; only the committing thread pushes to it.
    """

    def __init__(self):
        self.event_queue: list[Event] = []
        self._counter = itertools.count()

    def push(self, time: float, event: Event) -> None:
        """Schedule an event at a simulation time."""
        event.time = time
        event.seq = next(self._counter)
        heapq.heappush(self.event_queue, event)

    def pop(self) -> Event:
        """Remove and return the earliest event."""
        if not self.event_queue:
            raise IndexError("pop from an empty scheduler")
        return heapq.heappop(self.event_queue)

    def peek_time(self) -> Optional[float]:
        """Time of the next event, or None if nothing is scheduled."""
        return self.event_queue[0].time if self.event_queue else None

    def drain(self) -> Iterator[Event]:
        """Pop every event in time order."""
        while self.event_queue:
            yield heapq.heappop(self.event_queue)

    def __len__(self) -> int:
        return len(self.event_queue)
