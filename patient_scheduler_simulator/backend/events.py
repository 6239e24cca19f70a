"""
Dispatch event trace and execution timeline of one scheduling run.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional


class EventKind(Enum):
    START = "Start"
    PREEMPT = "Preempt"
    COMPLETE = "Complete"


@dataclass(frozen=True)
class Event:
    time: int
    job_id: int
    kind: EventKind


@dataclass(frozen=True)
class Slice:
    """Contiguous interval [start, end) during which one job held the processor."""
    start: int
    end: int
    job_id: int

    @property
    def length(self) -> int:
        return self.end - self.start


class EventRecorder:
    """Append-only log of dispatch transitions plus the execution timeline.

    Only the preemptive scheduler writes events. Every scheduler writes
    slices, one per dispatch. Both lists stay in insertion order, which is
    also time order.
    """

    def __init__(self) -> None:
        self.events: List[Event] = []
        self.timeline: List[Slice] = []

    def record(self, time_now: int, job_id: int, kind: EventKind) -> Event:
        if self.events and time_now < self.events[-1].time:
            raise ValueError(
                f"event at t={time_now} recorded after t={self.events[-1].time}"
            )
        event = Event(time_now, job_id, kind)
        self.events.append(event)
        return event

    def record_slice(self, start: int, end: int, job_id: int, merge: bool = False) -> None:
        """Append [start, end) for job_id.

        With ``merge`` set, a slice that directly continues the previous one
        of the same job extends it instead (tick-driven schedulers).
        """
        if end <= start:
            return
        last = self.timeline[-1] if self.timeline else None
        if merge and last is not None and last.job_id == job_id and last.end == start:
            self.timeline[-1] = Slice(last.start, end, job_id)
            return
        self.timeline.append(Slice(start, end, job_id))

    def events_for(self, job_id: int) -> List[Event]:
        return [e for e in self.events if e.job_id == job_id]

    def slices_for(self, job_id: int) -> List[Slice]:
        return [s for s in self.timeline if s.job_id == job_id]

    def intervals(self) -> List[Slice]:
        """Pair every Start with the next Preempt/Complete of the same job.

        A Start left open (trace cut short) is dropped.
        """
        open_starts: Dict[int, int] = {}
        intervals: List[Slice] = []
        for event in self.events:
            if event.kind is EventKind.START:
                open_starts[event.job_id] = event.time
                continue
            start: Optional[int] = open_starts.pop(event.job_id, None)
            if start is not None:
                intervals.append(Slice(start, event.time, event.job_id))
        return intervals

    def busy_time(self) -> int:
        return sum(s.length for s in self.timeline)

    def __len__(self) -> int:
        return len(self.events)
