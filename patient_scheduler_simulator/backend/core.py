"""
Core data structures for the patient scheduler simulator.
Includes the Job record and the JobRegistry template every algorithm copies.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .errors import CapacityExceeded, InvalidJob


MAX_JOBS = 20
EMERGENCY_PRIORITY = 1
LOWEST_PRIORITY = 5
NOT_STARTED = -1


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class Job:
    """A patient (or supporting operation) waiting for the processor.

    The first six fields describe the job and never change. Everything after
    ``burst_time`` is simulation state, reset before each algorithm run.
    """
    id: int
    label: str
    classification: str
    priority: int
    arrival_time: int
    burst_time: int
    remaining_time: int = field(init=False)
    start_time: int = field(default=NOT_STARTED, init=False)
    completion_time: Optional[int] = field(default=None, init=False)
    turnaround_time: Optional[int] = field(default=None, init=False)
    waiting_time: Optional[int] = field(default=None, init=False)
    response_time: Optional[int] = field(default=None, init=False)

    def __post_init__(self) -> None:
        if not _is_int(self.id):
            raise InvalidJob(f"job id must be an integer, got {self.id!r}")
        for name in ("priority", "arrival_time", "burst_time"):
            if not _is_int(getattr(self, name)):
                raise InvalidJob(f"job {self.id}: {name} must be an integer")
        if not EMERGENCY_PRIORITY <= self.priority <= LOWEST_PRIORITY:
            raise InvalidJob(
                f"job {self.id}: priority must be within "
                f"{EMERGENCY_PRIORITY}..{LOWEST_PRIORITY}, got {self.priority}"
            )
        if self.arrival_time < 0:
            raise InvalidJob(f"job {self.id}: arrival_time cannot be negative")
        if self.burst_time <= 0:
            raise InvalidJob(f"job {self.id}: burst_time must be strictly positive")
        self.reset()

    def reset(self) -> None:
        """Return the job to its never-run state."""
        self.remaining_time = self.burst_time
        self.start_time = NOT_STARTED
        self.completion_time = None
        self.turnaround_time = None
        self.waiting_time = None
        self.response_time = None

    @property
    def is_emergency(self) -> bool:
        return self.priority == EMERGENCY_PRIORITY

    @property
    def has_started(self) -> bool:
        return self.start_time != NOT_STARTED

    @property
    def is_completed(self) -> bool:
        return self.completion_time is not None

    def __str__(self) -> str:
        return f"{self.label} (P{self.priority}, arrival={self.arrival_time}, burst={self.burst_time})"


def create_job_copy(job: Job) -> Job:
    """Deep copy of a job with pristine simulation state."""
    clone = deepcopy(job)
    clone.reset()
    return clone


class JobRegistry:
    """Ordered, capacity-bounded template of jobs for one scenario.

    The registry keeps private copies of the jobs it was given. Algorithms
    never touch them; they ask for ``copy()`` and mutate that instead, so runs
    cannot leak state into each other.
    """

    def __init__(self, jobs: Iterable[Job] = (), capacity: int = MAX_JOBS):
        if capacity <= 0:
            raise ValueError("capacity must be strictly positive")
        jobs = tuple(jobs)
        if len(jobs) > capacity:
            raise CapacityExceeded(len(jobs), capacity)

        seen = set()
        for job in jobs:
            if job.id in seen:
                raise InvalidJob(f"duplicate job id {job.id}")
            seen.add(job.id)

        self.capacity = capacity
        self._jobs: Tuple[Job, ...] = tuple(create_job_copy(j) for j in jobs)

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Tuple[str, str, int, int, int]],
        capacity: int = MAX_JOBS,
    ) -> "JobRegistry":
        """Build a registry from (label, classification, priority, arrival, burst) rows.

        Ids are assigned from the row index.
        """
        if len(rows) > capacity:
            raise CapacityExceeded(len(rows), capacity)
        jobs = [
            Job(id=i, label=label, classification=cls_name, priority=priority,
                arrival_time=arrival, burst_time=burst)
            for i, (label, cls_name, priority, arrival, burst) in enumerate(rows)
        ]
        return cls(jobs, capacity=capacity)

    @property
    def jobs(self) -> Tuple[Job, ...]:
        """Read-only view of the template jobs."""
        return self._jobs

    def copy(self) -> List[Job]:
        """Independent pristine copies, one list per algorithm run."""
        return [create_job_copy(j) for j in self._jobs]

    def is_sorted_by_arrival(self) -> bool:
        return all(
            a.arrival_time <= b.arrival_time
            for a, b in zip(self._jobs, self._jobs[1:])
        )

    @property
    def emergency_count(self) -> int:
        return sum(1 for j in self._jobs if j.is_emergency)

    def is_empty(self) -> bool:
        return len(self._jobs) == 0

    def __len__(self) -> int:
        return len(self._jobs)

    def __iter__(self) -> Iterator[Job]:
        return iter(self._jobs)

    def __getitem__(self, index: int) -> Job:
        return self._jobs[index]

    def __repr__(self) -> str:
        return f"<JobRegistry {len(self._jobs)}/{self.capacity} jobs>"
