"""
Scheduler implementations: preemptive Priority, FCFS, SJF and Round Robin.

Every algorithm takes a JobRegistry, runs over its own copy of the jobs in
logical time and returns a SimulationResult. Nothing is shared between calls,
so runs may happen side by side.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Optional, Set

from .core import Job, JobRegistry
from .errors import InvariantViolation, UnknownAlgorithm
from .events import Event, EventKind, EventRecorder
from .metrics import Metrics, calculate_metrics

logger = logging.getLogger(__name__)

TIME_QUANTUM = 4


class Scheduler:
    PRIORITY = "Priority"     # preemptive (lower number = higher priority)
    FCFS = "FCFS"             # non-preemptive First-Come, First-Served
    SJF = "SJF"               # non-preemptive, selects on original burst
    RR = "Round Robin"


@dataclass
class SimulationResult:
    algorithm: str
    jobs: List[Job]
    metrics: Metrics
    recorder: EventRecorder
    total_time: int

    @property
    def events(self) -> List[Event]:
        return self.recorder.events

    @property
    def context_switches(self) -> int:
        return self.metrics.context_switches

    def job(self, job_id: int) -> Job:
        for job in self.jobs:
            if job.id == job_id:
                return job
        raise KeyError(job_id)


def _dispatch(job: Job, now: int) -> None:
    """Record first-dispatch fields; resumed jobs keep their original start."""
    if not job.has_started:
        job.start_time = now
        job.response_time = now - job.arrival_time
    logger.debug("t=%d dispatch job %d (%s)", now, job.id, job.label)


def _execute(job: Job, units: int, now: int, recorder: EventRecorder, merge: bool = False) -> int:
    """Run job for units ticks starting at now. Returns the new clock."""
    if units <= 0 or units > job.remaining_time:
        raise InvariantViolation(
            f"job {job.id}: cannot run {units} units with {job.remaining_time} remaining"
        )
    job.remaining_time -= units
    recorder.record_slice(now, now + units, job.id, merge=merge)
    return now + units


def _complete(job: Job, now: int) -> None:
    if job.remaining_time != 0:
        raise InvariantViolation(f"job {job.id} completed with {job.remaining_time} remaining")
    job.completion_time = now
    job.turnaround_time = now - job.arrival_time
    job.waiting_time = job.turnaround_time - job.burst_time
    if job.waiting_time < 0:
        raise InvariantViolation(f"job {job.id} has negative waiting time")
    logger.debug("t=%d job %d complete (TAT=%d, WT=%d)", now, job.id,
                 job.turnaround_time, job.waiting_time)


def _result(algorithm: str, jobs: List[Job], recorder: EventRecorder,
            now: int, context_switches: int) -> SimulationResult:
    return SimulationResult(
        algorithm=algorithm,
        jobs=jobs,
        metrics=calculate_metrics(jobs, now, context_switches),
        recorder=recorder,
        total_time=now,
    )


def _highest_priority(jobs: List[Job], now: int) -> Optional[int]:
    """Index of the most urgent eligible job; lowest index wins ties."""
    best: Optional[int] = None
    for i, job in enumerate(jobs):
        if job.arrival_time > now or job.remaining_time <= 0:
            continue
        if best is None or job.priority < jobs[best].priority:
            best = i
    return best


def _shortest_job(jobs: List[Job], now: int) -> Optional[int]:
    """Index of the eligible job with the smallest burst; lowest index wins ties."""
    best: Optional[int] = None
    for i, job in enumerate(jobs):
        if job.arrival_time > now or job.is_completed:
            continue
        if best is None or job.burst_time < jobs[best].burst_time:
            best = i
    return best


def priority_scheduling(registry: JobRegistry) -> SimulationResult:
    """Preemptive priority scheduling, advanced one tick at a time."""
    jobs = registry.copy()
    recorder = EventRecorder()
    now = 0
    completed = 0
    context_switches = 0
    running: Optional[int] = None

    while completed < len(jobs):
        nxt = _highest_priority(jobs, now)
        if nxt is None:
            now += 1
            continue

        if running != nxt:
            if running is not None and jobs[running].remaining_time > 0:
                recorder.record(now, jobs[running].id, EventKind.PREEMPT)
                logger.debug("t=%d job %d preempted by job %d", now, jobs[running].id, jobs[nxt].id)
            _dispatch(jobs[nxt], now)
            recorder.record(now, jobs[nxt].id, EventKind.START)
            context_switches += 1
            running = nxt

        job = jobs[nxt]
        now = _execute(job, 1, now, recorder, merge=True)

        if job.remaining_time == 0:
            _complete(job, now)
            recorder.record(now, job.id, EventKind.COMPLETE)
            completed += 1
            running = None

    return _result(Scheduler.PRIORITY, jobs, recorder, now, context_switches)


def fcfs_scheduling(registry: JobRegistry) -> SimulationResult:
    """Run jobs to completion in registry order.

    The registry is expected to be sorted by arrival time. It is not
    re-sorted here; an unsorted registry only produces a warning.
    """
    jobs = registry.copy()
    recorder = EventRecorder()
    now = 0
    context_switches = 0

    if not registry.is_sorted_by_arrival():
        logger.warning("FCFS given a registry not sorted by arrival time; running in registry order")

    for job in jobs:
        if now < job.arrival_time:
            now = job.arrival_time
        _dispatch(job, now)
        now = _execute(job, job.burst_time, now, recorder)
        _complete(job, now)
        context_switches += 1

    return _result(Scheduler.FCFS, jobs, recorder, now, context_switches)


def sjf_scheduling(registry: JobRegistry) -> SimulationResult:
    """Non-preemptive shortest job first."""
    jobs = registry.copy()
    recorder = EventRecorder()
    now = 0
    completed = 0
    context_switches = 0

    while completed < len(jobs):
        nxt = _shortest_job(jobs, now)
        if nxt is None:
            now += 1
            continue

        job = jobs[nxt]
        _dispatch(job, now)
        now = _execute(job, job.burst_time, now, recorder)
        _complete(job, now)
        completed += 1
        context_switches += 1

    return _result(Scheduler.SJF, jobs, recorder, now, context_switches)


def _admit_arrivals(jobs: List[Job], queue: Deque[int], queued: Set[int],
                    now: int, exclude: Optional[int] = None) -> None:
    for i, job in enumerate(jobs):
        if i in queued or i == exclude:
            continue
        if job.arrival_time <= now and job.remaining_time > 0:
            queue.append(i)
            queued.add(i)


def round_robin_scheduling(registry: JobRegistry, time_quantum: int = TIME_QUANTUM) -> SimulationResult:
    """Round Robin with a FIFO ready queue.

    Jobs arriving while a slice runs are queued ahead of the job that just
    ran.
    """
    if time_quantum <= 0:
        raise ValueError("time_quantum must be strictly positive")

    jobs = registry.copy()
    recorder = EventRecorder()
    now = 0
    completed = 0
    context_switches = 0

    queue: Deque[int] = deque(i for i, job in enumerate(jobs) if job.arrival_time == 0)
    queued: Set[int] = set(queue)

    while completed < len(jobs):
        if not queue:
            now += 1
            _admit_arrivals(jobs, queue, queued, now)
            continue

        idx = queue.popleft()
        queued.discard(idx)
        job = jobs[idx]

        _dispatch(job, now)
        now = _execute(job, min(job.remaining_time, time_quantum), now, recorder)
        context_switches += 1

        _admit_arrivals(jobs, queue, queued, now, exclude=idx)

        if job.remaining_time == 0:
            _complete(job, now)
            completed += 1
        else:
            queue.append(idx)
            queued.add(idx)

    return _result(Scheduler.RR, jobs, recorder, now, context_switches)


ALGORITHMS = (Scheduler.PRIORITY, Scheduler.FCFS, Scheduler.SJF, Scheduler.RR)

_REGISTRY: Dict[str, Callable[..., SimulationResult]] = {
    Scheduler.PRIORITY: priority_scheduling,
    Scheduler.FCFS: fcfs_scheduling,
    Scheduler.SJF: sjf_scheduling,
    Scheduler.RR: round_robin_scheduling,
}

_ALIASES = {
    "priority": Scheduler.PRIORITY,
    "fcfs": Scheduler.FCFS,
    "sjf": Scheduler.SJF,
    "rr": Scheduler.RR,
    "round robin": Scheduler.RR,
    "round_robin": Scheduler.RR,
}


def resolve_algorithm(name: str) -> str:
    """Map a user-supplied name ("rr", "FCFS", "Round Robin") to its constant."""
    if name in _REGISTRY:
        return name
    resolved = _ALIASES.get(name.strip().lower())
    if resolved is None:
        raise UnknownAlgorithm(f"Unknown scheduling algorithm: {name}")
    return resolved


def run_algorithm(name: str, registry: JobRegistry, time_quantum: int = TIME_QUANTUM) -> SimulationResult:
    algorithm = resolve_algorithm(name)
    if algorithm == Scheduler.RR:
        return round_robin_scheduling(registry, time_quantum=time_quantum)
    return _REGISTRY[algorithm](registry)
