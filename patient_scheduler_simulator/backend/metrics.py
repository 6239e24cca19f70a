"""
Metrics record and the aggregation over a finished run.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List

from .core import Job


@dataclass
class Metrics:
    avg_response_time: float = 0.0
    avg_turnaround_time: float = 0.0
    avg_waiting_time: float = 0.0
    emergency_response_min: float = 0.0
    emergency_response_max: float = 0.0
    cpu_utilization: float = 0.0
    context_switches: int = 0
    throughput: float = 0.0
    total_time: int = 0
    completed: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def compute_avg(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def compute_throughput(completed: int, total_time: int) -> float:
    if total_time <= 0:
        return 0.0
    return completed / total_time


def compute_cpu_utilization(busy_time: int, total_time: int) -> float:
    if total_time <= 0:
        return 0.0
    return busy_time / total_time * 100


def calculate_metrics(jobs: Iterable[Job], total_time: int, context_switches: int = 0) -> Metrics:
    """Aggregate the timing fields of the completed jobs of one run."""
    completed = [j for j in jobs if j.is_completed]
    if not completed or total_time <= 0:
        return Metrics(context_switches=context_switches, total_time=max(0, total_time))

    emergency_responses = [j.response_time for j in completed if j.is_emergency]

    return Metrics(
        avg_response_time=compute_avg([j.response_time for j in completed]),
        avg_turnaround_time=compute_avg([j.turnaround_time for j in completed]),
        avg_waiting_time=compute_avg([j.waiting_time for j in completed]),
        emergency_response_min=float(min(emergency_responses)) if emergency_responses else 0.0,
        emergency_response_max=float(max(emergency_responses)) if emergency_responses else 0.0,
        cpu_utilization=compute_cpu_utilization(sum(j.burst_time for j in completed), total_time),
        context_switches=context_switches,
        throughput=compute_throughput(len(completed), total_time),
        total_time=total_time,
        completed=len(completed),
    )
