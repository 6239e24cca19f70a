"""
Plain-text rendering of workloads, metrics, Gantt charts and comparisons.

Every function returns a string; printing (and colouring) is left to the
caller.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

from .core import Job, JobRegistry
from .events import EventKind
from .metrics import Metrics
from .schedulers import SimulationResult

RULE = "=" * 80


def banner(title: str, subtitle: str = "") -> str:
    lines = [RULE, f"{title:^80}".rstrip()]
    if subtitle:
        lines.append(f"{subtitle:^80}".rstrip())
    lines.append(RULE)
    return "\n".join(lines)


def _heading(title: str) -> List[str]:
    return [title, "-" * len(title)]


def format_emergency_range(metrics: Metrics) -> str:
    low, high = metrics.emergency_response_min, metrics.emergency_response_max
    if low == high:
        return f"{low:.0f}s"
    return f"{low:.0f}-{high:.0f}s"


def response_assessment(avg_response: float) -> str:
    if avg_response < 5:
        return "Excellent"
    if avg_response < 15:
        return "Good"
    return "Poor"


def emergency_assessment(worst_response: float) -> str:
    if worst_response <= 5:
        return "EXCELLENT"
    if worst_response <= 10:
        return "Acceptable"
    return "CRITICAL DELAY"


def render_workload(registry: JobRegistry) -> str:
    lines = _heading("Process Workload:")
    lines.append(f"{'PID':<4} {'Process Name':<22} {'Priority':<8}  {'Arrival(s)':<10}  {'Burst(s)':<8}  Medical Classification")
    lines.append(f"{'-' * 3:<4} {'-' * 22} {'-' * 8}  {'-' * 10}  {'-' * 8}  {'-' * 22}")
    for job in registry:
        lines.append(
            f"{job.id:<4} {job.label:<22} {job.priority:<8}  {job.arrival_time:<10}  "
            f"{job.burst_time:<8}  {job.classification}"
        )
    total = f"Total Processes: {len(registry)}"
    emergencies = registry.emergency_count
    if emergencies:
        total += f" ({emergencies} emergencies + {len(registry) - emergencies} supporting operations)"
    lines.extend(["", total])
    return "\n".join(lines)


def render_metrics(metrics: Metrics) -> str:
    lines = _heading("Performance Metrics:")
    lines.append(f"{'Metric':<30} {'Value':<12} Assessment")
    lines.append(f"{'-' * 30} {'-' * 12} {'-' * 15}")
    lines.append(
        f"{'Average Response Time':<30} {metrics.avg_response_time:<12.2f} "
        f"{response_assessment(metrics.avg_response_time)}"
    )
    lines.append(f"{'Average Turnaround Time':<30} {metrics.avg_turnaround_time:<12.2f}")
    lines.append(f"{'Average Waiting Time':<30} {metrics.avg_waiting_time:<12.2f}")
    if metrics.emergency_response_min or metrics.emergency_response_max:
        lines.append(
            f"{'EMERGENCY Response Time':<30} {format_emergency_range(metrics):<12} "
            f"{emergency_assessment(metrics.emergency_response_max)}"
        )
    lines.append(f"{'CPU Utilization':<30} {metrics.cpu_utilization:.2f}%")
    lines.append(f"{'Context Switches':<30} {metrics.context_switches}")
    lines.append(f"{'Throughput':<30} {metrics.throughput:.3f} processes/second")
    lines.append(f"{'Total Execution Time':<30} {metrics.total_time}s")
    return "\n".join(lines)


def render_job_table(jobs: Sequence[Job]) -> str:
    """Per-job timing, emergencies listed first."""
    lines = _heading("Individual Process Performance:")
    lines.append(
        f"{'Process':<22} {'Priority':<8}  {'Arrival':<7}  {'Burst':<5}  {'Start':<5}  "
        f"{'Finish':<6}  {'Response':<8}  {'TAT':<4}  {'Wait':<4}"
    )
    lines.append(f"{'-' * 22} {'-' * 8}  {'-' * 7}  {'-' * 5}  {'-' * 5}  {'-' * 6}  {'-' * 8}  {'-' * 4}  {'-' * 4}")
    ordered = [j for j in jobs if j.is_emergency] + [j for j in jobs if not j.is_emergency]
    for job in ordered:
        finish = "-" if job.completion_time is None else job.completion_time
        response = "-" if job.response_time is None else f"{job.response_time}s"
        tat = "-" if job.turnaround_time is None else job.turnaround_time
        wait = "-" if job.waiting_time is None else job.waiting_time
        lines.append(
            f"{job.label:<22} {job.priority:<8}  {job.arrival_time:<7}  {job.burst_time:<5}  "
            f"{job.start_time:<5}  {finish:<6}  {response:<8}  {tat:<4}  {wait:<4}"
        )
    return "\n".join(lines)


def _time_axis(cells: int, step: int) -> str:
    axis = [" "] * (cells + 1)
    for cell in range(cells + 1):
        t = cell * step
        if t % 10:
            continue
        label = str(t)
        if cell + len(label) > len(axis):
            axis.extend(" " * (cell + len(label) - len(axis)))
        # Skip labels that would overwrite the previous one
        if any(ch != " " for ch in axis[max(0, cell - 1):cell + len(label)]):
            continue
        axis[cell:cell + len(label)] = label
    return "".join(axis).rstrip()


def render_gantt(result: SimulationResult, step: int = 1) -> str:
    """ASCII Gantt chart built from the execution timeline.

    One row per job; each cell covers ``step`` ticks and is filled when the
    job holds the processor at the first tick of the cell.
    """
    if step <= 0:
        raise ValueError("step must be strictly positive")
    total = result.total_time
    lines = _heading(f"{result.algorithm} Timeline (0-{total}s):")
    if not result.jobs:
        lines.append("(no jobs)")
        return "\n".join(lines)

    cells = -(-total // step)
    width = min(22, max(len(j.label) for j in result.jobs))
    busy: Dict[int, set] = {j.id: set() for j in result.jobs}
    for piece in result.recorder.timeline:
        busy[piece.job_id].update(range(piece.start, piece.end))

    lines.append(f"{'Time:':<{width}} {_time_axis(cells, step)}")
    for job in result.jobs:
        row = "".join("#" if c * step in busy[job.id] else "." for c in range(cells))
        marker = f"  * {job.response_time}s response" if job.is_emergency and job.response_time is not None else ""
        lines.append(f"{job.label[:width]:<{width}} {row}{marker}")
    lines.extend(["", "Legend: # = Executing, . = Not running, * = Emergency patient"])
    return "\n".join(lines)


def render_key_events(result: SimulationResult) -> str:
    lines = _heading("Key Execution Events:")
    if not result.events:
        lines.append("No dispatch events recorded for this algorithm.")
        return "\n".join(lines)

    by_id = {j.id: j for j in result.jobs}
    emergency_start = None
    emergency_end = None
    for index, event in enumerate(result.events):
        job = by_id[event.job_id]
        if job.is_emergency:
            if event.kind is EventKind.START:
                note = "IMMEDIATE" if job.response_time == 0 else ""
                lines.append(f"{event.time}s    {job.label} starts -> Response: {job.response_time}s {note}".rstrip())
                if emergency_start is None:
                    emergency_start = event.time
            elif event.kind is EventKind.COMPLETE:
                lines.append(f"{event.time}s    {job.label} completes")
                emergency_end = event.time
        elif event.kind is EventKind.START:
            lines.append(f"{event.time}s    {job.label} starts (P{job.priority})")
        elif event.kind is EventKind.PREEMPT:
            lines.append(f"{event.time}s    {job.label} preempted by higher priority")
        elif index < 3:
            lines.append(f"{event.time}s    {job.label} completes")

    if emergency_start is not None and emergency_end is not None:
        lines.append(
            f"{emergency_end}s    All emergencies handled "
            f"({emergency_end - emergency_start} seconds total)"
        )
    lines.append(f"{result.total_time}s    All processes complete")
    return "\n".join(lines)


def best_algorithm(results: Mapping[str, SimulationResult], metric: str = "avg_response_time") -> str:
    """Algorithm with the lowest value of a Metrics field."""
    if not results:
        raise ValueError("no results to compare")
    return min(results, key=lambda name: getattr(results[name].metrics, metric))


def render_comparison(results: Mapping[str, SimulationResult]) -> str:
    names = list(results)
    metrics = [results[n].metrics for n in names]
    lines = [f"{'Metric':<24}  " + "  ".join(f"{n:<11}" for n in names)]
    lines.append(f"{'-' * 24}  " + "  ".join("-" * 11 for _ in names))

    def row(title: str, cells: List[str]) -> None:
        lines.append(f"{title:<24}  " + "  ".join(f"{c:<11}" for c in cells))

    row("Avg Response Time", [f"{m.avg_response_time:.2f}s" for m in metrics])
    row("Avg Turnaround Time", [f"{m.avg_turnaround_time:.2f}s" for m in metrics])
    row("Avg Waiting Time", [f"{m.avg_waiting_time:.2f}s" for m in metrics])
    if any(m.emergency_response_max > 0 for m in metrics):
        row("Emergency Response", [format_emergency_range(m) for m in metrics])
    row("Context Switches", [str(m.context_switches) for m in metrics])
    row("CPU Utilization", [f"{m.cpu_utilization:.2f}%" for m in metrics])
    row("Throughput", [f"{m.throughput:.3f}" for m in metrics])
    row("Total Time", [f"{m.total_time}s" for m in metrics])
    if results:
        lines.extend(["", f"Fastest average response: {best_algorithm(results)}"])
    return "\n".join(lines)
