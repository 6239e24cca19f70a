from __future__ import annotations

from typing import Dict, Optional
import colorsys
import os
import matplotlib.pyplot as plt

from .events import EventKind
from .schedulers import SimulationResult


PRIORITY_HUES = {1: 0.0, 2: 0.08, 3: 0.55, 4: 0.65, 5: 0.75}


def ensure_dir(path: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def priority_color(priority: int) -> str:
    # Emergencies are saturated red, background work fades out
    r, g, b = colorsys.hls_to_rgb(PRIORITY_HUES.get(priority, 0.5), 0.5, 0.85 - 0.1 * (priority - 1))
    return f"#{int(r * 255):02x}{int(g * 255):02x}{int(b * 255):02x}"


def plot_gantt(result: SimulationResult, out_path: Optional[str] = None):
    """Horizontal bar Gantt chart of one run, with preemption markers."""
    jobs = result.jobs
    fig, ax = plt.subplots(figsize=(12, 2 + 0.4 * max(1, len(jobs))))

    y_positions: Dict[int, int] = {job.id: i for i, job in enumerate(jobs)}
    colors = {job.id: priority_color(job.priority) for job in jobs}

    for piece in result.recorder.timeline:
        ax.barh(
            y_positions[piece.job_id],
            piece.length,
            left=piece.start,
            color=colors[piece.job_id],
            edgecolor="black",
            alpha=0.9,
        )

    for event in result.events:
        if event.kind is EventKind.PREEMPT:
            ax.plot(event.time, y_positions[event.job_id], marker="v", color="black", markersize=7)

    ax.set_yticks([y_positions[job.id] for job in jobs])
    ax.set_yticklabels([f"{job.label} (P{job.priority})" for job in jobs])
    ax.invert_yaxis()
    ax.set_xlim(0, max(1, result.total_time))
    ax.set_xlabel("Time")
    ax.set_title(
        f"{result.algorithm}: avg response {result.metrics.avg_response_time:.2f}s, "
        f"{result.metrics.context_switches} context switches"
    )
    ax.grid(True, axis="x", linestyle=":", alpha=0.5)
    fig.tight_layout()

    if out_path:
        ensure_dir(out_path)
        fig.savefig(out_path, dpi=150)
        plt.close(fig)
    else:
        plt.show()
    return fig
