"""
Patient scheduler simulator.
Compares Priority, FCFS, SJF and Round Robin scheduling on hospital workloads.
"""

from .backend.core import Job, JobRegistry, MAX_JOBS
from .backend.errors import CapacityExceeded, InvalidJob, SchedulerError
from .backend.schedulers import Scheduler, SimulationResult, run_algorithm
from .backend.simulator import ComparisonHarness, SimulatorConfig

__all__ = [
    'Job',
    'JobRegistry',
    'MAX_JOBS',
    'CapacityExceeded',
    'InvalidJob',
    'SchedulerError',
    'Scheduler',
    'SimulationResult',
    'run_algorithm',
    'ComparisonHarness',
    'SimulatorConfig',
]
