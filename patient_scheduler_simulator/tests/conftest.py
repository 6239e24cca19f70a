import os
import sys

import matplotlib

matplotlib.use("Agg")

import pytest

from patient_scheduler_simulator.backend.core import Job, JobRegistry
from patient_scheduler_simulator.backend.scenarios import best_case_scenario, emergency_scenario, normal_scenario


def pytest_sessionstart(session):
    # Ensure repo root is on sys.path so the package imports without installing
    here = os.path.dirname(os.path.abspath(__file__))
    repo_root = os.path.abspath(os.path.join(here, os.pardir, os.pardir))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


def make_job(job_id, priority, arrival, burst, label=None):
    return Job(id=job_id, label=label or f"P{job_id}", classification="Test",
               priority=priority, arrival_time=arrival, burst_time=burst)


@pytest.fixture
def example_registry():
    """Background job preempted by an emergency, then a standard job."""
    return JobRegistry([
        make_job(0, priority=5, arrival=0, burst=5),
        make_job(1, priority=1, arrival=2, burst=2),
        make_job(2, priority=3, arrival=4, burst=3),
    ])


@pytest.fixture
def empty_registry():
    return JobRegistry([])


@pytest.fixture(params=["emergency", "normal", "best"])
def scenario(request):
    factories = {
        "emergency": emergency_scenario,
        "normal": normal_scenario,
        "best": best_case_scenario,
    }
    return factories[request.param]()
