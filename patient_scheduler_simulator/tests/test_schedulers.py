"""
Tests for the four scheduling algorithms.
"""

import logging

import pytest

from patient_scheduler_simulator.backend.core import JobRegistry
from patient_scheduler_simulator.backend.errors import InvariantViolation, UnknownAlgorithm
from patient_scheduler_simulator.backend.events import Event, EventKind, EventRecorder
from patient_scheduler_simulator.backend.schedulers import (
    ALGORITHMS, Scheduler, _execute, fcfs_scheduling, priority_scheduling, resolve_algorithm,
    round_robin_scheduling, run_algorithm, sjf_scheduling,
)
from patient_scheduler_simulator.backend.scenarios import best_case_scenario, emergency_scenario, normal_scenario

from .conftest import make_job


def spans(result):
    return [(s.start, s.end, s.job_id) for s in result.recorder.timeline]


class TestPriority:
    """Test the preemptive priority scheduler."""

    def test_emergency_preempts_background(self, example_registry):
        result = priority_scheduling(example_registry)
        assert result.events == [
            Event(0, 0, EventKind.START),
            Event(2, 0, EventKind.PREEMPT),
            Event(2, 1, EventKind.START),
            Event(4, 1, EventKind.COMPLETE),
            Event(4, 2, EventKind.START),
            Event(7, 2, EventKind.COMPLETE),
            Event(7, 0, EventKind.START),
            Event(10, 0, EventKind.COMPLETE),
        ]
        assert spans(result) == [(0, 2, 0), (2, 4, 1), (4, 7, 2), (7, 10, 0)]
        assert result.context_switches == 4
        assert result.total_time == 10

    def test_example_job_timings(self, example_registry):
        result = priority_scheduling(example_registry)
        background, emergency, standard = result.jobs
        # Resumed job keeps its first start
        assert background.start_time == 0
        assert background.response_time == 0
        assert background.completion_time == 10
        assert background.turnaround_time == 10
        assert background.waiting_time == 5
        assert emergency.response_time == 0
        assert emergency.turnaround_time == 2
        assert standard.waiting_time == 0

    def test_example_metrics(self, example_registry):
        m = priority_scheduling(example_registry).metrics
        assert m.avg_response_time == 0
        assert m.avg_turnaround_time == pytest.approx(5.0)
        assert m.avg_waiting_time == pytest.approx(5 / 3)
        assert m.emergency_response_min == 0
        assert m.emergency_response_max == 0
        assert m.cpu_utilization == pytest.approx(100.0)
        assert m.throughput == pytest.approx(0.3)
        assert m.completed == 3

    def test_equal_priority_does_not_preempt(self):
        registry = JobRegistry([
            make_job(0, priority=2, arrival=0, burst=4),
            make_job(1, priority=2, arrival=1, burst=2),
        ])
        result = priority_scheduling(registry)
        assert spans(result) == [(0, 4, 0), (4, 6, 1)]
        assert not [e for e in result.events if e.kind is EventKind.PREEMPT]

    def test_tie_goes_to_lowest_index(self):
        registry = JobRegistry([
            make_job(0, priority=3, arrival=0, burst=2),
            make_job(1, priority=3, arrival=0, burst=1),
        ])
        result = priority_scheduling(registry)
        assert spans(result) == [(0, 2, 0), (2, 3, 1)]

    def test_no_preempt_after_completion(self):
        registry = JobRegistry([
            make_job(0, priority=1, arrival=0, burst=2),
            make_job(1, priority=5, arrival=0, burst=2),
        ])
        result = priority_scheduling(registry)
        assert [e.kind for e in result.events] == [
            EventKind.START, EventKind.COMPLETE, EventKind.START, EventKind.COMPLETE,
        ]

    def test_idle_gap(self):
        registry = JobRegistry([make_job(0, priority=3, arrival=3, burst=2)])
        result = priority_scheduling(registry)
        assert result.events[0] == Event(3, 0, EventKind.START)
        assert result.total_time == 5
        assert result.metrics.cpu_utilization == pytest.approx(40.0)

    def test_mass_casualty(self):
        result = priority_scheduling(emergency_scenario().registry)
        m = result.metrics
        assert m.emergency_response_min == 0
        assert m.emergency_response_max == 5
        assert m.context_switches == 13
        assert m.total_time == 104
        assert m.cpu_utilization == pytest.approx(100.0)
        preempts = [e for e in result.events if e.kind is EventKind.PREEMPT]
        assert preempts == [Event(5, 0, EventKind.PREEMPT)]

    def test_light_load(self):
        result = priority_scheduling(best_case_scenario().registry)
        assert result.events == [
            Event(0, 0, EventKind.START),
            Event(5, 0, EventKind.COMPLETE),
            Event(8, 1, EventKind.START),
            Event(18, 1, EventKind.COMPLETE),
            Event(18, 2, EventKind.START),
            Event(20, 2, EventKind.PREEMPT),
            Event(20, 3, EventKind.START),
            Event(23, 3, EventKind.COMPLETE),
            Event(23, 2, EventKind.START),
            Event(29, 2, EventKind.COMPLETE),
            Event(29, 4, EventKind.START),
            Event(41, 4, EventKind.COMPLETE),
        ]
        assert result.context_switches == 6


class TestFCFS:
    """Test First Come First Serve."""

    def test_example(self, example_registry):
        result = fcfs_scheduling(example_registry)
        assert spans(result) == [(0, 5, 0), (5, 7, 1), (7, 10, 2)]
        assert [j.response_time for j in result.jobs] == [0, 3, 3]
        assert result.context_switches == 3
        assert result.events == []

    def test_idle_jump(self):
        registry = JobRegistry([
            make_job(0, priority=3, arrival=0, burst=2),
            make_job(1, priority=3, arrival=6, burst=1),
        ])
        result = fcfs_scheduling(registry)
        assert spans(result) == [(0, 2, 0), (6, 7, 1)]
        assert result.jobs[1].response_time == 0
        assert result.metrics.cpu_utilization == pytest.approx(3 / 7 * 100)

    def test_unsorted_registry_warns_and_keeps_order(self, caplog):
        registry = emergency_scenario().registry
        with caplog.at_level(logging.WARNING, logger="patient_scheduler_simulator.backend.schedulers"):
            result = fcfs_scheduling(registry)
        assert "not sorted by arrival" in caplog.text
        assert [s.job_id for s in result.recorder.timeline] == list(range(12))
        assert result.metrics.emergency_response_min == 25
        assert result.metrics.emergency_response_max == 30
        assert result.total_time == 104

    def test_sorted_registry_is_quiet(self, example_registry, caplog):
        with caplog.at_level(logging.WARNING):
            fcfs_scheduling(example_registry)
        assert caplog.text == ""


class TestSJF:
    """Test non-preemptive Shortest Job First."""

    def test_example(self, example_registry):
        result = sjf_scheduling(example_registry)
        assert spans(result) == [(0, 5, 0), (5, 7, 1), (7, 10, 2)]
        assert result.context_switches == 3

    def test_shortest_first_once_eligible(self):
        registry = JobRegistry([
            make_job(0, priority=3, arrival=0, burst=3),
            make_job(1, priority=3, arrival=1, burst=6),
            make_job(2, priority=3, arrival=1, burst=2),
            make_job(3, priority=3, arrival=2, burst=4),
        ])
        result = sjf_scheduling(registry)
        assert [s.job_id for s in result.recorder.timeline] == [0, 2, 3, 1]

    def test_no_preemption(self):
        registry = JobRegistry([
            make_job(0, priority=5, arrival=0, burst=10),
            make_job(1, priority=1, arrival=1, burst=1),
        ])
        result = sjf_scheduling(registry)
        assert spans(result) == [(0, 10, 0), (10, 11, 1)]

    def test_tie_goes_to_lowest_index(self):
        registry = JobRegistry([
            make_job(0, priority=3, arrival=0, burst=2),
            make_job(1, priority=1, arrival=0, burst=2),
        ])
        result = sjf_scheduling(registry)
        assert [s.job_id for s in result.recorder.timeline] == [0, 1]


class TestRoundRobin:
    """Test Round Robin."""

    def test_example(self, example_registry):
        result = round_robin_scheduling(example_registry)
        assert spans(result) == [(0, 4, 0), (4, 6, 1), (6, 9, 2), (9, 10, 0)]
        assert [j.response_time for j in result.jobs] == [0, 2, 2]
        assert result.context_switches == 4

    def test_new_arrivals_go_ahead_of_preempted_job(self):
        registry = JobRegistry([
            make_job(0, priority=3, arrival=0, burst=6),
            make_job(1, priority=3, arrival=2, burst=2),
        ])
        result = round_robin_scheduling(registry, time_quantum=4)
        assert spans(result) == [(0, 4, 0), (4, 6, 1), (6, 8, 0)]
        assert result.context_switches == 3

    def test_consecutive_quanta_stay_separate(self):
        registry = JobRegistry([make_job(0, priority=3, arrival=0, burst=9)])
        result = round_robin_scheduling(registry, time_quantum=4)
        assert spans(result) == [(0, 4, 0), (4, 8, 0), (8, 9, 0)]
        assert result.context_switches == 3

    def test_late_first_arrival(self):
        registry = JobRegistry([make_job(0, priority=3, arrival=1, burst=2)])
        result = round_robin_scheduling(registry)
        assert spans(result) == [(1, 3, 0)]
        assert result.jobs[0].response_time == 0
        assert result.total_time == 3

    def test_light_load(self):
        result = round_robin_scheduling(best_case_scenario().registry)
        assert spans(result) == [
            (0, 4, 0), (4, 5, 0), (8, 12, 1), (12, 16, 1), (16, 20, 2), (20, 22, 1),
            (22, 25, 3), (25, 29, 2), (29, 33, 4), (33, 37, 4), (37, 41, 4),
        ]
        assert result.context_switches == 11
        assert result.metrics.emergency_response_max == 2

    @pytest.mark.parametrize("quantum", [0, -2])
    def test_invalid_quantum(self, example_registry, quantum):
        with pytest.raises(ValueError):
            round_robin_scheduling(example_registry, time_quantum=quantum)


class TestDispatch:
    """Test algorithm lookup and shared helpers."""

    @pytest.mark.parametrize("name, expected", [
        ("priority", Scheduler.PRIORITY),
        ("FCFS", Scheduler.FCFS),
        ("sjf", Scheduler.SJF),
        ("rr", Scheduler.RR),
        ("Round Robin", Scheduler.RR),
        (" round_robin ", Scheduler.RR),
    ])
    def test_resolve(self, name, expected):
        assert resolve_algorithm(name) == expected

    def test_unknown_algorithm(self, example_registry):
        with pytest.raises(UnknownAlgorithm):
            run_algorithm("lottery", example_registry)

    def test_run_algorithm_passes_quantum(self, example_registry):
        result = run_algorithm("rr", example_registry, time_quantum=1)
        assert all(s.length == 1 for s in result.recorder.timeline)

    def test_overrun_is_fatal(self):
        job = make_job(0, priority=3, arrival=0, burst=2)
        with pytest.raises(InvariantViolation):
            _execute(job, 3, 0, EventRecorder())


@pytest.mark.parametrize("algorithm", ALGORITHMS)
class TestEveryAlgorithm:
    """Properties every scheduler must satisfy on every scenario."""

    def test_empty_registry(self, algorithm, empty_registry):
        result = run_algorithm(algorithm, empty_registry)
        assert result.total_time == 0
        assert result.events == []
        assert result.metrics.avg_response_time == 0
        assert result.metrics.cpu_utilization == 0
        assert result.metrics.throughput == 0

    def test_all_jobs_complete(self, algorithm, scenario):
        result = run_algorithm(algorithm, scenario.registry)
        assert all(j.is_completed for j in result.jobs)
        assert result.metrics.completed == len(scenario.registry)

    def test_work_is_conserved(self, algorithm, scenario):
        result = run_algorithm(algorithm, scenario.registry)
        for job in result.jobs:
            assert sum(s.length for s in result.recorder.slices_for(job.id)) == job.burst_time
            assert job.remaining_time == 0

    def test_slices_do_not_overlap(self, algorithm, scenario):
        result = run_algorithm(algorithm, scenario.registry)
        timeline = result.recorder.timeline
        for prev, cur in zip(timeline, timeline[1:]):
            assert prev.end <= cur.start
        assert timeline[-1].end == result.total_time

    def test_timing_identities(self, algorithm, scenario):
        result = run_algorithm(algorithm, scenario.registry)
        for job in result.jobs:
            assert job.turnaround_time == job.completion_time - job.arrival_time
            assert job.waiting_time == job.turnaround_time - job.burst_time
            assert job.waiting_time >= 0
            assert job.response_time == job.start_time - job.arrival_time
            assert 0 <= job.response_time <= job.waiting_time
            first = result.recorder.slices_for(job.id)[0]
            assert first.start == job.start_time
            assert job.start_time >= job.arrival_time

    def test_template_is_untouched(self, algorithm, scenario):
        run_algorithm(algorithm, scenario.registry)
        for job in scenario.registry:
            assert job.remaining_time == job.burst_time
            assert not job.has_started

    def test_utilization_bounds(self, algorithm, scenario):
        m = run_algorithm(algorithm, scenario.registry).metrics
        assert 0 < m.cpu_utilization <= 100
        assert m.context_switches >= len(scenario.registry)


def test_preemption_only_for_more_urgent_job(scenario):
    result = priority_scheduling(scenario.registry)
    by_id = {j.id: j for j in result.jobs}
    for event, following in zip(result.events, result.events[1:]):
        if event.kind is EventKind.PREEMPT:
            assert following.kind is EventKind.START
            assert following.time == event.time
            assert by_id[following.job_id].priority < by_id[event.job_id].priority


def test_event_intervals_match_timeline(scenario):
    result = priority_scheduling(scenario.registry)
    assert result.recorder.intervals() == result.recorder.timeline


def test_round_robin_respects_quantum(scenario):
    quantum = 3
    result = round_robin_scheduling(scenario.registry, time_quantum=quantum)
    by_id = {j.id: j for j in result.jobs}
    for piece in result.recorder.timeline:
        assert piece.length <= quantum
        if piece.length < quantum:
            # A short slice is always the job's last
            assert piece.end == by_id[piece.job_id].completion_time


# The emergency registry is listed out of arrival order on purpose
@pytest.mark.parametrize("factory", [normal_scenario, best_case_scenario])
def test_fcfs_follows_arrival_order(factory):
    registry = factory().registry
    assert registry.is_sorted_by_arrival()
    result = fcfs_scheduling(registry)
    arrivals = [result.job(s.job_id).arrival_time for s in result.recorder.timeline]
    assert arrivals == sorted(arrivals)


def test_sjf_picks_minimum_burst(scenario):
    result = sjf_scheduling(scenario.registry)
    for piece in result.recorder.timeline:
        eligible = [
            j for j in result.jobs
            if j.arrival_time <= piece.start and j.start_time >= piece.start
        ]
        assert result.job(piece.job_id).burst_time == min(j.burst_time for j in eligible)
