from __future__ import annotations
import os, sys
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.abspath(os.path.join(SCRIPT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from patient_scheduler_simulator.backend.core import Job, JobRegistry
from patient_scheduler_simulator.backend.schedulers import priority_scheduling


def make_jobs():
    # Background report interrupted by two trauma arrivals
    return [
        Job(id=0, label='Night Report', classification='Routine', priority=5, arrival_time=0, burst_time=8),
        Job(id=1, label='Trauma A', classification='Critical', priority=1, arrival_time=2, burst_time=3),
        Job(id=2, label='Check-in', classification='Standard', priority=3, arrival_time=3, burst_time=2),
        Job(id=3, label='Trauma B', classification='Critical', priority=1, arrival_time=4, burst_time=2),
        Job(id=4, label='Lab Result', classification='Urgent', priority=2, arrival_time=6, burst_time=4),
    ]


def run():
    result = priority_scheduling(JobRegistry(make_jobs()))
    by_id = {j.id: j for j in result.jobs}
    # print the dispatch trace
    for event in result.events:
        print(f't={event.time:>3}  {event.kind.value:<8} {by_id[event.job_id].label}')
    print()
    for job in result.jobs:
        print(f'{job.label}: response={job.response_time}, waiting={job.waiting_time}, '
              f'turnaround={job.turnaround_time}, completion={job.completion_time}')
    print('context switches:', result.context_switches)
    print('avg waiting:', result.metrics.avg_waiting_time)
    print('avg turnaround:', result.metrics.avg_turnaround_time)

if __name__ == '__main__':
    run()
