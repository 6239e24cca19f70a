from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional, Sequence

# Ensure repo root is on sys.path when running as a script
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
REPO_ROOT = os.path.abspath(os.path.join(SCRIPT_DIR, os.pardir, os.pardir))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from colorama import Fore, Style, init as colorama_init

from patient_scheduler_simulator.backend.errors import SchedulerError
from patient_scheduler_simulator.backend.report import (
    banner, render_comparison, render_gantt, render_job_table, render_key_events,
    render_metrics, render_workload,
)
from patient_scheduler_simulator.backend.scenarios import SCENARIOS, Scenario, get_scenario, random_scenario
from patient_scheduler_simulator.backend.schedulers import ALGORITHMS, Scheduler
from patient_scheduler_simulator.backend.simulator import (
    ComparisonHarness, ScenarioComparison, SimulatorConfig, metrics_frame,
)
from patient_scheduler_simulator.backend.visualizer import plot_gantt


ALGORITHM_CHOICES = {"priority": Scheduler.PRIORITY, "fcfs": Scheduler.FCFS, "sjf": Scheduler.SJF, "rr": Scheduler.RR}
SUMMARY_COLUMNS = ["avg_response_time", "avg_waiting_time", "emergency_response_max", "context_switches", "cpu_utilization"]


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Compare CPU scheduling algorithms on hospital workloads")
    p.add_argument("--scenario", choices=[*SCENARIOS, "random", "all"], default="all")
    p.add_argument("--algorithm", action="append", choices=list(ALGORITHM_CHOICES),
                   help="Algorithm to run (repeatable, default: all four)")
    p.add_argument("--quantum", type=int, default=4, help="Round Robin time quantum")
    p.add_argument("--max-jobs", type=int, default=20, help="Registry capacity")
    p.add_argument("--workers", type=int, default=1, help="Run algorithms in a thread pool when > 1")
    p.add_argument("--jobs", type=int, default=10, help="Number of jobs for --scenario random")
    p.add_argument("--seed", type=int, default=42)
    p.add_argument("--gantt-step", type=int, default=1, help="Ticks per Gantt chart cell")
    p.add_argument("--plot", type=str, default=None, help="Save a matplotlib Gantt chart of the first algorithm to this path")
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p.parse_args(argv)


def build_config(args: argparse.Namespace) -> SimulatorConfig:
    if args.gantt_step <= 0:
        raise ValueError("--gantt-step must be strictly positive")
    algorithms = tuple(ALGORITHM_CHOICES[a] for a in args.algorithm) if args.algorithm else ALGORITHMS
    return SimulatorConfig(
        time_quantum=args.quantum,
        max_jobs=args.max_jobs,
        algorithms=algorithms,
        workers=args.workers,
    )


def select_scenarios(args: argparse.Namespace, config: SimulatorConfig) -> List[Scenario]:
    if args.scenario == "random":
        return [random_scenario(args.jobs, seed=args.seed, capacity=config.max_jobs)]
    if args.scenario == "all":
        return [get_scenario(key, capacity=config.max_jobs) for key in SCENARIOS]
    return [get_scenario(args.scenario, capacity=config.max_jobs)]


def _plot_path(base: str, scenario: Scenario, many: bool) -> str:
    if not many:
        return base
    root, ext = os.path.splitext(base)
    return f"{root}_{scenario.key}{ext or '.png'}"


def print_scenario(scenario: Scenario, comparison: ScenarioComparison, gantt_step: int) -> None:
    print(Style.BRIGHT + banner(scenario.title, scenario.subtitle))
    print()
    for line in scenario.description():
        print(f"- {line}")
    print()
    print(render_workload(scenario.registry))

    for number, result in enumerate(comparison, start=1):
        print()
        print(Fore.CYAN + banner(f"ALGORITHM {number}: {result.algorithm}"))
        print(render_metrics(result.metrics))
        if result.events:
            print()
            print(render_gantt(result, step=gantt_step))
            print()
            print(render_key_events(result))
            print()
            print(render_job_table(result.jobs))

    print()
    print(Style.BRIGHT + banner("ALGORITHM COMPARISON SUMMARY", scenario.subtitle))
    print(render_comparison(comparison.results))


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    colorama_init(autoreset=True)

    try:
        config = build_config(args)
        scenarios = select_scenarios(args, config)
    except (SchedulerError, ValueError) as e:
        print(Fore.RED + f"Error: {e}")
        return 2

    harness = ComparisonHarness(config)
    comparisons = []
    for scenario in scenarios:
        comparison = harness.run_scenario(scenario)
        comparisons.append(comparison)
        print_scenario(scenario, comparison, args.gantt_step)
        if args.plot:
            first = next(iter(comparison))
            path = _plot_path(args.plot, scenario, len(scenarios) > 1)
            plot_gantt(first, path)
            print(Fore.CYAN + f"Saved plot to {path}")
        print()

    if len(comparisons) > 1:
        print(Style.BRIGHT + banner("ALL SCENARIOS"))
        print(metrics_frame(comparisons, SUMMARY_COLUMNS).round(2).to_string())
    return 0


if __name__ == "__main__":
    sys.exit(main())
