from __future__ import annotations

import shlex
from typing import List, Optional
from colorama import Fore, Style, init as colorama_init

from .core import Job, JobRegistry, MAX_JOBS
from .errors import SchedulerError
from .report import render_comparison, render_gantt, render_job_table, render_key_events, render_metrics
from .scenarios import SCENARIOS, get_scenario
from .schedulers import TIME_QUANTUM, Scheduler, SimulationResult, run_algorithm
from .simulator import ComparisonHarness, SimulatorConfig
from .visualizer import plot_gantt


class ManualTerminal:
    def __init__(self, capacity: int = MAX_JOBS) -> None:
        colorama_init(autoreset=True)
        self.capacity = capacity
        self.jobs: List[Job] = []
        self.last_result: Optional[SimulationResult] = None

    def prompt(self) -> None:
        print(Fore.CYAN + "Patient scheduler terminal. Type 'help' for commands.")
        while True:
            try:
                raw = input(Fore.GREEN + "> ")
            except (EOFError, KeyboardInterrupt):
                print()
                break
            if not raw.strip():
                continue
            self.handle_command(raw)

    def handle_command(self, raw: str) -> None:
        try:
            parts = shlex.split(raw)
        except ValueError as e:
            print(Fore.RED + f"Parse error: {e}")
            return
        if not parts:
            return
        cmd, *args = parts
        cmd = cmd.lower()
        try:
            if cmd == "help":
                self._help()
            elif cmd == "add":
                self._add(args)
            elif cmd == "list":
                self._list()
            elif cmd == "load":
                self._load(args)
            elif cmd == "clear":
                self.jobs = []
                self.last_result = None
                print(Fore.CYAN + "Job list cleared")
            elif cmd == "run":
                self._run(args)
            elif cmd == "compare":
                self._compare(args)
            elif cmd == "gantt":
                self._gantt()
            elif cmd == "stats":
                self._stats()
            elif cmd == "exit" or cmd == "quit":
                raise SystemExit(0)
            else:
                print(Fore.YELLOW + "Unknown command. Type 'help'.")
        except (SchedulerError, ValueError) as e:
            print(Fore.RED + f"Error: {e}")

    def _help(self) -> None:
        print("Commands:")
        print("  add <label> <priority 1-5> <arrival> <burst> [classification]")
        print("  list")
        print(f"  load <{'|'.join(SCENARIOS)}>")
        print("  clear")
        print("  run [--algorithm priority|fcfs|sjf|rr] [--quantum Q] [--out path]")
        print("  compare [--quantum Q]")
        print("  gantt")
        print("  stats")
        print("  exit")

    def _registry(self) -> JobRegistry:
        return JobRegistry(self.jobs, capacity=self.capacity)

    def _add(self, args: List[str]) -> None:
        if len(args) < 4:
            print(Fore.RED + "Usage: add <label> <priority> <arrival> <burst> [classification]")
            return
        label = args[0]
        try:
            priority = int(args[1])
            arrival = int(args[2])
            burst = int(args[3])
        except ValueError:
            print(Fore.RED + "Invalid numeric values")
            return
        if len(self.jobs) >= self.capacity:
            print(Fore.RED + f"Job list is full ({self.capacity} jobs)")
            return
        classification = " ".join(args[4:]) or "Unclassified"
        job = Job(id=len(self.jobs), label=label, classification=classification,
                  priority=priority, arrival_time=arrival, burst_time=burst)
        self.jobs.append(job)
        print(Fore.CYAN + f"Job {job.id} added: {job}")

    def _list(self) -> None:
        if not self.jobs:
            print("No jobs yet")
            return
        for job in self.jobs:
            print(f"{job.id}: {job.label} priority={job.priority}, arrival={job.arrival_time}, "
                  f"burst={job.burst_time} [{job.classification}]")

    def _load(self, args: List[str]) -> None:
        if not args:
            print(Fore.RED + f"Usage: load <{'|'.join(SCENARIOS)}>")
            return
        try:
            scenario = get_scenario(args[0], capacity=self.capacity)
        except KeyError:
            print(Fore.RED + f"Unknown scenario: {args[0]}")
            return
        self.jobs = list(scenario.registry.copy())
        self.last_result = None
        print(Fore.CYAN + f"Loaded {len(self.jobs)} jobs from '{scenario.key}'")

    def _parse_flags(self, args: List[str]) -> dict:
        options = {"algorithm": Scheduler.PRIORITY, "quantum": TIME_QUANTUM, "out": None}
        it = iter(args)
        for token in it:
            if token == "--algorithm":
                options["algorithm"] = next(it, options["algorithm"])
            elif token == "--quantum":
                try:
                    options["quantum"] = int(next(it))
                except (TypeError, ValueError):
                    print(Fore.YELLOW + "Ignoring invalid quantum")
            elif token == "--out":
                options["out"] = next(it, None)
        return options

    def _run(self, args: List[str]) -> None:
        options = self._parse_flags(args)
        result = run_algorithm(options["algorithm"], self._registry(), time_quantum=options["quantum"])
        self.last_result = result
        m = result.metrics
        print(Style.BRIGHT + f"{result.algorithm} finished at t={result.total_time}. "
                             f"Avg response: {m.avg_response_time:.2f}, Avg waiting: {m.avg_waiting_time:.2f}, "
                             f"Context switches: {m.context_switches}")
        if options["out"]:
            plot_gantt(result, options["out"])
            print(Fore.CYAN + f"Saved plot to {options['out']}")

    def _compare(self, args: List[str]) -> None:
        options = self._parse_flags(args)
        harness = ComparisonHarness(SimulatorConfig(time_quantum=options["quantum"], max_jobs=self.capacity))
        comparison = harness.run(self._registry())
        print(render_comparison(comparison.results))

    def _gantt(self) -> None:
        if not self.last_result:
            print("No simulation yet")
            return
        print(render_gantt(self.last_result))
        if self.last_result.events:
            print()
            print(render_key_events(self.last_result))

    def _stats(self) -> None:
        if not self.last_result:
            print("No simulation yet")
            return
        print(render_metrics(self.last_result.metrics))
        print()
        print(render_job_table(self.last_result.jobs))


def main() -> None:
    ManualTerminal().prompt()


if __name__ == "__main__":
    main()
