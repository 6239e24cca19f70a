"""
Comparison harness: runs every configured algorithm over a scenario and
collects the results into a pandas table.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, fields
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from .core import JobRegistry, MAX_JOBS
from .metrics import Metrics
from .scenarios import Scenario
from .schedulers import ALGORITHMS, TIME_QUANTUM, SimulationResult, resolve_algorithm, run_algorithm

logger = logging.getLogger(__name__)


@dataclass
class SimulatorConfig:
    time_quantum: int = TIME_QUANTUM
    max_jobs: int = MAX_JOBS
    algorithms: Tuple[str, ...] = ALGORITHMS
    workers: int = 1

    def __post_init__(self) -> None:
        if self.time_quantum <= 0:
            raise ValueError("time_quantum must be strictly positive")
        if self.max_jobs <= 0:
            raise ValueError("max_jobs must be strictly positive")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        if not self.algorithms:
            raise ValueError("at least one algorithm is required")
        self.algorithms = tuple(resolve_algorithm(a) for a in self.algorithms)


@dataclass
class ScenarioComparison:
    name: str
    registry: JobRegistry
    results: Dict[str, SimulationResult] = field(default_factory=dict)

    def __getitem__(self, algorithm: str) -> SimulationResult:
        return self.results[resolve_algorithm(algorithm)]

    def __iter__(self):
        return iter(self.results.values())


class ComparisonHarness:
    """Runs every configured algorithm over a scenario's registry.

    The harness holds no scheduling logic. Each algorithm copies the
    registry itself, so parallel runs share only the read-only template.
    """

    def __init__(self, config: SimulatorConfig | None = None):
        self.config = config or SimulatorConfig()

    def _run_one(self, algorithm: str, registry: JobRegistry) -> SimulationResult:
        result = run_algorithm(algorithm, registry, time_quantum=self.config.time_quantum)
        logger.info(
            "%s finished at t=%d: %d/%d jobs, %d context switches",
            algorithm, result.total_time, result.metrics.completed, len(registry),
            result.context_switches,
        )
        return result

    def run(self, registry: JobRegistry, name: str = "custom") -> ScenarioComparison:
        algorithms = self.config.algorithms
        if self.config.workers > 1:
            with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
                results = list(pool.map(lambda a: self._run_one(a, registry), algorithms))
        else:
            results = [self._run_one(a, registry) for a in algorithms]
        return ScenarioComparison(
            name=name,
            registry=registry,
            results={r.algorithm: r for r in results},
        )

    def run_scenario(self, scenario: Scenario) -> ScenarioComparison:
        return self.run(scenario.registry, name=scenario.key)

    def run_all(self, scenarios: Iterable[Scenario]) -> List[ScenarioComparison]:
        return [self.run_scenario(s) for s in scenarios]


def metrics_frame(comparisons: Iterable[ScenarioComparison], columns: Optional[List[str]] = None) -> pd.DataFrame:
    """One row per (scenario, algorithm) with every Metrics field as a column."""
    rows = []
    index = []
    for comparison in comparisons:
        for algorithm, result in comparison.results.items():
            rows.append(result.metrics.as_dict())
            index.append((comparison.name, algorithm))
    if not rows:
        frame = pd.DataFrame(columns=[f.name for f in fields(Metrics)])
    else:
        frame = pd.DataFrame(
            rows,
            index=pd.MultiIndex.from_tuples(index, names=["scenario", "algorithm"]),
        )
    if columns is not None:
        frame = frame[columns]
    return frame
