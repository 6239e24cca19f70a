"""
Hospital workload fixtures used to compare the schedulers.

Each scenario is a fixed list of (label, classification, priority, arrival,
burst) rows. Priority 1 is an emergency patient, 5 a background task.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable, Dict, List

from .core import JobRegistry, MAX_JOBS


@dataclass
class Scenario:
    key: str
    title: str
    subtitle: str
    registry: JobRegistry

    @property
    def emergency_count(self) -> int:
        return self.registry.emergency_count

    def description(self) -> List[str]:
        """Bullet lines summarising the workload."""
        count = self.emergency_count
        if count >= 6:
            return [
                f"{count} EMERGENCY patients arrive within 10 seconds (simulating mass casualty)",
                "Background report generation in progress",
                "Lab processing and check-ins queued",
                "System must prioritize life-critical patients immediately",
            ]
        if count > 0:
            return [
                f"{count} emergency patient(s) during normal operations",
                "Mixed priority workload simulating evening rush",
                "Tests algorithm ability to prioritize critical cases",
            ]
        return [
            "Light load scenario with routine operations",
            "Validation of algorithm behavior under minimal stress",
        ]


EMERGENCY_ROWS = [
    ("Background Report", "Routine Documentation", 5, 0, 30),
    ("EMERGENCY #1", "Critical - Trauma", 1, 5, 3),
    ("EMERGENCY #2", "Critical - Cardiac", 1, 7, 3),
    ("EMERGENCY #3", "Critical - Respiratory", 1, 9, 3),
    ("EMERGENCY #4", "Critical - Hemorrhage", 1, 11, 3),
    ("EMERGENCY #5", "Critical - Head Injury", 1, 13, 3),
    ("EMERGENCY #6", "Critical - Multi-trauma", 1, 15, 3),
    ("Lab Processing", "Urgent - Lab Results", 2, 8, 10),
    ("Check-in", "Standard Registration", 3, 12, 4),
    ("Admin Task", "Non-critical Admin", 4, 15, 8),
    ("Lab Processing #2", "Urgent - Lab Results", 2, 18, 9),
    ("Database Backup", "Background Maintenance", 5, 20, 25),
]

NORMAL_ROWS = [
    ("Report Generation", "Routine", 5, 0, 20),
    ("Check-in #1", "Standard", 3, 3, 4),
    ("Lab Processing #1", "Urgent", 2, 6, 8),
    ("Check-in #2", "Standard", 3, 10, 4),
    ("EMERGENCY Patient", "Critical", 1, 12, 2),
    ("Lab Processing #2", "Urgent", 2, 15, 7),
    ("Admin Task", "Routine", 4, 18, 6),
    ("Check-in #3", "Standard", 3, 22, 4),
]

BEST_ROWS = [
    ("Routine Check-in", "Standard", 3, 0, 5),
    ("Lab Result Processing", "Urgent", 2, 8, 10),
    ("Admin Task", "Routine", 4, 15, 8),
    ("Emergency Patient", "Critical", 1, 20, 3),
    ("Report Generation", "Background", 5, 25, 12),
]


def emergency_scenario(capacity: int = MAX_JOBS) -> Scenario:
    return Scenario(
        key="emergency",
        title="EMERGENCY SCENARIO (MASS CASUALTY)",
        subtitle="6 Critical Patients + Mixed Priority Operations",
        registry=JobRegistry.from_rows(EMERGENCY_ROWS, capacity=capacity),
    )


def normal_scenario(capacity: int = MAX_JOBS) -> Scenario:
    return Scenario(
        key="normal",
        title="NORMAL CASE VALIDATION",
        subtitle="Standard Evening Rush (150 patients/hour)",
        registry=JobRegistry.from_rows(NORMAL_ROWS, capacity=capacity),
    )


def best_case_scenario(capacity: int = MAX_JOBS) -> Scenario:
    return Scenario(
        key="best",
        title="BEST CASE VALIDATION",
        subtitle="Light Load (50 patients/hour)",
        registry=JobRegistry.from_rows(BEST_ROWS, capacity=capacity),
    )


_CLASSIFICATIONS = {
    1: "Critical",
    2: "Urgent",
    3: "Standard",
    4: "Routine",
    5: "Background",
}


def random_scenario(n: int, seed: int = 42, capacity: int = MAX_JOBS) -> Scenario:
    """Synthetic workload with exponential inter-arrival and burst times."""
    rng = random.Random(seed)
    rows = []
    arrival = 0.0
    for i in range(n):
        burst = max(1, round(rng.expovariate(1 / 6)))
        priority = rng.randint(1, 5)
        rows.append((f"Job #{i + 1}", _CLASSIFICATIONS[priority], priority, int(arrival), burst))
        arrival += rng.expovariate(1 / 3)
    return Scenario(
        key="random",
        title="RANDOM WORKLOAD",
        subtitle=f"{n} synthetic jobs (seed {seed})",
        registry=JobRegistry.from_rows(rows, capacity=capacity),
    )


SCENARIOS: Dict[str, Callable[..., Scenario]] = {
    "emergency": emergency_scenario,
    "normal": normal_scenario,
    "best": best_case_scenario,
}


def get_scenario(key: str, capacity: int = MAX_JOBS) -> Scenario:
    factory = SCENARIOS.get(key)
    if factory is None:
        raise KeyError(f"Unknown scenario: {key}")
    return factory(capacity=capacity)
