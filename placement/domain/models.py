"""Domain models for scenario generation, placement and scoring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from placement.domain.constraints import SimulationConfig


ALGORITHM_BASELINE = "baseline"
ALGORITHM_DEFERRED_ACCEPTANCE = "deferred_acceptance"

# candidate_id -> department_id, or None when unassigned
Placement = dict[str, Optional[str]]


@dataclass(frozen=True)
class Department:
    department_id: str
    name: str
    capacity: int


@dataclass(frozen=True)
class Candidate:
    candidate_id: str
    name: str
    preferences: tuple[str, ...]
    eligible_departments: tuple[str, ...]

    def is_eligible(self, department_id: str) -> bool:
        return department_id in self.eligible_departments


@dataclass(frozen=True)
class Scenario:
    """Static input shared by both allocators.

    `aptitude` is keyed candidate_id -> department_id -> score in [0, 1].
    `department_priority` holds one strict order over all candidate ids per
    department, best first.
    """

    config: SimulationConfig
    departments: list[Department]
    candidates: list[Candidate]
    aptitude: dict[str, dict[str, float]]
    department_priority: dict[str, tuple[str, ...]]

    def department_by_id(self) -> dict[str, Department]:
        return {department.department_id: department for department in self.departments}

    def candidate_by_id(self) -> dict[str, Candidate]:
        return {candidate.candidate_id: candidate for candidate in self.candidates}


@dataclass(frozen=True)
class AssignmentReason:
    candidate_id: str
    algorithm: str
    assigned_department_id: Optional[str]
    summary: str


@dataclass(frozen=True)
class HistogramBin:
    label: str
    value: int


@dataclass(frozen=True)
class PlacementMetrics:
    first_choice_rate: float
    top3_rate: float
    average_rank: float
    blocking_pairs: int

    def to_api_dict(self) -> dict[str, float | int]:
        return {
            "first_choice_rate": self.first_choice_rate,
            "top3_rate": self.top3_rate,
            "average_rank": self.average_rank,
            "blocking_pairs": self.blocking_pairs,
        }


@dataclass(frozen=True)
class PlacementResult:
    algorithm: str
    assignments: Placement
    reasons: list[AssignmentReason]
    metrics: PlacementMetrics
    histogram: list[HistogramBin]

    def to_api_dict(self) -> dict[str, object]:
        return {
            "algorithm": self.algorithm,
            "assignments": dict(self.assignments),
            "metrics": self.metrics.to_api_dict(),
            "histogram": [
                {"label": bin_.label, "value": bin_.value}
                for bin_ in self.histogram
            ],
        }


@dataclass(frozen=True)
class SimulationOutput:
    scenario: Scenario
    baseline: PlacementResult
    deferred_acceptance: PlacementResult

    def results(self) -> list[PlacementResult]:
        return [self.baseline, self.deferred_acceptance]
