from __future__ import annotations

from collections import Counter

import pytest

from placement.domain.constraints import normalize_simulation_config
from placement.domain.models import Candidate, Department
from placement.services.generator import generate_scenario
from placement.services.matching_service import (
    PlacementInvariantError,
    allocate_baseline,
    allocate_deferred_acceptance,
    summarize_reasons,
    verify_capacity,
)

from scenario_builders import build_scenario


SEEDS = (1, 7, 42, 2024, 20260211)


def _generated(seed: int, **overrides):
    return generate_scenario(
        normalize_simulation_config(
            {"seed": seed, "candidate_count": 90, "department_count": 6, **overrides}
        )
    )


def test_baseline_follows_department_order(two_by_two_scenario) -> None:
    assert allocate_baseline(two_by_two_scenario) == {"c-001": "d-001", "c-002": "d-002"}


def test_deferred_acceptance_respects_department_priority(two_by_two_scenario) -> None:
    assert allocate_deferred_acceptance(two_by_two_scenario) == {
        "c-001": "d-002",
        "c-002": "d-001",
    }


@pytest.mark.parametrize("seed", SEEDS)
def test_allocators_never_exceed_capacity(seed: int) -> None:
    scenario = _generated(seed, min_capacity=5, max_capacity=12, constraint_rate=0.3)
    for allocate in (allocate_baseline, allocate_deferred_acceptance):
        assignments = allocate(scenario)
        assert set(assignments) == {candidate.candidate_id for candidate in scenario.candidates}
        counts = Counter(value for value in assignments.values() if value is not None)
        for department in scenario.departments:
            assert counts.get(department.department_id, 0) <= department.capacity


@pytest.mark.parametrize("seed", SEEDS)
def test_assignments_stay_within_stated_preferences(seed: int) -> None:
    scenario = _generated(seed, constraint_rate=0.4)
    by_id = scenario.candidate_by_id()
    for allocate in (allocate_baseline, allocate_deferred_acceptance):
        for candidate_id, department_id in allocate(scenario).items():
            if department_id is not None:
                assert department_id in by_id[candidate_id].preferences
                assert by_id[candidate_id].is_eligible(department_id)


def test_deferred_acceptance_fills_when_capacity_is_ample() -> None:
    scenario = _generated(3, min_capacity=60, max_capacity=80, constraint_rate=0.0)
    assignments = allocate_deferred_acceptance(scenario)
    assert all(department_id is not None for department_id in assignments.values())
    by_id = scenario.candidate_by_id()
    assert all(by_id[cid].preferences[0] == did for cid, did in assignments.items())


def test_ineligible_head_of_list_consumes_a_proposal() -> None:
    scenario = build_scenario(
        candidates=[
            Candidate("c-001", "A", preferences=("d-001", "d-002"), eligible_departments=("d-002",)),
            Candidate("c-002", "B", preferences=("d-001",), eligible_departments=("d-002",)),
        ],
        departments=[Department("d-001", "First", 2), Department("d-002", "Second", 2)],
        priority={"d-001": ("c-001", "c-002"), "d-002": ("c-001", "c-002")},
    )
    assert allocate_deferred_acceptance(scenario) == {"c-001": "d-002", "c-002": None}


def test_candidate_missing_from_priority_ranks_last() -> None:
    both = ("d-001",)
    scenario = build_scenario(
        candidates=[
            Candidate("c-001", "A", preferences=both, eligible_departments=both),
            Candidate("c-002", "B", preferences=both, eligible_departments=both),
        ],
        departments=[Department("d-001", "Only", 1)],
        priority={"d-001": ("c-002",)},
        preference_length=1,
    )
    assert allocate_deferred_acceptance(scenario) == {"c-001": None, "c-002": "d-001"}


def test_baseline_skips_departments_missing_from_preferences() -> None:
    scenario = build_scenario(
        candidates=[
            Candidate("c-001", "A", preferences=("d-002",), eligible_departments=("d-001", "d-002")),
        ],
        departments=[Department("d-001", "First", 1), Department("d-002", "Second", 1)],
        priority={"d-001": ("c-001",), "d-002": ("c-001",)},
        preference_length=1,
    )
    assert allocate_baseline(scenario) == {"c-001": "d-002"}


def test_baseline_breaks_score_ties_by_identifier() -> None:
    both = ("d-001",)
    scenario = build_scenario(
        candidates=[
            Candidate("c-002", "B", preferences=both, eligible_departments=both),
            Candidate("c-001", "A", preferences=both, eligible_departments=both),
        ],
        departments=[Department("d-001", "Only", 1)],
        priority={"d-001": ("c-002", "c-001")},
        preference_length=1,
    )
    assert allocate_baseline(scenario) == {"c-002": None, "c-001": "d-001"}


def test_verify_capacity_rejects_overfull_department(two_by_two_scenario) -> None:
    with pytest.raises(PlacementInvariantError):
        verify_capacity(two_by_two_scenario, {"c-001": "d-001", "c-002": "d-001"})


def test_reasons_describe_each_candidate(two_by_two_scenario) -> None:
    reasons = summarize_reasons(
        "baseline",
        two_by_two_scenario,
        {"c-001": "d-001", "c-002": None},
    )
    assert [reason.candidate_id for reason in reasons] == ["c-001", "c-002"]
    assert reasons[0].summary == "Assigned to First (choice #1)."
    assert reasons[0].assigned_department_id == "d-001"
    assert reasons[1].summary.startswith("Unassigned")
    assert reasons[1].algorithm == "baseline"


def test_reasons_flag_assignments_outside_preferences() -> None:
    scenario = build_scenario(
        candidates=[Candidate("c-001", "A", preferences=("d-001",), eligible_departments=("d-001", "d-002"))],
        departments=[Department("d-001", "First", 1), Department("d-002", "Second", 1)],
        priority={"d-001": ("c-001",), "d-002": ("c-001",)},
        preference_length=1,
    )
    reasons = summarize_reasons("deferred_acceptance", scenario, {"c-001": "d-002"})
    assert reasons[0].summary == "Assigned to Second (outside stated preferences)."
