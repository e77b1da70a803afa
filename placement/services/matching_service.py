"""Baseline (department-greedy) and deferred-acceptance placement."""

from __future__ import annotations

from collections import Counter, deque
from typing import Optional

from placement.domain.models import (
    ALGORITHM_BASELINE,
    ALGORITHM_DEFERRED_ACCEPTANCE,
    AssignmentReason,
    Placement,
    Scenario,
)
from placement.utils.logger import get_logger


logger = get_logger(__name__)

# Rank used for a candidate missing from a department's priority order.
UNRANKED = float("inf")


class PlacementInvariantError(Exception):
    """Raised when an allocator returns more candidates than a department can hold."""


def build_preference_rank_map(scenario: Scenario) -> dict[str, dict[str, int]]:
    """candidate_id -> department_id -> 1-based preference rank."""
    return {
        candidate.candidate_id: {
            department_id: index + 1
            for index, department_id in enumerate(candidate.preferences)
        }
        for candidate in scenario.candidates
    }


def build_department_rank_maps(scenario: Scenario) -> dict[str, dict[str, int]]:
    """department_id -> candidate_id -> 0-based priority position."""
    rank_maps: dict[str, dict[str, int]] = {}
    for department in scenario.departments:
        priority = scenario.department_priority.get(department.department_id, ())
        rank_maps[department.department_id] = {
            candidate_id: index for index, candidate_id in enumerate(priority)
        }
    return rank_maps


def _empty_placement(scenario: Scenario) -> Placement:
    return {candidate.candidate_id: None for candidate in scenario.candidates}


def verify_capacity(scenario: Scenario, assignments: Placement) -> None:
    counts = Counter(
        department_id for department_id in assignments.values() if department_id is not None
    )
    for department in scenario.departments:
        assigned = counts.get(department.department_id, 0)
        if assigned > department.capacity:
            raise PlacementInvariantError(
                f"department {department.department_id} holds {assigned} candidates "
                f"but capacity is {department.capacity}"
            )


def allocate_baseline(scenario: Scenario) -> Placement:
    """Fill departments one by one, in generation order, by blended score.

    Departments processed earlier pick first from the unassigned pool and
    nothing is revisited, so the result is neither optimal nor stable.
    """
    assignments = _empty_placement(scenario)
    unassigned = {candidate.candidate_id for candidate in scenario.candidates}
    preference_ranks = build_preference_rank_map(scenario)
    preference_length = scenario.config.preference_length
    aptitude_weight = scenario.config.aptitude_weight

    for department in scenario.departments:
        scored: list[tuple[str, float]] = []
        for candidate in scenario.candidates:
            if candidate.candidate_id not in unassigned:
                continue
            if not candidate.is_eligible(department.department_id):
                continue
            rank = preference_ranks[candidate.candidate_id].get(department.department_id)
            if rank is None:
                continue
            preference_score = (preference_length - rank + 1) / preference_length
            aptitude_score = scenario.aptitude[candidate.candidate_id][department.department_id]
            score = aptitude_weight * aptitude_score + (1 - aptitude_weight) * preference_score
            scored.append((candidate.candidate_id, score))

        scored.sort(key=lambda entry: (-entry[1], entry[0]))
        for candidate_id, _ in scored[: department.capacity]:
            assignments[candidate_id] = department.department_id
            unassigned.discard(candidate_id)

    verify_capacity(scenario, assignments)
    return assignments


def allocate_deferred_acceptance(scenario: Scenario) -> Placement:
    """Candidate-proposing deferred acceptance with department capacities.

    A proposal slot is consumed before the eligibility check, so an ineligible
    department at the head of a list costs the candidate that slot.
    """
    candidate_by_id = scenario.candidate_by_id()
    capacity_by_department = {
        department.department_id: department.capacity for department in scenario.departments
    }
    rank_maps = build_department_rank_maps(scenario)
    next_proposal = {candidate.candidate_id: 0 for candidate in scenario.candidates}
    holding: dict[str, list[str]] = {
        department.department_id: [] for department in scenario.departments
    }
    queue = deque(candidate.candidate_id for candidate in scenario.candidates)
    proposals = 0

    while queue:
        candidate_id = queue.popleft()
        candidate = candidate_by_id[candidate_id]
        index = next_proposal[candidate_id]
        if index >= len(candidate.preferences):
            continue

        target = candidate.preferences[index]
        next_proposal[candidate_id] = index + 1
        if not candidate.is_eligible(target):
            queue.append(candidate_id)
            continue

        proposals += 1
        rank_map = rank_maps.get(target, {})
        current = holding[target] + [candidate_id]
        current.sort(key=lambda held: (rank_map.get(held, UNRANKED), held))
        capacity = capacity_by_department.get(target, 0)
        holding[target] = current[:capacity]

        for rejected_id in current[capacity:]:
            if next_proposal[rejected_id] < len(candidate_by_id[rejected_id].preferences):
                queue.append(rejected_id)

    assignments = _empty_placement(scenario)
    for department_id, held in holding.items():
        for candidate_id in held:
            assignments[candidate_id] = department_id

    logger.debug(
        "Deferred acceptance converged | proposals=%s | assigned=%s",
        proposals,
        sum(1 for department_id in assignments.values() if department_id is not None),
    )
    verify_capacity(scenario, assignments)
    return assignments


def summarize_reasons(
    algorithm: str,
    scenario: Scenario,
    assignments: Placement,
) -> list[AssignmentReason]:
    """One human-readable explanation per candidate."""
    name_by_department = {
        department.department_id: department.name for department in scenario.departments
    }
    reasons: list[AssignmentReason] = []
    for candidate in scenario.candidates:
        assigned_id: Optional[str] = assignments.get(candidate.candidate_id)
        if assigned_id is None:
            summary = "Unassigned: no eligible choice was confirmed."
        else:
            name = name_by_department.get(assigned_id, assigned_id)
            if assigned_id in candidate.preferences:
                rank = candidate.preferences.index(assigned_id) + 1
                summary = f"Assigned to {name} (choice #{rank})."
            else:
                summary = f"Assigned to {name} (outside stated preferences)."
        reasons.append(
            AssignmentReason(
                candidate_id=candidate.candidate_id,
                algorithm=algorithm,
                assigned_department_id=assigned_id,
                summary=summary,
            )
        )
    return reasons


ALLOCATORS = {
    ALGORITHM_BASELINE: allocate_baseline,
    ALGORITHM_DEFERRED_ACCEPTANCE: allocate_deferred_acceptance,
}
