"""Satisfaction and stability scoring for a placement."""

from __future__ import annotations

from collections import defaultdict
from typing import Optional

from placement.domain.models import (
    Candidate,
    HistogramBin,
    Placement,
    PlacementMetrics,
    Scenario,
)
from placement.services.matching_service import UNRANKED, build_department_rank_maps


HISTOGRAM_LABELS = (
    "1st choice",
    "2nd choice",
    "3rd choice",
    "4th choice or lower",
    "Unassigned",
)


def rank_of(candidate: Candidate, department_id: Optional[str]) -> Optional[int]:
    """1-based position of `department_id` in the candidate's list.

    Returns None when unassigned or assigned outside the stated list.
    """
    if department_id is None:
        return None
    try:
        return candidate.preferences.index(department_id) + 1
    except ValueError:
        return None


def count_blocking_pairs(scenario: Scenario, assignments: Placement) -> int:
    """Count (candidate, department) pairs that would both rather deviate.

    A candidate may contribute several pairs, one per preferred department
    that would take it.
    """
    holders: dict[str, list[str]] = defaultdict(list)
    for candidate_id, department_id in assignments.items():
        if department_id is not None:
            holders[department_id].append(candidate_id)

    capacity_by_department = {
        department.department_id: department.capacity for department in scenario.departments
    }
    rank_maps = build_department_rank_maps(scenario)

    blocking_pairs = 0
    for candidate in scenario.candidates:
        current_rank = rank_of(candidate, assignments.get(candidate.candidate_id))
        for index, preferred_id in enumerate(candidate.preferences):
            if current_rank is not None and index + 1 >= current_rank:
                break
            if not candidate.is_eligible(preferred_id):
                continue

            current_holders = holders.get(preferred_id, [])
            if len(current_holders) < capacity_by_department.get(preferred_id, 0):
                blocking_pairs += 1
                continue

            rank_map = rank_maps.get(preferred_id, {})
            candidate_rank = rank_map.get(candidate.candidate_id, UNRANKED)
            worst_holder_rank = max(
                (rank_map.get(holder, UNRANKED) for holder in current_holders),
                default=-1,
            )
            if candidate_rank < worst_holder_rank:
                blocking_pairs += 1
    return blocking_pairs


def build_histogram(ranks: list[Optional[int]]) -> list[HistogramBin]:
    counts = [0, 0, 0, 0, 0]
    for rank in ranks:
        if rank is None:
            counts[4] += 1
        else:
            counts[min(rank, 4) - 1] += 1
    return [HistogramBin(label=label, value=value) for label, value in zip(HISTOGRAM_LABELS, counts)]


def evaluate_placement(
    scenario: Scenario,
    assignments: Placement,
) -> tuple[PlacementMetrics, list[HistogramBin]]:
    ranks = [
        rank_of(candidate, assignments.get(candidate.candidate_id))
        for candidate in scenario.candidates
    ]
    assigned_ranks = [rank for rank in ranks if rank is not None]
    candidate_count = len(scenario.candidates)

    first_choice = sum(1 for rank in assigned_ranks if rank == 1)
    top3 = sum(1 for rank in assigned_ranks if rank <= 3)
    average_rank = sum(assigned_ranks) / len(assigned_ranks) if assigned_ranks else 0.0

    metrics = PlacementMetrics(
        first_choice_rate=first_choice / candidate_count if candidate_count else 0.0,
        top3_rate=top3 / candidate_count if candidate_count else 0.0,
        average_rank=round(average_rank, 4),
        blocking_pairs=count_blocking_pairs(scenario, assignments),
    )
    return metrics, build_histogram(ranks)
