from __future__ import annotations

import pytest

from placement.domain.models import Candidate, Department, Scenario

from scenario_builders import build_scenario


@pytest.fixture
def two_by_two_scenario() -> Scenario:
    """Both candidates want d-001 first; d-001 ranks c-002 first, d-002 ranks c-001 first."""
    both = ("d-001", "d-002")
    return build_scenario(
        candidates=[
            Candidate("c-001", "Candidate 001", preferences=both, eligible_departments=both),
            Candidate("c-002", "Candidate 002", preferences=both, eligible_departments=both),
        ],
        departments=[
            Department("d-001", "First", capacity=1),
            Department("d-002", "Second", capacity=1),
        ],
        priority={
            "d-001": ("c-002", "c-001"),
            "d-002": ("c-001", "c-002"),
        },
        aptitude={
            "c-001": {"d-001": 0.9, "d-002": 0.2},
            "c-002": {"d-001": 0.8, "d-002": 0.1},
        },
    )
