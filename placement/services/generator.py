"""Seeded synthetic scenario generation.

Draw order is part of the contract: departments come from their own stream,
then the main stream is consumed by aptitude, eligibility/preferences and
department priority, in that order. Reordering any loop changes every
scenario produced for a given seed.
"""

from __future__ import annotations

from placement.domain.constraints import SimulationConfig, clamp
from placement.domain.models import Candidate, Department, Scenario
from placement.services.random_source import SeededRandom
from placement.utils.logger import get_logger


logger = get_logger(__name__)

DEPARTMENT_STREAM_SALT = 0xABC12345

DEPARTMENT_NAME_POOL = (
    "Sales",
    "AI Development",
    "Finance",
    "Human Resources",
    "Operations",
    "Platform Engineering",
    "Internal Consulting",
    "R&D",
    "Legal",
    "Marketing",
    "Security",
    "Corporate Planning",
    "Data Analytics",
    "Quality Assurance",
    "Customer Success",
    "Global Expansion",
    "Procurement",
    "Public Relations",
    "Design",
    "New Business",
    "Business Transformation",
    "Audit",
    "Logistics",
    "Production Control",
    "Training",
    "Information Systems",
    "Purchasing",
    "General Affairs",
    "Research",
    "Business Administration",
)


def department_name(index: int) -> str:
    if 0 <= index < len(DEPARTMENT_NAME_POOL):
        return DEPARTMENT_NAME_POOL[index]
    return f"Department {index + 1}"


def _department_id(index: int) -> str:
    return f"d-{index + 1:03d}"


def _candidate_id(index: int) -> str:
    return f"c-{index + 1:03d}"


def build_departments(config: SimulationConfig) -> list[Department]:
    random = SeededRandom(config.seed ^ DEPARTMENT_STREAM_SALT)
    return [
        Department(
            department_id=_department_id(index),
            name=department_name(index),
            capacity=random.randint(config.min_capacity, config.max_capacity),
        )
        for index in range(config.department_count)
    ]


def popularity_weights(config: SimulationConfig) -> list[float]:
    """Rank-based power law; rank 1 is the first department."""
    exponent = 1.0 + config.popularity_skew * 1.5
    return [1.0 / (rank ** exponent) for rank in range(1, config.department_count + 1)]


def _build_aptitude(
    random: SeededRandom,
    candidate_ids: list[str],
    departments: list[Department],
) -> dict[str, dict[str, float]]:
    aptitude: dict[str, dict[str, float]] = {}
    for candidate_id in candidate_ids:
        strength = random.next()
        row: dict[str, float] = {}
        for department in departments:
            affinity = random.next()
            row[department.department_id] = round(
                clamp(strength * 0.5 + affinity * 0.5, 0.0, 1.0), 6
            )
        aptitude[candidate_id] = row
    return aptitude


def _draw_eligibility(
    random: SeededRandom,
    departments: list[Department],
    constraint_rate: float,
) -> tuple[str, ...]:
    eligible = tuple(
        department.department_id
        for department in departments
        if random.next() > constraint_rate
    )
    if eligible:
        return eligible
    fallback = departments[random.randint(0, len(departments) - 1)]
    return (fallback.department_id,)


def _draw_preferences(
    random: SeededRandom,
    eligible: tuple[str, ...],
    weight_by_department: dict[str, float],
    preference_length: int,
) -> tuple[str, ...]:
    """Sequential weighted draws without replacement; draw order is rank order."""
    count = max(1, min(preference_length, len(eligible)))
    remaining = list(eligible)
    chosen: list[str] = []
    for _ in range(count):
        index = random.weighted_index(
            [weight_by_department[department_id] for department_id in remaining]
        )
        chosen.append(remaining.pop(index))
    return tuple(chosen)


def _build_priority(
    random: SeededRandom,
    candidate_ids: list[str],
    departments: list[Department],
    aptitude: dict[str, dict[str, float]],
) -> dict[str, tuple[str, ...]]:
    priority: dict[str, tuple[str, ...]] = {}
    for department in departments:
        scored = []
        for candidate_id in candidate_ids:
            noise = random.next() * 0.15
            score = aptitude[candidate_id][department.department_id] * 0.85 + noise
            scored.append((candidate_id, score))
        scored.sort(key=lambda entry: (-entry[1], entry[0]))
        priority[department.department_id] = tuple(candidate_id for candidate_id, _ in scored)
    return priority


def generate_scenario(config: SimulationConfig) -> Scenario:
    """Materialize a full scenario from an already-normalized config.

    Every candidate ends up with at least one eligible department and one
    preference, whatever the constraint rate.
    """
    random = SeededRandom(config.seed)
    departments = build_departments(config)
    candidate_ids = [_candidate_id(index) for index in range(config.candidate_count)]
    popularity = popularity_weights(config)

    aptitude = _build_aptitude(random, candidate_ids, departments)

    candidates: list[Candidate] = []
    single_eligibility = 0
    for index, candidate_id in enumerate(candidate_ids):
        eligible = _draw_eligibility(random, departments, config.constraint_rate)
        if len(eligible) == 1:
            single_eligibility += 1
        weight_by_department = {
            department.department_id: clamp(
                popularity[position] * 0.8 + aptitude[candidate_id][department.department_id] * 0.6,
                0.0,
                10.0,
            )
            for position, department in enumerate(departments)
        }
        preferences = _draw_preferences(
            random,
            eligible,
            weight_by_department,
            config.preference_length,
        )
        candidates.append(
            Candidate(
                candidate_id=candidate_id,
                name=f"Candidate {index + 1:03d}",
                preferences=preferences,
                eligible_departments=eligible,
            )
        )

    department_priority = _build_priority(random, candidate_ids, departments, aptitude)

    logger.debug(
        (
            "Scenario generated | seed=%s | candidates=%s | departments=%s | "
            "total_capacity=%s | single_eligibility_candidates=%s"
        ),
        config.seed,
        len(candidates),
        len(departments),
        sum(department.capacity for department in departments),
        single_eligibility,
    )
    return Scenario(
        config=config,
        departments=departments,
        candidates=candidates,
        aptitude=aptitude,
        department_priority=department_priority,
    )
