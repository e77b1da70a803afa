from __future__ import annotations

from dataclasses import replace

from placement.domain.constraints import DEFAULT_SIMULATION_CONFIG, normalize_simulation_config
from placement.services.generator import (
    DEPARTMENT_NAME_POOL,
    department_name,
    generate_scenario,
    popularity_weights,
)


def _small_config(**overrides):
    base = normalize_simulation_config({"candidate_count": 60, "department_count": 6})
    return replace(base, **overrides)


def test_same_config_generates_identical_scenarios() -> None:
    first = generate_scenario(DEFAULT_SIMULATION_CONFIG)
    second = generate_scenario(DEFAULT_SIMULATION_CONFIG)
    assert first == second


def test_different_seeds_generate_different_scenarios() -> None:
    first = generate_scenario(replace(DEFAULT_SIMULATION_CONFIG, seed=1))
    second = generate_scenario(replace(DEFAULT_SIMULATION_CONFIG, seed=2))
    assert first != second
    assert first.aptitude != second.aptitude


def test_default_scenario_shape() -> None:
    scenario = generate_scenario(DEFAULT_SIMULATION_CONFIG)
    assert len(scenario.candidates) == 120
    assert len(scenario.departments) == 8
    assert scenario.candidates[0].candidate_id == "c-001"
    assert scenario.candidates[-1].candidate_id == "c-120"
    assert scenario.departments[0].department_id == "d-001"
    assert scenario.departments[0].name == DEPARTMENT_NAME_POOL[0]


def test_capacities_within_configured_range() -> None:
    config = _small_config(min_capacity=3, max_capacity=7)
    scenario = generate_scenario(config)
    assert all(3 <= department.capacity <= 7 for department in scenario.departments)


def test_preferences_are_distinct_eligible_and_bounded() -> None:
    config = _small_config(constraint_rate=0.5, preference_length=4)
    scenario = generate_scenario(config)
    for candidate in scenario.candidates:
        assert candidate.eligible_departments
        assert len(set(candidate.preferences)) == len(candidate.preferences)
        assert set(candidate.preferences) <= set(candidate.eligible_departments)
        assert len(candidate.preferences) == min(4, len(candidate.eligible_departments))


def test_zero_constraint_rate_makes_everything_eligible() -> None:
    scenario = generate_scenario(_small_config(constraint_rate=0.0))
    department_ids = tuple(department.department_id for department in scenario.departments)
    assert all(candidate.eligible_departments == department_ids for candidate in scenario.candidates)


def test_feasibility_survives_extreme_constraint_rate() -> None:
    config = replace(
        DEFAULT_SIMULATION_CONFIG,
        candidate_count=10,
        department_count=4,
        preference_length=3,
        constraint_rate=0.99,
    )
    scenario = generate_scenario(config)
    assert all(len(candidate.eligible_departments) >= 1 for candidate in scenario.candidates)
    assert all(len(candidate.preferences) >= 1 for candidate in scenario.candidates)


def test_total_constraint_forces_exactly_one_eligible_department() -> None:
    scenario = generate_scenario(_small_config(constraint_rate=1.0))
    for candidate in scenario.candidates:
        assert len(candidate.eligible_departments) == 1
        assert candidate.preferences == candidate.eligible_departments


def test_aptitude_covers_every_pair_within_unit_interval() -> None:
    scenario = generate_scenario(_small_config())
    for candidate in scenario.candidates:
        row = scenario.aptitude[candidate.candidate_id]
        assert set(row) == {department.department_id for department in scenario.departments}
        assert all(0.0 <= value <= 1.0 for value in row.values())


def test_priority_is_a_strict_order_over_all_candidates() -> None:
    scenario = generate_scenario(_small_config())
    candidate_ids = sorted(candidate.candidate_id for candidate in scenario.candidates)
    for department in scenario.departments:
        priority = scenario.department_priority[department.department_id]
        assert sorted(priority) == candidate_ids


def test_popularity_decreases_with_rank_and_sharpens_with_skew() -> None:
    flat = popularity_weights(_small_config(popularity_skew=0.0))
    steep = popularity_weights(_small_config(popularity_skew=1.0))
    assert flat == sorted(flat, reverse=True)
    assert flat[0] == steep[0] == 1.0
    assert steep[-1] < flat[-1]


def test_skew_concentrates_first_choices_on_top_department() -> None:
    def top_department_share(skew: float) -> float:
        scenario = generate_scenario(
            _small_config(popularity_skew=skew, constraint_rate=0.0, candidate_count=200)
        )
        firsts = [candidate.preferences[0] for candidate in scenario.candidates]
        return firsts.count("d-001") / len(firsts)

    assert top_department_share(1.0) > top_department_share(0.0)


def test_department_names_fall_back_after_pool() -> None:
    assert department_name(len(DEPARTMENT_NAME_POOL)) == f"Department {len(DEPARTMENT_NAME_POOL) + 1}"
    scenario = generate_scenario(
        replace(DEFAULT_SIMULATION_CONFIG, candidate_count=5, department_count=32, preference_length=3)
    )
    assert scenario.departments[29].name == DEPARTMENT_NAME_POOL[29]
    assert scenario.departments[30].name == "Department 31"
    assert scenario.departments[31].name == "Department 32"
