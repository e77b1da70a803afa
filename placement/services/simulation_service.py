"""Baseline vs deferred-acceptance comparison runs, fully in memory.

A run is a pure function of its configuration: generate one scenario, place
candidates with both policies, score each placement. Nothing is persisted and
no state is shared between runs, so sweeps are just repeated calls.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import replace
from typing import Any, Iterable, Mapping, Optional, Union
from uuid import uuid4

from placement.domain.constraints import (
    DEFAULT_SIMULATION_CONFIG,
    SimulationConfig,
    normalize_simulation_config,
)
from placement.domain.models import (
    ALGORITHM_BASELINE,
    ALGORITHM_DEFERRED_ACCEPTANCE,
    PlacementResult,
    Scenario,
    SimulationOutput,
)
from placement.domain.params import SimulationConfigParams
from placement.services.evaluation_service import evaluate_placement
from placement.services.generator import generate_scenario
from placement.services.matching_service import ALLOCATORS, summarize_reasons
from placement.utils.config import Settings, get_settings
from placement.utils.logger import get_logger


logger = get_logger(__name__)

ConfigInput = Union[SimulationConfig, SimulationConfigParams, Mapping[str, Any], None]

# Metrics where a smaller value is the better outcome.
LOWER_IS_BETTER = frozenset({"average_rank", "blocking_pairs"})


class SimulationValidationError(Exception):
    """Raised when orchestration inputs (not simulation configs) are unusable."""


def resolve_config(config: ConfigInput) -> SimulationConfig:
    """Turn any accepted config shape into a `SimulationConfig`.

    A `SimulationConfig` is passed through untouched so callers can run
    scenarios outside the normalized ranges on purpose.
    """
    if isinstance(config, SimulationConfig):
        return config
    if isinstance(config, SimulationConfigParams):
        return config.to_config()
    return normalize_simulation_config(config)


def score_placement(
    algorithm: str,
    scenario: Scenario,
) -> PlacementResult:
    assignments = ALLOCATORS[algorithm](scenario)
    metrics, histogram = evaluate_placement(scenario, assignments)
    return PlacementResult(
        algorithm=algorithm,
        assignments=assignments,
        reasons=summarize_reasons(algorithm, scenario, assignments),
        metrics=metrics,
        histogram=histogram,
    )


def run_scenario(scenario: Scenario) -> SimulationOutput:
    """Run both policies against an existing scenario (e.g. a hand-built fixture)."""
    return SimulationOutput(
        scenario=scenario,
        baseline=score_placement(ALGORITHM_BASELINE, scenario),
        deferred_acceptance=score_placement(ALGORITHM_DEFERRED_ACCEPTANCE, scenario),
    )


class SimulationService:
    """Runs deterministic baseline vs deferred-acceptance comparisons."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    def run_simulation(self, config: ConfigInput = None) -> SimulationOutput:
        resolved = resolve_config(config)
        run_id = str(uuid4())
        logger.info(
            (
                "Simulation run started | run_id=%s | seed=%s | candidates=%s | "
                "departments=%s | preference_length=%s | constraint_rate=%.3f"
            ),
            run_id,
            resolved.seed,
            resolved.candidate_count,
            resolved.department_count,
            resolved.preference_length,
            resolved.constraint_rate,
        )

        output = run_scenario(generate_scenario(resolved))

        logger.info(
            (
                "Simulation run completed | run_id=%s | baseline_first_choice=%.4f | "
                "da_first_choice=%.4f | baseline_blocking_pairs=%s | da_blocking_pairs=%s"
            ),
            run_id,
            output.baseline.metrics.first_choice_rate,
            output.deferred_acceptance.metrics.first_choice_rate,
            output.baseline.metrics.blocking_pairs,
            output.deferred_acceptance.metrics.blocking_pairs,
        )
        if output.deferred_acceptance.metrics.blocking_pairs:
            logger.warning(
                "Deferred acceptance placement is not stable | run_id=%s | blocking_pairs=%s",
                run_id,
                output.deferred_acceptance.metrics.blocking_pairs,
            )
        return output

    def run_default_simulation(self) -> SimulationOutput:
        return self.run_simulation(DEFAULT_SIMULATION_CONFIG)

    def compare_results(self, output: SimulationOutput) -> dict[str, list[dict[str, Any]]]:
        """Side-by-side view of both placements, deltas taken as DA minus baseline."""
        baseline = output.baseline
        deferred = output.deferred_acceptance
        scenario = output.scenario

        baseline_metrics = baseline.metrics.to_api_dict()
        deferred_metrics = deferred.metrics.to_api_dict()
        metric_rows = []
        for key, baseline_value in baseline_metrics.items():
            deferred_value = deferred_metrics[key]
            if key in LOWER_IS_BETTER:
                better = deferred_value < baseline_value
            else:
                better = deferred_value > baseline_value
            metric_rows.append(
                {
                    "metric": key,
                    "baseline": baseline_value,
                    "deferred_acceptance": deferred_value,
                    "delta": deferred_value - baseline_value,
                    "deferred_acceptance_better": better,
                }
            )

        deferred_bins = {bin_.label: bin_.value for bin_ in deferred.histogram}
        histogram_rows = [
            {
                "label": bin_.label,
                "baseline": bin_.value,
                "deferred_acceptance": deferred_bins.get(bin_.label, 0),
            }
            for bin_ in baseline.histogram
        ]

        baseline_counts = Counter(v for v in baseline.assignments.values() if v is not None)
        deferred_counts = Counter(v for v in deferred.assignments.values() if v is not None)
        department_rows = [
            {
                "department_id": department.department_id,
                "name": department.name,
                "capacity": department.capacity,
                "baseline": baseline_counts.get(department.department_id, 0),
                "deferred_acceptance": deferred_counts.get(department.department_id, 0),
                "diff": (
                    deferred_counts.get(department.department_id, 0)
                    - baseline_counts.get(department.department_id, 0)
                ),
            }
            for department in scenario.departments
        ]

        baseline_reasons = {reason.candidate_id: reason.summary for reason in baseline.reasons}
        deferred_reasons = {reason.candidate_id: reason.summary for reason in deferred.reasons}
        changed_rows = []
        for candidate in scenario.candidates:
            before = baseline.assignments.get(candidate.candidate_id)
            after = deferred.assignments.get(candidate.candidate_id)
            if before == after:
                continue
            changed_rows.append(
                {
                    "candidate_id": candidate.candidate_id,
                    "name": candidate.name,
                    "baseline": before,
                    "deferred_acceptance": after,
                    "baseline_reason": baseline_reasons.get(candidate.candidate_id, ""),
                    "deferred_acceptance_reason": deferred_reasons.get(candidate.candidate_id, ""),
                }
            )
            if len(changed_rows) >= self._settings.comparison_changed_limit:
                break

        return {
            "metrics": metric_rows,
            "histogram": histogram_rows,
            "departments": department_rows,
            "changed_candidates": changed_rows,
        }

    def run_seed_sweep(
        self,
        seeds: Iterable[int],
        overrides: ConfigInput = None,
    ) -> list[dict[str, Any]]:
        """One summary row per seed; every other field comes from `overrides`."""
        seed_list = list(seeds)
        if not seed_list:
            raise SimulationValidationError("seed sweep requires at least one seed")
        if len(seed_list) > self._settings.sweep_max_runs:
            raise SimulationValidationError(
                f"seed sweep is limited to {self._settings.sweep_max_runs} runs, "
                f"got {len(seed_list)}"
            )

        base = resolve_config(overrides)
        rows: list[dict[str, Any]] = []
        for seed in seed_list:
            seeded = replace(base, seed=normalize_simulation_config({"seed": seed}).seed)
            output = self.run_simulation(seeded)
            row: dict[str, Any] = {"seed": seeded.seed}
            for result in output.results():
                for key, value in result.metrics.to_api_dict().items():
                    row[f"{result.algorithm}_{key}"] = value
            rows.append(row)

        logger.info(
            "Seed sweep completed | runs=%s | first_seed=%s | last_seed=%s",
            len(rows),
            rows[0]["seed"],
            rows[-1]["seed"],
        )
        return rows
