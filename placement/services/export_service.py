"""Tabular views of a simulation run for CSV export and notebooks."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from placement.domain.models import SimulationOutput
from placement.services.evaluation_service import rank_of
from placement.utils.logger import get_logger


logger = get_logger(__name__)

ASSIGNMENT_COLUMNS = [
    "candidate_id",
    "name",
    "preferences",
    "eligible_count",
    "baseline_department_id",
    "baseline_rank",
    "deferred_acceptance_department_id",
    "deferred_acceptance_rank",
]


def assignments_frame(output: SimulationOutput) -> pd.DataFrame:
    """One row per candidate with both placements side by side."""
    rows = []
    for candidate in output.scenario.candidates:
        row = {
            "candidate_id": candidate.candidate_id,
            "name": candidate.name,
            "preferences": " > ".join(candidate.preferences),
            "eligible_count": len(candidate.eligible_departments),
        }
        for result in output.results():
            department_id = result.assignments.get(candidate.candidate_id)
            row[f"{result.algorithm}_department_id"] = department_id
            row[f"{result.algorithm}_rank"] = rank_of(candidate, department_id)
        rows.append(row)

    frame = pd.DataFrame(rows, columns=ASSIGNMENT_COLUMNS)
    for column in ("baseline_rank", "deferred_acceptance_rank"):
        frame[column] = frame[column].astype("Int64")
    return frame


def departments_frame(output: SimulationOutput) -> pd.DataFrame:
    counts = {
        result.algorithm: pd.Series(
            [value for value in result.assignments.values() if value is not None],
            dtype="object",
        ).value_counts()
        for result in output.results()
    }
    frame = pd.DataFrame(
        [
            {
                "department_id": department.department_id,
                "name": department.name,
                "capacity": department.capacity,
            }
            for department in output.scenario.departments
        ]
    )
    for algorithm, series in counts.items():
        frame[algorithm] = (
            frame["department_id"].map(series).fillna(0).astype(int)
        )
    frame["diff"] = frame["deferred_acceptance"] - frame["baseline"]
    return frame


def metrics_frame(output: SimulationOutput) -> pd.DataFrame:
    rows = []
    for result in output.results():
        row = {"algorithm": result.algorithm, **result.metrics.to_api_dict()}
        for bin_ in result.histogram:
            row[bin_.label] = bin_.value
        rows.append(row)
    return pd.DataFrame(rows)


def export_simulation(output: SimulationOutput, directory: Path) -> dict[str, Path]:
    """Write assignments, departments and metrics CSVs; return their paths."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    prefix = f"seed_{output.scenario.config.seed}"
    frames = {
        "assignments": assignments_frame(output),
        "departments": departments_frame(output),
        "metrics": metrics_frame(output),
    }

    written: dict[str, Path] = {}
    for name, frame in frames.items():
        path = directory / f"{prefix}_{name}.csv"
        frame.to_csv(path, index=False)
        written[name] = path

    logger.info(
        "Simulation exported | directory=%s | files=%s",
        directory,
        sorted(path.name for path in written.values()),
    )
    return written
