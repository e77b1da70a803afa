"""Runtime settings for the placement simulator."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Process-level knobs that are not part of a simulation configuration.

    Simulation inputs live in `SimulationConfig`; this object only carries
    logging, export and orchestration limits so tests can swap them with
    `dataclasses.replace`.
    """

    app_name: str
    app_version: str
    log_level: str
    export_directory: Path
    sweep_max_runs: int
    comparison_changed_limit: int


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(
        app_name=os.getenv("PLACEMENT_APP_NAME", "Placement Simulator"),
        app_version=os.getenv("PLACEMENT_APP_VERSION", "0.1.0"),
        log_level=os.getenv("PLACEMENT_LOG_LEVEL", "INFO"),
        export_directory=Path(os.getenv("PLACEMENT_EXPORT_DIR", "exports")),
        sweep_max_runs=_env_int("PLACEMENT_SWEEP_MAX_RUNS", 200),
        comparison_changed_limit=_env_int("PLACEMENT_COMPARISON_CHANGED_LIMIT", 8),
    )
