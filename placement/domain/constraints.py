"""Simulation configuration and its permissive normalization rules."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class SimulationConfig:
    seed: int
    candidate_count: int
    department_count: int
    min_capacity: int
    max_capacity: int
    preference_length: int
    popularity_skew: float
    aptitude_weight: float
    constraint_rate: float

    def to_api_dict(self) -> dict[str, float | int]:
        return asdict(self)


DEFAULT_SIMULATION_CONFIG = SimulationConfig(
    seed=20260211,
    candidate_count=120,
    department_count=8,
    min_capacity=10,
    max_capacity=18,
    preference_length=5,
    popularity_skew=0.65,
    aptitude_weight=0.6,
    constraint_rate=0.12,
)

SEED_RANGE = (1, 99_999_999)
CANDIDATE_COUNT_RANGE = (50, 300)
DEPARTMENT_COUNT_RANGE = (5, 30)
MIN_CAPACITY_RANGE = (1, 60)
MAX_CAPACITY_CEILING = 80
CONSTRAINT_RATE_CEILING = 0.7

_CONFIG_FIELDS = frozenset(field.name for field in fields(SimulationConfig))


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def _to_int(value: float, lower: int, upper: int) -> int:
    # Half-up rounding after clamping; the bounds are integers so the result stays in range.
    return int(math.floor(clamp(value, lower, upper) + 0.5))


def _coerce_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


def merge_with_defaults(
    partial: Optional[Mapping[str, Any]],
    defaults: SimulationConfig = DEFAULT_SIMULATION_CONFIG,
) -> dict[str, float]:
    """Overlay usable numeric entries of `partial` on `defaults`.

    Unknown keys, `None`, NaN and values that are not numbers are ignored.
    """
    merged: dict[str, float] = dict(asdict(defaults))
    for key, value in (partial or {}).items():
        if key not in _CONFIG_FIELDS:
            continue
        number = _coerce_number(value)
        if number is not None:
            merged[key] = number
    return merged


def normalize_simulation_config(
    partial: Optional[Mapping[str, Any]] = None,
) -> SimulationConfig:
    """Return a fully valid config; out-of-range input is clamped, never rejected.

    Dependent bounds are resolved in order: `max_capacity` clamps against the
    normalized `min_capacity`, and `preference_length` against the normalized
    `department_count`.
    """
    merged = merge_with_defaults(partial)

    candidate_count = _to_int(merged["candidate_count"], *CANDIDATE_COUNT_RANGE)
    department_count = _to_int(merged["department_count"], *DEPARTMENT_COUNT_RANGE)
    min_capacity = _to_int(merged["min_capacity"], *MIN_CAPACITY_RANGE)
    max_capacity = _to_int(merged["max_capacity"], min_capacity, MAX_CAPACITY_CEILING)
    preference_length = _to_int(merged["preference_length"], 1, department_count)

    return SimulationConfig(
        seed=_to_int(merged["seed"], *SEED_RANGE),
        candidate_count=candidate_count,
        department_count=department_count,
        min_capacity=min_capacity,
        max_capacity=max_capacity,
        preference_length=preference_length,
        popularity_skew=float(clamp(merged["popularity_skew"], 0.0, 1.0)),
        aptitude_weight=float(clamp(merged["aptitude_weight"], 0.0, 1.0)),
        constraint_rate=float(clamp(merged["constraint_rate"], 0.0, CONSTRAINT_RATE_CEILING)),
    )
