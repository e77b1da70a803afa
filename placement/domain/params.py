"""Boundary DTO for raw simulation parameters (CLI flags, query strings)."""

from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from placement.domain.constraints import SimulationConfig, normalize_simulation_config


class SimulationConfigParams(BaseModel):
    """Raw, possibly partial parameters validated before normalization.

    Values that cannot be read as a finite number become `None` so the
    normalizer falls back to the default for that field. Both snake_case and
    camelCase keys are accepted.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    seed: Optional[float] = None
    candidate_count: Optional[float] = None
    department_count: Optional[float] = None
    min_capacity: Optional[float] = None
    max_capacity: Optional[float] = None
    preference_length: Optional[float] = None
    popularity_skew: Optional[float] = None
    aptitude_weight: Optional[float] = None
    constraint_rate: Optional[float] = None

    @field_validator("*", mode="before")
    @classmethod
    def parse_finite_number(cls, value: Any) -> Optional[float]:
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(number):
            return None
        return number

    def to_partial(self) -> dict[str, float]:
        return {
            key: value
            for key, value in self.model_dump().items()
            if value is not None
        }

    def to_config(self) -> SimulationConfig:
        return normalize_simulation_config(self.to_partial())
