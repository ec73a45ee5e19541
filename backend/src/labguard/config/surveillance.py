from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional, Set

from pydantic import BaseModel, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)

ENV_PREFIX = "LABGUARD_"

# Fields checked against each other rather than on their own.
PAIRED_FIELDS = (
    "min_baseline_weeks",
    "baseline_window_weeks",
    "medium_density_per_km2",
    "high_density_per_km2",
)


class SurveillancePolicy(BaseModel):
    """Tunable sensitivity of cluster and anomaly detection."""

    cluster_radius_km: float = Field(default=2.5, gt=0)
    min_cluster_size: int = Field(default=2, ge=2)
    min_radius_km: float = Field(default=0.5, gt=0)
    high_density_per_km2: float = Field(default=1.0, ge=0)
    medium_density_per_km2: float = Field(default=0.25, ge=0)
    min_weeks: int = Field(default=4, ge=2)
    baseline_window_weeks: int = Field(default=4, ge=1)
    min_baseline_weeks: int = Field(default=3, ge=1)
    z_threshold: float = Field(default=2.5, gt=0)
    std_floor: float = Field(default=1.0, gt=0)
    trend_slope_tolerance: float = Field(default=0.1, ge=0)

    @model_validator(mode="after")
    def _check_consistency(self) -> "SurveillancePolicy":
        if self.min_baseline_weeks > self.baseline_window_weeks:
            raise ValueError(
                f"min_baseline_weeks ({self.min_baseline_weeks}) exceeds "
                f"baseline_window_weeks ({self.baseline_window_weeks})"
            )
        if self.medium_density_per_km2 > self.high_density_per_km2:
            raise ValueError(
                f"medium_density_per_km2 ({self.medium_density_per_km2}) exceeds "
                f"high_density_per_km2 ({self.high_density_per_km2})"
            )
        return self


def load_surveillance_policy(
    environ: Optional[Dict[str, str]] = None,
    **overrides: Any,
) -> SurveillancePolicy:
    """
    Build a policy from defaults, ``LABGUARD_*`` environment variables and
    explicit keyword overrides, in that order of precedence (lowest first).

    Values that fail validation fall back to their defaults. When the
    settings are individually valid but contradict each other, every
    supplied value among the paired fields is dropped.
    """
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}
    for name in SurveillancePolicy.model_fields:
        raw = env.get(f"{ENV_PREFIX}{name.upper()}", "").strip()
        if raw:
            values[name] = raw
    values.update(overrides)

    while True:
        try:
            return SurveillancePolicy.model_validate(values)
        except ValidationError as exc:
            bad = _rejected_fields(exc, values)
            if not bad:
                raise
        logger.warning("Ignoring invalid surveillance settings: %s", ", ".join(sorted(bad)))
        values = {key: value for key, value in values.items() if key not in bad}


def _rejected_fields(exc: ValidationError, values: Dict[str, Any]) -> Set[str]:
    bad = {str(error["loc"][0]) for error in exc.errors() if error.get("loc")}
    if not bad:
        bad = {name for name in PAIRED_FIELDS if name in values}
    return bad
