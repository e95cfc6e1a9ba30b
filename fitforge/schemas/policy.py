"""Fatigue / recovery policy passed into the pure engine functions."""

from pydantic import BaseModel, ConfigDict, Field

from fitforge.core.enums import DecayCurve


class FatiguePolicy(BaseModel):
    """Curve shape and thresholds. Defaults match ``Settings`` defaults."""

    model_config = ConfigDict(frozen=True)

    readiness_threshold: float = Field(40.0, ge=0, le=100)
    caution_threshold: float = Field(80.0, ge=0, le=100)
    decay_curve: DecayCurve = DecayCurve.LINEAR
    recovery_days_to_full: float = Field(5.0, gt=0)
    recovery_half_life_hours: float = Field(36.0, gt=0)
    failure_multiplier: float = Field(1.25, ge=1.0)
    default_baseline_volume: float = Field(10000.0, gt=0)
    primary_activation_threshold: float = Field(0.5, gt=0, le=1)
    strict_invariants: bool = False
