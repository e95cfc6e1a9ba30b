"""Planned-workout forecast: projected fatigue and bottlenecks, nothing persisted."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from fitforge.core.enums import BottleneckSeverity, RecoveryStatus
from fitforge.schemas.base import EngineModel


class ForecastedMuscle(EngineModel):
    """One muscle before and after the planned workout.

    ``projected_fatigue`` is left unclamped so an overshoot stays visible;
    ``forecast_fatigue_percent`` is what the state would actually become.
    """

    muscle: str
    current_fatigue: float
    predicted_delta: float
    projected_fatigue: float
    forecast_fatigue_percent: float
    volume_added: float
    baseline: float
    status: RecoveryStatus


class Bottleneck(EngineModel):
    muscle: str
    severity: BottleneckSeverity
    projected_fatigue: float
    threshold: float


class WorkoutForecast(EngineModel):
    muscles: list[ForecastedMuscle] = Field(default_factory=list)
    bottlenecks: list[Bottleneck] = Field(default_factory=list)
    unmapped_exercises: list[str] = Field(default_factory=list)
    as_of: datetime

    @property
    def is_safe(self) -> bool:
        """No muscle would reach 100%."""
        return not any(b.severity == BottleneckSeverity.CRITICAL for b in self.bottlenecks)
