"""Muscle activation, fatigue state and baseline value objects."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from fitforge.core.enums import RecoveryStatus
from fitforge.schemas.base import EngineModel


class MuscleActivation(EngineModel):
    """How strongly an exercise works one muscle. Weights need not sum to 1."""

    muscle: str
    weight: float = Field(..., gt=0, le=1)


class MuscleState(EngineModel):
    """Stored fatigue snapshot: fatigue_percent as of last_trained."""

    muscle: str
    fatigue_percent: float = 0.0
    last_trained: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def cold(cls, muscle: str) -> MuscleState:
        """Default for a muscle with no stored state yet."""
        return cls(muscle=muscle)


class MuscleBaseline(EngineModel):
    """Reference volume a muscle is expected to handle in one session."""

    muscle: str
    system_learned_max: float = 0.0
    user_override: float | None = None
    updated_at: datetime | None = None

    @property
    def effective(self) -> float:
        # Override wins unconditionally, even when lower than the learned max.
        if self.user_override is not None:
            return self.user_override
        return self.system_learned_max


class MuscleReadiness(EngineModel):
    """Decayed readout of a muscle state at a point in time."""

    muscle: str
    fatigue_percent: float
    readiness: float
    ready: bool
    status: RecoveryStatus
    last_trained: datetime | None = None
    as_of: datetime


class MuscleStateResult(EngineModel):
    """Per-muscle outcome of applying a workout."""

    muscle: str
    previous_fatigue: float
    fatigue_delta: float
    fatigue_percent: float
    volume: float
    baseline: float
    exceeded_baseline: bool
    ready: bool
    last_trained: datetime


class RecoveryPoint(EngineModel):
    hours_from_now: int
    fatigue_percent: float
    status: RecoveryStatus


class RecoveryTimeline(EngineModel):
    muscle: str
    current: MuscleReadiness
    projections: list[RecoveryPoint]
    hours_until_ready: float | None
    hours_until_recovered: float | None


class BaselineSuggestion(EngineModel):
    """A muscle whose session volume beat its effective baseline."""

    muscle: str
    current_baseline: float
    volume_achieved: float
    suggested_baseline: float
    exceedance_percent: float
    exceedance_amount: float
    is_reasonable: bool
    reason: str
