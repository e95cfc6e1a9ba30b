"""Ranked exercise suggestions for a target muscle."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from fitforge.core.enums import BottleneckSeverity
from fitforge.schemas.base import EngineModel


class RecommendationFactors(EngineModel):
    """Per-factor points; ``total`` is their sum (0-100)."""

    target_match: float
    freshness: float
    variety: float
    preference: float
    primary: float
    total: float


class ExerciseWarning(EngineModel):
    muscle: str
    severity: BottleneckSeverity
    current_fatigue: float
    projected_fatigue: float
    engagement: float
    added_volume: float
    baseline: float
    message: str


class ExerciseRecommendation(EngineModel):
    exercise_id: str
    category: str | None = None
    score: float
    is_safe: bool
    warnings: list[ExerciseWarning] = Field(default_factory=list)
    factors: RecommendationFactors


class ExerciseRecommendations(EngineModel):
    """Safe picks best first; unsafe ones score 0 and are listed separately."""

    target_muscle: str
    safe: list[ExerciseRecommendation] = Field(default_factory=list)
    unsafe: list[ExerciseRecommendation] = Field(default_factory=list)
    total_filtered: int = 0
    as_of: datetime
