"""Workout template and variation analysis schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from fitforge.schemas.base import EngineModel


class WorkoutTemplate(EngineModel):
    """Saved workout structure: a category/variation with ordered exercises."""

    id: int | None = None
    name: str = Field(..., min_length=1, max_length=255)
    category: str
    variation: str
    exercise_ids: list[str] = Field(default_factory=list)
    times_used: int = 0
    is_favorite: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_used_at: datetime | None = None


class VariationStats(EngineModel):
    """Everything known about one (category, variation) group."""

    category: str
    variation: str
    template_names: list[str]
    exercise_ids: list[str]
    primary_muscles: list[str]
    last_used_at: datetime | None
    days_since_last_use: float | None  # None = never used
    mean_readiness: float
    ready: bool
    times_used: int
    is_favorite: bool
    sessions: int
    average_volume: float
    average_set_count: float
    muscle_engagements: dict[str, float]
    coverage: int
    balance: int
    gaps: list[str]
    overlaps: list[str]


class TemplateAnalysis(EngineModel):
    category: str
    variations: list[VariationStats]
    recommended_variation: str | None
    reason: str | None = None


class VariationComparison(EngineModel):
    """Trend deltas between two variations (b minus a). Informational only."""

    category: str
    variation_a: str
    variation_b: str
    average_volume_delta: float
    set_count_delta: float
    recovery_hours_a: float
    recovery_hours_b: float
    recovery_hours_delta: float
    complementarity: int
    differences: dict[str, float]
    summary: str
