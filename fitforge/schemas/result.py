"""Outbound "save result" and recompute payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import ConfigDict, Field

from fitforge.core.exceptions import ComputationInvariantViolation
from fitforge.schemas.base import EngineModel
from fitforge.schemas.muscle import BaselineSuggestion, MuscleBaseline, MuscleState, MuscleStateResult
from fitforge.schemas.personal_best import PersonalBest, PersonalBestChange, PRResult


class SaveResult(EngineModel):
    """Outcome of applying one completed workout.

    ``muscle_states``/``prs`` are the caller-facing result; the ``updated_*``
    fields are what the caller persists through the store.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    muscle_states: list[MuscleStateResult] = Field(default_factory=list)
    prs: list[PRResult] = Field(default_factory=list)
    updated_states: list[MuscleState] = Field(default_factory=list)
    updated_baselines: list[MuscleBaseline] = Field(default_factory=list)
    updated_personal_bests: list[PersonalBest] = Field(default_factory=list)
    baseline_suggestions: list[BaselineSuggestion] = Field(default_factory=list)
    skipped_sets: int = 0
    unmapped_exercises: list[str] = Field(default_factory=list)
    violations: list[ComputationInvariantViolation] = Field(default_factory=list, exclude=True)
    applied_at: datetime

    def to_payload(self) -> dict:
        return {
            "muscleStates": [s.to_payload() for s in self.muscle_states],
            "prs": [pr.to_payload() for pr in self.prs],
        }


class RecomputeResult(EngineModel):
    """State rebuilt from the remaining history after a bulk delete."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    muscle_states: list[MuscleState] = Field(default_factory=list)
    baselines: list[MuscleBaseline] = Field(default_factory=list)
    personal_bests: list[PersonalBest] = Field(default_factory=list)
    personal_best_changes: list[PersonalBestChange] = Field(default_factory=list)
    affected_muscles: list[str] = Field(default_factory=list)
    violations: list[ComputationInvariantViolation] = Field(default_factory=list, exclude=True)
