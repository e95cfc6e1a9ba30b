"""Logged sets and workouts, in the payload shape the engine consumes."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from fitforge.schemas.base import EngineModel


class SetEntry(EngineModel):
    """One performed set. Never mutated once logged.

    Out-of-range values are accepted here on purpose: the engine skips
    invalid sets instead of rejecting a whole workout.
    """

    weight: float = 0.0
    reps: int = 0
    completed: bool = True
    to_failure: bool = False
    set_number: int = 0
    performed_at: datetime | None = None

    @property
    def is_valid(self) -> bool:
        return self.weight >= 0 and self.reps > 0

    @property
    def counts(self) -> bool:
        """Completed and well-formed: the only sets that feed fatigue and PRs."""
        return self.completed and self.is_valid

    @property
    def volume(self) -> float:
        return float(self.weight) * int(self.reps) if self.counts else 0.0


class ExerciseEntry(EngineModel):
    exercise_id: str
    sets: list[SetEntry] = Field(default_factory=list)

    @property
    def counted_sets(self) -> list[SetEntry]:
        return [s for s in self.sets if s.counts]

    @property
    def total_volume(self) -> float:
        return sum(s.volume for s in self.counted_sets)


class CompletedWorkout(EngineModel):
    """Inbound "apply a completed workout" payload."""

    exercises: list[ExerciseEntry] = Field(default_factory=list)
    category: str | None = None
    variation: str | None = None
    template_id: int | None = None
    performed_at: datetime | None = None


class WorkoutLog(CompletedWorkout):
    """A workout as persisted by the store (id and timestamp assigned)."""

    id: int
    performed_at: datetime
