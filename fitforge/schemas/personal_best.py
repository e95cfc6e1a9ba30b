"""Personal best records and PR detection results."""

from __future__ import annotations

from datetime import datetime

from fitforge.schemas.base import EngineModel


class PersonalBest(EngineModel):
    """Best session volume (and best single set) ever recorded for an exercise."""

    exercise_id: str
    best_session_volume: float
    best_single_set: float = 0.0
    achieved_at: datetime | None = None
    updated_at: datetime | None = None


class PRResult(EngineModel):
    """A new record. ``percent_increase`` is omitted on the first occurrence."""

    exercise: str
    is_first_time: bool
    new_volume: float
    previous_volume: float | None = None
    percent_increase: int | None = None
    personal_best: PersonalBest

    def to_payload(self) -> dict:
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            include={"exercise", "is_first_time", "new_volume", "percent_increase"},
        )


class PersonalBestChange(EngineModel):
    """Before/after of one exercise's record after a history rebuild."""

    exercise_id: str
    old_best_session_volume: float | None
    new_best_session_volume: float | None
    old_best_single_set: float | None
    new_best_single_set: float | None
