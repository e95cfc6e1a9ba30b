"""Engine and store errors."""

from __future__ import annotations


class FitForgeError(Exception):
    """Base class for all engine errors."""


class ComputationInvariantViolation(FitForgeError):
    """A fatigue value fell outside [0, 100] and had to be clamped.

    Normally collected on results for observability; raised only when the
    policy runs with ``strict_invariants``.
    """

    def __init__(self, muscle: str, value: float, clamped: float, source: str):
        self.muscle = muscle
        self.value = value
        self.clamped = clamped
        self.source = source
        super().__init__(f"{source}: fatigue for {muscle} was {value!r}, clamped to {clamped}")


class WorkoutNotFoundError(FitForgeError):
    """A workout id passed to a delete does not exist in the store."""

    def __init__(self, workout_ids: list[int]):
        self.workout_ids = workout_ids
        super().__init__(f"Workout(s) not found: {', '.join(str(i) for i in workout_ids)}")
