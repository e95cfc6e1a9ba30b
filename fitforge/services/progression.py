"""Progressive overload suggestions: +step% weight or +step% reps, alternating methods."""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import datetime

from fitforge.core.enums import ProgressionMethod
from fitforge.schemas.progression import Performance, ProgressionOption, ProgressionSuggestion
from fitforge.schemas.workout import CompletedWorkout
from fitforge.services.exercise_mapping import normalize_exercise_id
from fitforge.services.fatigue import as_utc, hours_between


def detect_method(last: Performance, previous: Performance | None) -> ProgressionMethod:
    """Weight up with reps unchanged, or reps up with weight unchanged; anything else is NONE."""
    if previous is None:
        return ProgressionMethod.NONE
    if last.weight > previous.weight and last.reps == previous.reps:
        return ProgressionMethod.WEIGHT
    if last.reps > previous.reps and last.weight == previous.weight:
        return ProgressionMethod.REPS
    return ProgressionMethod.NONE


def suggest_progression(
    last: Performance,
    previous: Performance | None,
    as_of: datetime,
    step_percent: float = 3.0,
) -> ProgressionSuggestion:
    factor = 1 + step_percent / 100
    last_method = detect_method(last, previous)
    # Alternate from whatever worked last; reps by default (easier on joints).
    suggested = ProgressionMethod.REPS if last_method != ProgressionMethod.REPS else ProgressionMethod.WEIGHT
    return ProgressionSuggestion(
        last_performance=last,
        last_method=last_method,
        weight_option=ProgressionOption(
            weight=float(round(last.weight * factor)), reps=last.reps, method=ProgressionMethod.WEIGHT
        ),
        reps_option=ProgressionOption(
            weight=last.weight, reps=math.ceil(last.reps * factor), method=ProgressionMethod.REPS
        ),
        suggested=suggested,
        days_ago=round(hours_between(last.performed_at, as_of) / 24),
    )


def recent_performances(
    workouts: Iterable[CompletedWorkout],
    exercise_id: str,
    limit: int = 2,
) -> list[Performance]:
    """Most recent first: the heaviest completed set (ties: most reps) of each session."""
    key = normalize_exercise_id(exercise_id)
    found = []
    for workout in workouts:
        if workout.performed_at is None:
            continue
        sets = [
            s
            for exercise in workout.exercises
            if normalize_exercise_id(exercise.exercise_id) == key
            for s in exercise.counted_sets
        ]
        if not sets:
            continue
        top = max(sets, key=lambda s: (s.weight, s.reps))
        found.append(Performance(weight=top.weight, reps=top.reps, performed_at=workout.performed_at))
    found.sort(key=lambda p: as_utc(p.performed_at), reverse=True)
    return found[:limit]


def progression_for(
    workouts: Iterable[CompletedWorkout],
    exercise_id: str,
    as_of: datetime,
    step_percent: float = 3.0,
) -> ProgressionSuggestion | None:
    """None when the exercise has never been performed."""
    recent = recent_performances(workouts, exercise_id)
    if not recent:
        return None
    previous = recent[1] if len(recent) > 1 else None
    return suggest_progression(recent[0], previous, as_of, step_percent)
