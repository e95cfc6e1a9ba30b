"""Per-muscle baselines: learned session maximums, user overrides, update suggestions.

The system-learned maximum is the largest single-session volume a muscle has
handled (set volume × activation, summed over the session's completed sets).
The engine seeds it with the default baseline volume, so a cold muscle is
normalized against the same reference on its first and later sessions until
one of them beats it. It only grows as workouts are logged;
``rebuild_baselines`` is the one place it may go down. A user override always
wins over the learned value.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import datetime

from fitforge.schemas.muscle import BaselineSuggestion, MuscleBaseline
from fitforge.schemas.workout import CompletedWorkout, ExerciseEntry
from fitforge.services.exercise_mapping import ExerciseMapping

logger = logging.getLogger(__name__)

DEFAULT_MAX_INCREASE_PERCENT = 50.0


def effective_baseline(baseline: MuscleBaseline | None, default: float) -> float:
    """Override, else learned max, else ``default`` for a cold start."""
    if baseline is None:
        return default
    value = baseline.effective
    return value if value and value > 0 else default


def session_muscle_volumes(exercises: Iterable[ExerciseEntry], mapping: ExerciseMapping) -> dict[str, float]:
    """Volume each muscle handled in one session."""
    volumes: dict[str, float] = {}
    for exercise in exercises:
        total = exercise.total_volume
        if total <= 0:
            continue
        for activation in mapping.muscles_for(exercise.exercise_id):
            volumes[activation.muscle] = volumes.get(activation.muscle, 0.0) + total * activation.weight
    return volumes


def learn_baselines(
    current: Mapping[str, MuscleBaseline],
    session_volumes: Mapping[str, float],
    at: datetime,
    seed: float = 0.0,
) -> dict[str, MuscleBaseline]:
    """Baselines that changed because of this session (only those).

    A muscle seen for the first time starts at ``seed``; the learned max then
    only rises when a session beats it.
    """
    updated: dict[str, MuscleBaseline] = {}
    for muscle, volume in session_volumes.items():
        baseline = current.get(muscle)
        if baseline is None:
            baseline = MuscleBaseline(muscle=muscle, system_learned_max=seed, updated_at=at)
            updated[muscle] = baseline
        if volume > max(baseline.system_learned_max, seed):
            updated[muscle] = baseline.model_copy(
                update={"system_learned_max": round(volume, 2), "updated_at": at}
            )
    return updated


def rebuild_baselines(
    workouts: Iterable[CompletedWorkout],
    current: Mapping[str, MuscleBaseline],
    mapping: ExerciseMapping,
    at: datetime,
    seed: float = 0.0,
) -> dict[str, MuscleBaseline]:
    """Recompute learned maximums from scratch (never below ``seed``); overrides are kept as they are."""
    maxima: dict[str, float] = {}
    for workout in workouts:
        for muscle, volume in session_muscle_volumes(workout.exercises, mapping).items():
            maxima[muscle] = max(maxima.get(muscle, 0.0), volume)

    rebuilt: dict[str, MuscleBaseline] = {}
    for muscle in sorted(set(maxima) | set(current)):
        baseline = current.get(muscle) or MuscleBaseline(muscle=muscle)
        new_max = round(max(seed, maxima.get(muscle, 0.0)), 2)
        if new_max != baseline.system_learned_max:
            logger.info("Baseline for %s rebuilt: %s -> %s", muscle, baseline.system_learned_max, new_max)
        rebuilt[muscle] = baseline.model_copy(update={"system_learned_max": new_max, "updated_at": at})
    return rebuilt


def calculate_increase_percent(current: float, suggested: float) -> float:
    return (suggested - current) / current * 100


def validate_baseline_update(
    current: float,
    suggested: float,
    max_increase_percent: float = DEFAULT_MAX_INCREASE_PERCENT,
) -> tuple[bool, str]:
    """Sanity check a suggested baseline jump. Returns (is_valid, reason)."""
    if current <= 0:
        return True, "No previous baseline"
    increase = calculate_increase_percent(current, suggested)
    if increase <= 0:
        return False, "Suggested baseline must be higher than current baseline"
    if increase > max_increase_percent:
        return False, (
            f"Increase of {increase:.1f}% exceeds maximum allowed ({max_increase_percent:g}%). "
            "This might be an error."
        )
    return True, "Baseline update is reasonable"


def check_baseline_updates(
    session_volumes: Mapping[str, float],
    baselines: Mapping[str, MuscleBaseline],
    max_increase_percent: float = DEFAULT_MAX_INCREASE_PERCENT,
) -> list[BaselineSuggestion]:
    """Muscles that beat their effective baseline, highest exceedance first.

    Muscles without a baseline are skipped: a cold-start muscle has nothing to beat.
    """
    suggestions = []
    for muscle, volume in session_volumes.items():
        baseline = baselines.get(muscle)
        current = baseline.effective if baseline else 0.0
        if not current or current <= 0 or volume <= current:
            continue
        suggested = float(math.ceil(volume))
        is_valid, reason = validate_baseline_update(current, suggested, max_increase_percent)
        suggestions.append(
            BaselineSuggestion(
                muscle=muscle,
                current_baseline=current,
                volume_achieved=round(volume, 2),
                suggested_baseline=suggested,
                exceedance_percent=round(calculate_increase_percent(current, volume), 1),
                exceedance_amount=round(volume - current, 2),
                is_reasonable=is_valid,
                reason=reason,
            )
        )
    return sorted(suggestions, key=lambda s: s.exceedance_percent, reverse=True)
