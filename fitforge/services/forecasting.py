"""Workout forecast: what a planned session would do to each muscle, without saving it.

Projected fatigue = current (decayed) fatigue + the session's predicted delta.
A muscle at or above the caution threshold is a warning bottleneck; one that
would reach 100% is critical.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from datetime import datetime

from fitforge.core.constants import FATIGUE_MAX
from fitforge.core.enums import BottleneckSeverity
from fitforge.core.exceptions import ComputationInvariantViolation
from fitforge.schemas.forecast import Bottleneck, ForecastedMuscle, WorkoutForecast
from fitforge.schemas.muscle import MuscleActivation, MuscleBaseline, MuscleState
from fitforge.schemas.policy import FatiguePolicy
from fitforge.schemas.workout import CompletedWorkout
from fitforge.services import fatigue
from fitforge.services.baselines import effective_baseline
from fitforge.services.exercise_mapping import ExerciseMapping


def current_fatigues(
    states: Mapping[str, MuscleState],
    as_of: datetime,
    policy: FatiguePolicy,
    violations: list[ComputationInvariantViolation] | None = None,
) -> dict[str, float]:
    return {muscle: fatigue.decay(state, as_of, policy, violations) for muscle, state in states.items()}


def find_bottlenecks(projected: Mapping[str, float], policy: FatiguePolicy) -> list[Bottleneck]:
    """Critical first, then by projected fatigue, highest first."""
    bottlenecks = []
    for muscle, value in projected.items():
        if value >= FATIGUE_MAX:
            severity, threshold = BottleneckSeverity.CRITICAL, FATIGUE_MAX
        elif value >= policy.caution_threshold:
            severity, threshold = BottleneckSeverity.WARNING, policy.caution_threshold
        else:
            continue
        bottlenecks.append(
            Bottleneck(muscle=muscle, severity=severity, projected_fatigue=round(value, 1), threshold=threshold)
        )
    return sorted(
        bottlenecks,
        key=lambda b: (b.severity != BottleneckSeverity.CRITICAL, -b.projected_fatigue, b.muscle),
    )


def forecast_workout(
    workout: CompletedWorkout,
    states: Mapping[str, MuscleState],
    baselines: Mapping[str, MuscleBaseline],
    as_of: datetime,
    mapping: ExerciseMapping,
    policy: FatiguePolicy,
    violations: list[ComputationInvariantViolation] | None = None,
) -> WorkoutForecast:
    load = fatigue.accumulate_session(workout.exercises, mapping, baselines, policy)
    muscles = []
    projected: dict[str, float] = {}
    for muscle in sorted(load.deltas):
        delta = load.deltas[muscle]
        current = fatigue.decay(states.get(muscle) or MuscleState.cold(muscle), as_of, policy, violations)
        projected[muscle] = current + delta
        forecast = min(FATIGUE_MAX, projected[muscle])
        muscles.append(
            ForecastedMuscle(
                muscle=muscle,
                current_fatigue=round(current, 1),
                predicted_delta=round(delta, 1),
                projected_fatigue=round(projected[muscle], 1),
                forecast_fatigue_percent=round(forecast, 1),
                volume_added=round(load.volumes.get(muscle, 0.0), 1),
                baseline=effective_baseline(baselines.get(muscle), policy.default_baseline_volume),
                status=fatigue.status_for(forecast, policy),
            )
        )
    return WorkoutForecast(
        muscles=muscles,
        bottlenecks=find_bottlenecks(projected, policy),
        unmapped_exercises=load.unmapped_exercises,
        as_of=as_of,
    )


def optimal_volume(
    target_muscle: str,
    activations: Iterable[MuscleActivation],
    fatigues: Mapping[str, float],
    baselines: Mapping[str, MuscleBaseline],
    policy: FatiguePolicy,
) -> int:
    """Largest exercise volume that takes the target to 100% before any supporting muscle gets there.

    0 when the exercise does not work the target.
    """
    activations = list(activations)
    if not any(a.muscle == target_muscle for a in activations):
        return 0
    limit = math.inf
    for activation in activations:
        remaining = max(0.0, FATIGUE_MAX - fatigues.get(activation.muscle, 0.0))
        baseline = effective_baseline(baselines.get(activation.muscle), policy.default_baseline_volume)
        limit = min(limit, remaining * baseline / FATIGUE_MAX / activation.weight)
    return math.floor(limit)
