"""Muscle fatigue: per-set deltas, session accumulation and lazy recovery decay.

Everything here is a pure function of its inputs. Stored state is a snapshot
(fatigue as of ``last_trained``); the current value is computed at read time
from ``(state, as_of)`` so no background job is ever needed.

Fatigue delta for one set on one muscle::

    weight × reps × activation × (failure_multiplier if to_failure)
        / effective_baseline × 100

Decay curves (see ``DecayCurve``):

* linear:      F0 × max(0, 1 − days / recovery_days_to_full)
* exponential: F0 × 0.5 ** (hours / recovery_half_life_hours)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from fitforge.core.constants import FATIGUE_MAX, FATIGUE_MIN, RECOVERY_PROJECTION_HOURS
from fitforge.core.enums import DecayCurve, RecoveryStatus
from fitforge.core.exceptions import ComputationInvariantViolation
from fitforge.schemas.muscle import (
    MuscleActivation,
    MuscleBaseline,
    MuscleReadiness,
    MuscleState,
    RecoveryPoint,
    RecoveryTimeline,
)
from fitforge.schemas.policy import FatiguePolicy
from fitforge.schemas.workout import ExerciseEntry, SetEntry
from fitforge.services.exercise_mapping import ExerciseMapping

logger = logging.getLogger(__name__)

DEFAULT_POLICY = FatiguePolicy()


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def hours_between(start: datetime | None, end: datetime) -> float:
    """Elapsed hours, never negative."""
    if start is None:
        return 0.0
    return max(0.0, (as_utc(end) - as_utc(start)).total_seconds() / 3600)


def clamp_fatigue(
    value: float,
    muscle: str,
    source: str,
    violations: list[ComputationInvariantViolation] | None = None,
    policy: FatiguePolicy = DEFAULT_POLICY,
) -> float:
    """Clamp into [0, 100]; an out-of-range value is reported as a violation."""
    if value is not None and FATIGUE_MIN <= value <= FATIGUE_MAX:
        return float(value)
    if value is None or math.isnan(value):
        clamped = FATIGUE_MIN
    else:
        clamped = min(FATIGUE_MAX, max(FATIGUE_MIN, value))
    violation = ComputationInvariantViolation(muscle=muscle, value=value, clamped=clamped, source=source)
    if policy.strict_invariants:
        raise violation
    logger.warning("Clamped out-of-range fatigue: %s", violation)
    if violations is not None:
        violations.append(violation)
    return clamped


def decay_fatigue(fatigue: float, hours: float, policy: FatiguePolicy = DEFAULT_POLICY) -> float:
    """Fatigue remaining ``hours`` after it was recorded."""
    if fatigue <= 0 or hours <= 0:
        return max(0.0, fatigue)
    if policy.decay_curve == DecayCurve.EXPONENTIAL:
        return fatigue * 0.5 ** (hours / policy.recovery_half_life_hours)
    days = hours / 24
    return fatigue * max(0.0, 1 - days / policy.recovery_days_to_full)


def hours_to_reach(fatigue: float, target: float, policy: FatiguePolicy = DEFAULT_POLICY) -> float | None:
    """Hours of rest for ``fatigue`` to fall to ``target``. None if never (exponential to 0)."""
    if fatigue <= target:
        return 0.0
    if policy.decay_curve == DecayCurve.EXPONENTIAL:
        if target <= 0:
            return None
        return policy.recovery_half_life_hours * math.log2(fatigue / target)
    return policy.recovery_days_to_full * 24 * (1 - target / fatigue)


def decay(
    state: MuscleState,
    as_of: datetime,
    policy: FatiguePolicy = DEFAULT_POLICY,
    violations: list[ComputationInvariantViolation] | None = None,
) -> float:
    """Current fatigue of a stored state, decayed from last_trained to ``as_of``."""
    stored = clamp_fatigue(state.fatigue_percent, state.muscle, "stored_state", violations, policy)
    current = decay_fatigue(stored, hours_between(state.last_trained, as_of), policy)
    return clamp_fatigue(current, state.muscle, "decay", violations, policy)


def status_for(fatigue: float, policy: FatiguePolicy = DEFAULT_POLICY) -> RecoveryStatus:
    if fatigue >= policy.caution_threshold:
        return RecoveryStatus.DONT_TRAIN
    if fatigue >= policy.readiness_threshold:
        return RecoveryStatus.CAUTION
    return RecoveryStatus.READY


def is_ready(fatigue: float, policy: FatiguePolicy = DEFAULT_POLICY) -> bool:
    return fatigue < policy.readiness_threshold


def readiness(
    state: MuscleState,
    as_of: datetime,
    policy: FatiguePolicy = DEFAULT_POLICY,
    violations: list[ComputationInvariantViolation] | None = None,
) -> MuscleReadiness:
    fatigue = decay(state, as_of, policy, violations)
    return MuscleReadiness(
        muscle=state.muscle,
        fatigue_percent=round(fatigue, 1),
        readiness=round(1 - fatigue / 100, 3),
        ready=is_ready(fatigue, policy),
        status=status_for(fatigue, policy),
        last_trained=state.last_trained,
        as_of=as_of,
    )


def recovery_timeline(
    state: MuscleState,
    as_of: datetime,
    policy: FatiguePolicy = DEFAULT_POLICY,
) -> RecoveryTimeline:
    """Current readout, 24/48/72h projections and time until ready / fully recovered."""
    current = readiness(state, as_of, policy)
    projections = []
    for hours in RECOVERY_PROJECTION_HOURS:
        projected = decay(state, as_of + timedelta(hours=hours), policy)
        projections.append(
            RecoveryPoint(
                hours_from_now=hours,
                fatigue_percent=round(projected, 1),
                status=status_for(projected, policy),
            )
        )

    # Remaining time follows the stored snapshot's curve, not one restarted at as_of.
    stored = clamp_fatigue(state.fatigue_percent, state.muscle, "stored_state", None, policy)
    elapsed = hours_between(state.last_trained, as_of)

    def remaining(target: float) -> float | None:
        total = hours_to_reach(stored, target, policy)
        if total is None:
            return None
        return round(max(0.0, total - elapsed), 1)

    return RecoveryTimeline(
        muscle=state.muscle,
        current=current,
        projections=projections,
        hours_until_ready=remaining(policy.readiness_threshold),
        hours_until_recovered=remaining(0.0),
    )


def _baseline_value(
    muscle: str,
    baselines: Mapping[str, MuscleBaseline | float] | None,
    policy: FatiguePolicy,
) -> float:
    entry = baselines.get(muscle) if baselines else None
    value = entry.effective if isinstance(entry, MuscleBaseline) else entry
    if value is None or value <= 0:
        return policy.default_baseline_volume
    return float(value)


def apply_set(
    set_entry: SetEntry,
    activations: Iterable[MuscleActivation],
    baselines: Mapping[str, MuscleBaseline | float] | None = None,
    policy: FatiguePolicy = DEFAULT_POLICY,
) -> dict[str, float]:
    """Fatigue delta per muscle for one set. Invalid or incomplete sets give {}."""
    if not set_entry.counts or set_entry.weight <= 0:
        return {}
    volume = set_entry.volume
    if set_entry.to_failure:
        volume *= policy.failure_multiplier
    deltas: dict[str, float] = {}
    for activation in activations:
        baseline = _baseline_value(activation.muscle, baselines, policy)
        deltas[activation.muscle] = deltas.get(activation.muscle, 0.0) + volume * activation.weight / baseline * 100
    return deltas


@dataclass
class SessionLoad:
    """Accumulated effect of one session, before it is applied to stored state."""

    deltas: dict[str, float] = field(default_factory=dict)
    volumes: dict[str, float] = field(default_factory=dict)  # volume × activation, no failure bonus
    skipped_sets: int = 0
    unmapped_exercises: list[str] = field(default_factory=list)


def accumulate_session(
    exercises: Iterable[ExerciseEntry],
    mapping: ExerciseMapping,
    baselines: Mapping[str, MuscleBaseline | float] | None = None,
    policy: FatiguePolicy = DEFAULT_POLICY,
) -> SessionLoad:
    """Sum set deltas across a whole session so each muscle is written once."""
    load = SessionLoad()
    for exercise in exercises:
        activations = mapping.muscles_for(exercise.exercise_id)
        if not activations:
            if exercise.exercise_id not in load.unmapped_exercises:
                load.unmapped_exercises.append(exercise.exercise_id)
            continue
        for set_entry in exercise.sets:
            if not set_entry.completed:
                continue
            if not set_entry.is_valid:
                load.skipped_sets += 1
                logger.warning(
                    "Skipping invalid set %s of %s (weight=%s, reps=%s)",
                    set_entry.set_number,
                    exercise.exercise_id,
                    set_entry.weight,
                    set_entry.reps,
                )
                continue
            for muscle, delta in apply_set(set_entry, activations, baselines, policy).items():
                load.deltas[muscle] = load.deltas.get(muscle, 0.0) + delta
            for activation in activations:
                load.volumes[activation.muscle] = (
                    load.volumes.get(activation.muscle, 0.0) + set_entry.volume * activation.weight
                )
    return load


def apply_delta(
    state: MuscleState,
    delta: float,
    at: datetime,
    policy: FatiguePolicy = DEFAULT_POLICY,
    violations: list[ComputationInvariantViolation] | None = None,
    current: float | None = None,
) -> MuscleState:
    """New state: decayed fatigue at ``at`` plus ``delta``, saturating at 100.

    Pass ``current`` when the caller already decayed ``state`` to ``at`` so a
    bad stored value is only reported once.
    """
    if current is None:
        current = decay(state, at, policy, violations)
    if math.isnan(delta) or delta < 0:
        delta = clamp_fatigue(delta, state.muscle, "delta", violations, policy)
    combined = min(FATIGUE_MAX, current + delta)
    last_trained = at
    if state.last_trained is not None and as_utc(state.last_trained) > as_utc(at):
        # A late-logged older session adds on top without moving the clock back.
        last_trained = state.last_trained
    return state.model_copy(
        update={
            "fatigue_percent": round(combined, 4),
            "last_trained": last_trained,
            "updated_at": at,
        }
    )


def apply_session(
    states: Mapping[str, MuscleState],
    deltas: Mapping[str, float],
    at: datetime,
    policy: FatiguePolicy = DEFAULT_POLICY,
) -> tuple[dict[str, MuscleState], list[ComputationInvariantViolation]]:
    """New states for every muscle in ``deltas``; missing states start cold."""
    violations: list[ComputationInvariantViolation] = []
    updated = {
        muscle: apply_delta(states.get(muscle) or MuscleState.cold(muscle), delta, at, policy, violations)
        for muscle, delta in deltas.items()
    }
    return updated, violations
