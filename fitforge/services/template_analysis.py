"""Template / variation analysis and next-variation recommendation.

Variations of a category (e.g. Legs A / Legs B) are rotated so muscles get
time to recover. ``analyze`` gathers per-variation facts; ``recommend_next``
applies the policy:

1. among variations whose primary muscles are all ready, pick the one unused
   for longest (never used beats any date);
2. if none is ready, pick the highest mean readiness instead of refusing.

``compare_variations`` only reports trend deltas; it never makes the choice.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from fitforge.core.constants import (
    CATEGORY_MUSCLES,
    TEMPLATE_BALANCE_MAX_STDDEV,
    TEMPLATE_COVERAGE_MIN_ENGAGEMENT,
    TEMPLATE_OVERLAP_THRESHOLD,
)
from fitforge.core.enums import ExerciseCategory
from fitforge.schemas.muscle import MuscleState
from fitforge.schemas.policy import FatiguePolicy
from fitforge.schemas.template import TemplateAnalysis, VariationComparison, VariationStats, WorkoutTemplate
from fitforge.schemas.workout import CompletedWorkout
from fitforge.services import fatigue
from fitforge.services.exercise_mapping import ExerciseMapping, default_mapping


def _same(a: str | None, b: str | None) -> bool:
    return (a or "").strip().casefold() == (b or "").strip().casefold()


def _later(a: datetime | None, b: datetime | None) -> datetime | None:
    if a is None:
        return b
    if b is None:
        return a
    return a if fatigue.as_utc(a) >= fatigue.as_utc(b) else b


@dataclass
class _Group:
    variation: str
    template_names: list[str] = field(default_factory=list)
    exercise_ids: dict[str, None] = field(default_factory=dict)
    last_used_at: datetime | None = None
    times_used: int = 0
    is_favorite: bool = False
    volumes: list[float] = field(default_factory=list)
    set_counts: list[int] = field(default_factory=list)


def _group(
    category: str,
    history: Iterable[WorkoutTemplate],
    workouts: Iterable[CompletedWorkout],
) -> dict[str, _Group]:
    groups: dict[str, _Group] = {}
    for template in history:
        if not _same(template.category, category):
            continue
        group = groups.setdefault(template.variation, _Group(variation=template.variation))
        group.template_names.append(template.name)
        for exercise_id in template.exercise_ids:
            group.exercise_ids.setdefault(exercise_id, None)
        group.last_used_at = _later(group.last_used_at, template.last_used_at)
        group.times_used += template.times_used
        group.is_favorite = group.is_favorite or template.is_favorite

    for workout in workouts:
        if not _same(workout.category, category) or not workout.variation:
            continue
        group = groups.setdefault(workout.variation, _Group(variation=workout.variation))
        if not group.template_names:
            for exercise in workout.exercises:
                group.exercise_ids.setdefault(exercise.exercise_id, None)
        group.last_used_at = _later(group.last_used_at, workout.performed_at)
        group.volumes.append(sum(e.total_volume for e in workout.exercises))
        group.set_counts.append(sum(len(e.counted_sets) for e in workout.exercises))
    return groups


def muscle_engagements(exercise_ids: Iterable[str], mapping: ExerciseMapping) -> dict[str, float]:
    """Summed activation per muscle, as a percentage (100 = one full exercise)."""
    engagements: dict[str, float] = {}
    for exercise_id in exercise_ids:
        for activation in mapping.muscles_for(exercise_id):
            engagements[activation.muscle] = engagements.get(activation.muscle, 0.0) + activation.weight * 100
    return {m: round(v, 1) for m, v in engagements.items()}


def _category_muscles(category: str) -> tuple[str, ...]:
    for member in ExerciseCategory:
        if _same(member.value, category):
            return tuple(m.value for m in CATEGORY_MUSCLES[member])
    return ()


def score_coverage(engagements: Mapping[str, float], category: str) -> int:
    """Share of the category's muscles engaged at least TEMPLATE_COVERAGE_MIN_ENGAGEMENT."""
    relevant = _category_muscles(category)
    if not relevant:
        return 0
    covered = sum(1 for m in relevant if engagements.get(m, 0.0) >= TEMPLATE_COVERAGE_MIN_ENGAGEMENT)
    return round(covered / len(relevant) * 100)


def score_balance(engagements: Mapping[str, float]) -> int:
    """100 for perfectly even engagement, falling with standard deviation."""
    values = list(engagements.values())
    if not values:
        return 0
    mean = sum(values) / len(values)
    std_dev = math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))
    return round(max(0.0, 100 - std_dev / TEMPLATE_BALANCE_MAX_STDDEV * 100))


def _mean_readiness(
    muscles: Sequence[str],
    muscle_states: Mapping[str, MuscleState],
    as_of: datetime,
    policy: FatiguePolicy,
) -> tuple[float, bool]:
    if not muscles:
        return 1.0, True
    levels = []
    ready = True
    for muscle in muscles:
        state = muscle_states.get(muscle) or MuscleState.cold(muscle)
        current = fatigue.decay(state, as_of, policy)
        levels.append(1 - current / 100)
        ready = ready and fatigue.is_ready(current, policy)
    return round(sum(levels) / len(levels), 3), ready


def analyze(
    category: str,
    history: Iterable[WorkoutTemplate],
    muscle_states: Mapping[str, MuscleState],
    as_of: datetime,
    workouts: Iterable[CompletedWorkout] = (),
    mapping: ExerciseMapping = default_mapping,
    policy: FatiguePolicy = fatigue.DEFAULT_POLICY,
) -> TemplateAnalysis:
    variations = []
    for variation, group in sorted(_group(category, history, workouts).items()):
        exercise_ids = list(group.exercise_ids)
        primary = mapping.muscles_for_many(exercise_ids, policy.primary_activation_threshold)
        mean_readiness, ready = _mean_readiness(primary, muscle_states, as_of, policy)
        engagements = muscle_engagements(exercise_ids, mapping)
        relevant = _category_muscles(category)
        days = None
        if group.last_used_at is not None:
            days = round(fatigue.hours_between(group.last_used_at, as_of) / 24, 2)
        variations.append(
            VariationStats(
                category=category,
                variation=variation,
                template_names=group.template_names,
                exercise_ids=exercise_ids,
                primary_muscles=primary,
                last_used_at=group.last_used_at,
                days_since_last_use=days,
                mean_readiness=mean_readiness,
                ready=ready,
                times_used=group.times_used,
                is_favorite=group.is_favorite,
                sessions=len(group.volumes),
                average_volume=round(sum(group.volumes) / len(group.volumes), 1) if group.volumes else 0.0,
                average_set_count=(
                    round(sum(group.set_counts) / len(group.set_counts), 1) if group.set_counts else 0.0
                ),
                muscle_engagements=engagements,
                coverage=score_coverage(engagements, category),
                balance=score_balance(engagements),
                gaps=[m for m in relevant if engagements.get(m, 0.0) < TEMPLATE_COVERAGE_MIN_ENGAGEMENT],
                overlaps=sorted(m for m, v in engagements.items() if v > TEMPLATE_OVERLAP_THRESHOLD),
            )
        )
    recommended, reason = _choose(variations)
    return TemplateAnalysis(
        category=category,
        variations=variations,
        recommended_variation=recommended,
        reason=reason,
    )


def _overdue(stats: VariationStats) -> float:
    return math.inf if stats.days_since_last_use is None else stats.days_since_last_use


def _choose(variations: Sequence[VariationStats]) -> tuple[str | None, str | None]:
    if not variations:
        return None, None
    ready = [v for v in variations if v.ready]
    if ready:
        # Longest rest first; readiness then name break ties deterministically.
        best = min(ready, key=lambda v: (-_overdue(v), -v.mean_readiness, v.variation))
        if best.days_since_last_use is None:
            return best.variation, "Ready and never used"
        return best.variation, f"Ready; last used {best.days_since_last_use:g} days ago"
    best = min(variations, key=lambda v: (-v.mean_readiness, -_overdue(v), v.variation))
    return best.variation, f"No variation fully recovered; highest readiness {best.mean_readiness:.0%}"


def recommend_next(
    category: str,
    history: Iterable[WorkoutTemplate],
    muscle_states: Mapping[str, MuscleState],
    as_of: datetime,
    workouts: Iterable[CompletedWorkout] = (),
    mapping: ExerciseMapping = default_mapping,
    policy: FatiguePolicy = fatigue.DEFAULT_POLICY,
) -> str | None:
    """Variation to do next, or None when the category has no history at all."""
    return analyze(category, history, muscle_states, as_of, workouts, mapping, policy).recommended_variation


def _recovery_hours(
    muscles: Sequence[str],
    muscle_states: Mapping[str, MuscleState],
    as_of: datetime,
    policy: FatiguePolicy,
) -> float:
    """Hours until every listed muscle is ready again."""
    longest = 0.0
    for muscle in muscles:
        state = muscle_states.get(muscle)
        if state is None:
            continue
        hours = fatigue.recovery_timeline(state, as_of, policy).hours_until_ready
        if hours is None:
            return math.inf
        longest = max(longest, hours)
    return longest


def _complementarity(a: Mapping[str, float], b: Mapping[str, float]) -> tuple[int, dict[str, float]]:
    muscles = sorted(set(a) | set(b))
    if not muscles:
        return 0, {}
    differences = {m: round(abs(a.get(m, 0.0) - b.get(m, 0.0)), 1) for m in muscles}
    avg_diff = sum(differences.values()) / len(muscles)
    avg_engagement = (sum(a.values()) + sum(b.values())) / (len(a) + len(b))
    if avg_engagement <= 0:
        return 0, differences
    return min(100, round(avg_diff / avg_engagement * 100)), differences


def _summary(complementarity: int) -> str:
    if complementarity >= 80:
        return "Excellent variation - provides very different training stimuli"
    if complementarity >= 60:
        return "Good variation - notable differences in muscle engagement"
    if complementarity >= 40:
        return "Moderate variation - some differences but could be more distinct"
    return "Low variation - templates are very similar, consider diversifying"


def compare_variations(
    category: str,
    variation_a: str,
    variation_b: str,
    history: Iterable[WorkoutTemplate],
    muscle_states: Mapping[str, MuscleState],
    as_of: datetime,
    workouts: Iterable[CompletedWorkout] = (),
    mapping: ExerciseMapping = default_mapping,
    policy: FatiguePolicy = fatigue.DEFAULT_POLICY,
) -> VariationComparison:
    """Deltas are ``b - a``. Raises ValueError for a variation with no history."""
    analysis = analyze(category, history, muscle_states, as_of, workouts, mapping, policy)
    by_name = {v.variation: v for v in analysis.variations}
    missing = [v for v in (variation_a, variation_b) if v not in by_name]
    if missing:
        raise ValueError(f"No history for {category} variation(s): {', '.join(missing)}")
    a, b = by_name[variation_a], by_name[variation_b]
    hours_a = _recovery_hours(a.primary_muscles, muscle_states, as_of, policy)
    hours_b = _recovery_hours(b.primary_muscles, muscle_states, as_of, policy)
    complementarity, differences = _complementarity(a.muscle_engagements, b.muscle_engagements)
    return VariationComparison(
        category=category,
        variation_a=variation_a,
        variation_b=variation_b,
        average_volume_delta=round(b.average_volume - a.average_volume, 1),
        set_count_delta=round(b.average_set_count - a.average_set_count, 1),
        recovery_hours_a=hours_a,
        recovery_hours_b=hours_b,
        recovery_hours_delta=round(hours_b - hours_a, 1) if math.isfinite(hours_b - hours_a) else math.inf,
        complementarity=complementarity,
        differences=differences,
        summary=_summary(complementarity),
    )
