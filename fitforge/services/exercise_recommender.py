"""Exercise recommendations for a target muscle.

Each eligible exercise gets five factor scores (points out of 100):

* target match (40): how strongly it works the target muscle;
* freshness (25): activation-weighted readiness of every muscle it works;
* variety (15): fewer same-category exercises in recent history is better;
* preference (10): the user marked it as a favorite;
* primary (10): the target is a primary mover (5 if only secondary).

Before scoring, an estimated session (3 × 10 × 100 lbs by default) is
projected onto every muscle. An exercise that would push any muscle past
100% is unsafe: it scores 0 and is returned apart from the safe list.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime

from fitforge.core.constants import (
    FATIGUE_MAX,
    RECOMMENDATION_ESTIMATED_REPS,
    RECOMMENDATION_ESTIMATED_SETS,
    RECOMMENDATION_ESTIMATED_WEIGHT,
    RECOMMENDATION_LIMIT,
    RECOMMENDATION_MIN_ENGAGEMENT,
    RECOMMENDATION_VARIETY_WINDOW,
    RECOMMENDATION_WEIGHTS,
)
from fitforge.core.enums import BottleneckSeverity
from fitforge.schemas.muscle import MuscleActivation, MuscleBaseline, MuscleState
from fitforge.schemas.policy import FatiguePolicy
from fitforge.schemas.recommendation import (
    ExerciseRecommendation,
    ExerciseRecommendations,
    ExerciseWarning,
    RecommendationFactors,
)
from fitforge.services.baselines import effective_baseline
from fitforge.services.exercise_mapping import ExerciseMapping, normalize_exercise_id
from fitforge.services.forecasting import current_fatigues

logger = logging.getLogger(__name__)


def check_bottlenecks(
    target_muscle: str,
    activations: Iterable[MuscleActivation],
    fatigues: Mapping[str, float],
    baselines: Mapping[str, MuscleBaseline],
    volume: float,
    policy: FatiguePolicy,
) -> list[ExerciseWarning]:
    """Warnings for one exercise at the estimated volume.

    Critical: a muscle would pass 100%. Warning: a supporting muscle is
    already at the caution threshold.
    """
    warnings = []
    for activation in activations:
        current = fatigues.get(activation.muscle, 0.0)
        baseline = effective_baseline(baselines.get(activation.muscle), policy.default_baseline_volume)
        added = volume * activation.weight
        projected = current + added / baseline * 100
        if projected > FATIGUE_MAX:
            severity = BottleneckSeverity.CRITICAL
            message = (
                f"{activation.muscle} would reach {projected:.1f}% fatigue "
                f"(exceeds baseline by {projected - FATIGUE_MAX:.1f}%)"
            )
        elif activation.muscle != target_muscle and current >= policy.caution_threshold:
            severity = BottleneckSeverity.WARNING
            message = f"Supporting muscle {activation.muscle} is already at {current:.1f}% fatigue"
        else:
            continue
        warnings.append(
            ExerciseWarning(
                muscle=activation.muscle,
                severity=severity,
                current_fatigue=round(current, 1),
                projected_fatigue=round(projected, 1),
                engagement=activation.weight,
                added_volume=round(added, 1),
                baseline=baseline,
                message=message,
            )
        )
    return warnings


def weighted_fatigue(activations: Iterable[MuscleActivation], fatigues: Mapping[str, float]) -> float:
    total = weight = 0.0
    for activation in activations:
        total += fatigues.get(activation.muscle, 0.0) * activation.weight
        weight += activation.weight
    return total / weight if weight else 0.0


def score_factors(
    exercise_id: str,
    target_muscle: str,
    activations: list[MuscleActivation],
    fatigues: Mapping[str, float],
    recent_categories: list[str | None],
    favorites: set[str],
    mapping: ExerciseMapping,
    policy: FatiguePolicy,
) -> RecommendationFactors:
    target = next(a for a in activations if a.muscle == target_muscle)
    w = RECOMMENDATION_WEIGHTS

    target_match = target.weight * w["target_match"]
    freshness = (FATIGUE_MAX - weighted_fatigue(activations, fatigues)) / FATIGUE_MAX * w["freshness"]
    category = mapping.category_for(exercise_id)
    same_pattern = sum(1 for c in recent_categories if c is not None and c == category)
    variety = max(0.0, 1 - same_pattern / RECOMMENDATION_VARIETY_WINDOW) * w["variety"]
    preference = w["preference"] if exercise_id in favorites else 0.0
    primary = w["primary"] if target.weight >= policy.primary_activation_threshold else w["primary"] / 2

    return RecommendationFactors(
        target_match=round(target_match, 2),
        freshness=round(freshness, 2),
        variety=round(variety, 2),
        preference=preference,
        primary=primary,
        total=round(target_match + freshness + variety + preference + primary, 2),
    )


def recommend_exercises(
    target_muscle: str,
    states: Mapping[str, MuscleState],
    baselines: Mapping[str, MuscleBaseline],
    as_of: datetime,
    mapping: ExerciseMapping,
    policy: FatiguePolicy,
    recent_exercises: Iterable[str] = (),
    favorites: Iterable[str] = (),
    avoid: Iterable[str] = (),
    estimated_sets: int = RECOMMENDATION_ESTIMATED_SETS,
    estimated_reps: int = RECOMMENDATION_ESTIMATED_REPS,
    estimated_weight: float = RECOMMENDATION_ESTIMATED_WEIGHT,
    limit: int = RECOMMENDATION_LIMIT,
) -> ExerciseRecommendations:
    if not target_muscle or not isinstance(target_muscle, str):
        raise ValueError("Target muscle is required and must be a string")

    fatigues = current_fatigues(states, as_of, policy)
    favorite_ids = {normalize_exercise_id(e) for e in favorites}
    avoided = {normalize_exercise_id(e) for e in avoid}
    recent_categories = [mapping.category_for(e) for e in recent_exercises]
    volume = estimated_sets * estimated_reps * estimated_weight

    eligible = []
    for exercise_id in mapping.exercise_ids():
        if exercise_id in avoided:
            continue
        activations = mapping.muscles_for(exercise_id)
        target = next((a for a in activations if a.muscle == target_muscle), None)
        if target is None or target.weight < RECOMMENDATION_MIN_ENGAGEMENT:
            continue
        eligible.append((exercise_id, activations))
    if not eligible:
        logger.info("No exercise in the library works %s", target_muscle)

    scored = []
    for exercise_id, activations in eligible:
        warnings = check_bottlenecks(target_muscle, activations, fatigues, baselines, volume, policy)
        is_safe = not any(w.severity == BottleneckSeverity.CRITICAL for w in warnings)
        factors = score_factors(
            exercise_id, target_muscle, activations, fatigues, recent_categories, favorite_ids, mapping, policy
        )
        scored.append(
            ExerciseRecommendation(
                exercise_id=exercise_id,
                category=mapping.category_for(exercise_id),
                score=factors.total if is_safe else 0.0,
                is_safe=is_safe,
                warnings=warnings,
                factors=factors,
            )
        )
    scored.sort(key=lambda r: (-r.score, r.exercise_id))

    return ExerciseRecommendations(
        target_muscle=target_muscle,
        safe=[r for r in scored if r.is_safe][:limit],
        unsafe=[r for r in scored if not r.is_safe],
        total_filtered=len(eligible),
        as_of=as_of,
    )
