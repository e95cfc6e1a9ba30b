"""Muscle fatigue & progression engine.

Pure orchestration over the service functions: given a completed workout and
the stored snapshots the caller fetched, produce new snapshots and PR
results. Nothing here touches storage; ``WorkoutRecorder`` does the
fetch / put around it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone

from fitforge.core.config import Settings, get_settings
from fitforge.core.exceptions import ComputationInvariantViolation
from fitforge.schemas.forecast import WorkoutForecast
from fitforge.schemas.muscle import MuscleBaseline, MuscleReadiness, MuscleState, MuscleStateResult, RecoveryTimeline
from fitforge.schemas.personal_best import PersonalBest
from fitforge.schemas.policy import FatiguePolicy
from fitforge.schemas.recommendation import ExerciseRecommendations
from fitforge.schemas.result import RecomputeResult, SaveResult
from fitforge.schemas.workout import CompletedWorkout
from fitforge.services import baselines as baseline_service
from fitforge.services import exercise_recommender, fatigue, forecasting, pr_detection
from fitforge.services.exercise_mapping import ExerciseMapping, default_mapping

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MuscleEngine:
    """Stateless between calls; holds only its policy and exercise mapping."""

    def __init__(
        self,
        policy: FatiguePolicy | None = None,
        mapping: ExerciseMapping | None = None,
        settings: Settings | None = None,
    ):
        settings = settings or get_settings()
        self.policy = policy or settings.fatigue_policy()
        self.mapping = mapping or default_mapping
        self.max_baseline_increase_percent = settings.max_baseline_increase_percent

    def affected_muscles(self, workout: CompletedWorkout) -> list[str]:
        """Every muscle the workout's exercises map to (what the caller must fetch)."""
        muscles: dict[str, None] = {}
        for exercise in workout.exercises:
            for activation in self.mapping.muscles_for(exercise.exercise_id):
                muscles.setdefault(activation.muscle, None)
        return list(muscles)

    def apply_completed_workout(
        self,
        workout: CompletedWorkout,
        states: Mapping[str, MuscleState],
        baselines: Mapping[str, MuscleBaseline],
        personal_bests: Mapping[str, PersonalBest],
        at: datetime | None = None,
    ) -> SaveResult:
        at = at or workout.performed_at or _now()
        violations: list[ComputationInvariantViolation] = []

        load = fatigue.accumulate_session(workout.exercises, self.mapping, baselines, self.policy)
        for exercise_id in load.unmapped_exercises:
            logger.warning("Exercise %r has no muscle mapping; it adds no fatigue", exercise_id)

        muscle_results = []
        updated_states = []
        for muscle in sorted(load.deltas):
            delta = load.deltas[muscle]
            state = states.get(muscle) or MuscleState.cold(muscle)
            previous = fatigue.decay(state, at, self.policy, violations)
            new_state = fatigue.apply_delta(state, delta, at, self.policy, violations, current=previous)
            updated_states.append(new_state)
            muscle_results.append(
                MuscleStateResult(
                    muscle=muscle,
                    previous_fatigue=round(previous, 1),
                    fatigue_delta=round(delta, 1),
                    fatigue_percent=round(new_state.fatigue_percent, 1),
                    volume=round(load.volumes.get(muscle, 0.0), 1),
                    baseline=baseline_service.effective_baseline(
                        baselines.get(muscle), self.policy.default_baseline_volume
                    ),
                    exceeded_baseline=delta > 100,
                    ready=fatigue.is_ready(new_state.fatigue_percent, self.policy),
                    last_trained=new_state.last_trained,
                )
            )

        prs = []
        updated_bests = []
        for key, (exercise_id, sets) in pr_detection.group_sets_by_exercise(workout.exercises).items():
            result = pr_detection.detect(exercise_id, sets, personal_bests.get(key), at)
            if result is None:
                continue
            prs.append(result)
            updated_bests.append(result.personal_best)

        session_volumes = baseline_service.session_muscle_volumes(workout.exercises, self.mapping)
        suggestions = baseline_service.check_baseline_updates(
            session_volumes, baselines, self.max_baseline_increase_percent
        )
        learned = baseline_service.learn_baselines(
            baselines, session_volumes, at, seed=self.policy.default_baseline_volume
        )

        if load.skipped_sets:
            logger.info("Skipped %d invalid set(s) while applying workout", load.skipped_sets)
        return SaveResult(
            muscle_states=muscle_results,
            prs=prs,
            updated_states=updated_states,
            updated_baselines=[learned[m] for m in sorted(learned)],
            updated_personal_bests=updated_bests,
            baseline_suggestions=suggestions,
            skipped_sets=load.skipped_sets,
            unmapped_exercises=load.unmapped_exercises,
            violations=violations,
            applied_at=at,
        )

    def read_states(
        self,
        states: Iterable[MuscleState],
        as_of: datetime | None = None,
        violations: list[ComputationInvariantViolation] | None = None,
    ) -> list[MuscleReadiness]:
        """Lazily decayed readouts, sorted by muscle name."""
        as_of = as_of or _now()
        return [
            fatigue.readiness(state, as_of, self.policy, violations)
            for state in sorted(states, key=lambda s: s.muscle)
        ]

    def recovery_timeline(self, state: MuscleState, as_of: datetime | None = None) -> RecoveryTimeline:
        return fatigue.recovery_timeline(state, as_of or _now(), self.policy)

    def forecast_workout(
        self,
        workout: CompletedWorkout,
        states: Mapping[str, MuscleState],
        baselines: Mapping[str, MuscleBaseline],
        as_of: datetime | None = None,
    ) -> WorkoutForecast:
        """Projected fatigue for a planned workout; nothing is persisted."""
        return forecasting.forecast_workout(workout, states, baselines, as_of or _now(), self.mapping, self.policy)

    def recommend_exercises(
        self,
        target_muscle: str,
        states: Mapping[str, MuscleState],
        baselines: Mapping[str, MuscleBaseline],
        as_of: datetime | None = None,
        **options,
    ) -> ExerciseRecommendations:
        return exercise_recommender.recommend_exercises(
            target_muscle, states, baselines, as_of or _now(), self.mapping, self.policy, **options
        )

    def recompute(
        self,
        workouts: Iterable[CompletedWorkout],
        baselines: Mapping[str, MuscleBaseline],
        previous_states: Mapping[str, MuscleState],
        previous_bests: Mapping[str, PersonalBest],
        at: datetime | None = None,
    ) -> RecomputeResult:
        """Rebuild every derived snapshot from the remaining history.

        Baselines are rebuilt first (overrides kept), then muscle states are
        replayed chronologically against them so fatigue matches what a clean
        log would have produced.
        """
        at = at or _now()
        history = sorted(
            (w for w in workouts if w.performed_at is not None),
            key=lambda w: fatigue.as_utc(w.performed_at),
        )
        violations: list[ComputationInvariantViolation] = []

        seed = self.policy.default_baseline_volume
        rebuilt_baselines = baseline_service.rebuild_baselines(history, baselines, self.mapping, at, seed=seed)
        # Replay with the baselines as they stood before each session.
        replay_baselines: dict[str, MuscleBaseline] = {
            m: b.model_copy(update={"system_learned_max": seed}) for m, b in rebuilt_baselines.items()
        }
        states: dict[str, MuscleState] = {}
        for workout in history:
            load = fatigue.accumulate_session(workout.exercises, self.mapping, replay_baselines, self.policy)
            updated, session_violations = fatigue.apply_session(states, load.deltas, workout.performed_at, self.policy)
            states.update(updated)
            violations.extend(session_violations)
            learned = baseline_service.learn_baselines(replay_baselines, load.volumes, workout.performed_at, seed=seed)
            replay_baselines.update(learned)

        # Muscles whose history disappeared entirely go back to a cold state.
        for muscle in previous_states:
            states.setdefault(muscle, MuscleState.cold(muscle).model_copy(update={"updated_at": at}))

        bests = pr_detection.rebuild_personal_bests(history, at)
        changes = pr_detection.diff_personal_bests(previous_bests, bests)

        affected = sorted(
            m
            for m, s in states.items()
            if previous_states.get(m) is None
            or previous_states[m].fatigue_percent != s.fatigue_percent
            or previous_states[m].last_trained != s.last_trained
        )
        logger.info(
            "Recomputed %d muscle state(s), %d baseline(s), %d personal best(s) from %d workout(s)",
            len(states),
            len(rebuilt_baselines),
            len(bests),
            len(history),
        )
        return RecomputeResult(
            muscle_states=[states[m] for m in sorted(states)],
            baselines=[rebuilt_baselines[m] for m in sorted(rebuilt_baselines)],
            personal_bests=[bests[e] for e in sorted(bests)],
            personal_best_changes=changes,
            affected_muscles=affected,
            violations=violations,
        )
