"""Store-facing workflows around the pure engine.

``WorkoutRecorder`` does the fetch → compute → put sequence for a single
logical operation. Run it inside one transaction (``session_scope`` for the
SQL store) so concurrent saves touching the same muscle serialize there.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from fitforge.core.config import get_settings
from fitforge.schemas.forecast import WorkoutForecast
from fitforge.schemas.muscle import MuscleReadiness, MuscleState, RecoveryTimeline
from fitforge.schemas.progression import ProgressionSuggestion
from fitforge.schemas.recommendation import ExerciseRecommendations
from fitforge.schemas.result import RecomputeResult, SaveResult
from fitforge.schemas.template import TemplateAnalysis, VariationComparison
from fitforge.schemas.workout import CompletedWorkout
from fitforge.services import progression, template_analysis
from fitforge.services.engine import MuscleEngine
from fitforge.services.exercise_mapping import normalize_exercise_id
from fitforge.store.base import EngineStore

logger = logging.getLogger(__name__)


class WorkoutRecorder:
    def __init__(
        self,
        store: EngineStore,
        engine: MuscleEngine | None = None,
        progression_step_percent: float | None = None,
    ):
        self.store = store
        self.engine = engine or MuscleEngine()
        if progression_step_percent is None:
            progression_step_percent = get_settings().progression_step_percent
        self.progression_step_percent = progression_step_percent

    async def _snapshots(self, workout: CompletedWorkout):
        """Stored states and baselines for every muscle the workout touches."""
        states = {}
        baselines = {}
        for muscle in self.engine.affected_muscles(workout):
            state = await self.store.get_muscle_state(muscle)
            if state is not None:
                states[muscle] = state
            baseline = await self.store.get_baseline(muscle)
            if baseline is not None:
                baselines[muscle] = baseline
        return states, baselines

    async def save_workout(self, workout: CompletedWorkout, at: datetime | None = None) -> SaveResult:
        """Apply a completed workout and persist the workout plus every derived snapshot."""
        at = at or workout.performed_at or datetime.now(timezone.utc)
        if workout.performed_at is None:
            workout = workout.model_copy(update={"performed_at": at})

        states, baselines = await self._snapshots(workout)
        bests = {}
        for key in dict.fromkeys(normalize_exercise_id(e.exercise_id) for e in workout.exercises):
            best = await self.store.get_personal_best(key)
            if best is not None:
                bests[key] = best

        result = self.engine.apply_completed_workout(workout, states, baselines, bests, at)

        log = await self.store.save_workout(workout)
        for state in result.updated_states:
            await self.store.put_muscle_state(state)
        for baseline in result.updated_baselines:
            await self.store.put_baseline(baseline)
        for best in result.updated_personal_bests:
            await self.store.put_personal_best(best)
        if workout.template_id is not None:
            template = await self.store.increment_template_usage(workout.template_id, at)
            if template is None:
                logger.warning("Workout %s references unknown template %s", log.id, workout.template_id)

        if result.violations:
            logger.warning("Workout %s produced %d clamped fatigue value(s)", log.id, len(result.violations))
        logger.info(
            "Saved workout %s: %d muscle(s) updated, %d PR(s)", log.id, len(result.muscle_states), len(result.prs)
        )
        return result

    async def delete_workouts(self, workout_ids: Iterable[int], at: datetime | None = None) -> RecomputeResult:
        """Delete workouts, then rebuild states, baselines and bests from what remains."""
        ids = list(workout_ids)
        if not ids:
            raise ValueError("No workout ids given")
        at = at or datetime.now(timezone.utc)
        previous_states = {s.muscle: s for s in await self.store.list_muscle_states()}
        previous_bests = {b.exercise_id: b for b in await self.store.list_personal_bests()}
        baselines = {b.muscle: b for b in await self.store.list_baselines()}

        deleted = await self.store.delete_workouts(ids)
        remaining = await self.store.list_workouts()
        result = self.engine.recompute(remaining, baselines, previous_states, previous_bests, at)

        await self.store.replace_muscle_states(result.muscle_states)
        await self.store.replace_personal_bests(result.personal_bests)
        for baseline in result.baselines:
            await self.store.put_baseline(baseline)
        logger.info(
            "Deleted %d workout(s); %d muscle(s) and %d personal best(s) changed",
            len(deleted),
            len(result.affected_muscles),
            len(result.personal_best_changes),
        )
        return result

    async def read_muscle_states(self, as_of: datetime | None = None) -> list[MuscleReadiness]:
        return self.engine.read_states(await self.store.list_muscle_states(), as_of)

    async def recovery_timeline(self, muscle: str, as_of: datetime | None = None) -> RecoveryTimeline:
        state = await self.store.get_muscle_state(muscle) or MuscleState.cold(muscle)
        return self.engine.recovery_timeline(state, as_of)

    async def _category_inputs(self, category: str):
        history = await self.store.list_history(category)
        workouts = await self.store.list_workouts(category)
        states = {s.muscle: s for s in await self.store.list_muscle_states()}
        return history, workouts, states

    async def analyze(self, category: str, as_of: datetime | None = None) -> TemplateAnalysis:
        history, workouts, states = await self._category_inputs(category)
        return template_analysis.analyze(
            category,
            history,
            states,
            as_of or datetime.now(timezone.utc),
            workouts,
            self.engine.mapping,
            self.engine.policy,
        )

    async def recommend_next(self, category: str, as_of: datetime | None = None) -> str | None:
        return (await self.analyze(category, as_of)).recommended_variation

    async def compare_variations(
        self, category: str, variation_a: str, variation_b: str, as_of: datetime | None = None
    ) -> VariationComparison:
        history, workouts, states = await self._category_inputs(category)
        return template_analysis.compare_variations(
            category,
            variation_a,
            variation_b,
            history,
            states,
            as_of or datetime.now(timezone.utc),
            workouts,
            self.engine.mapping,
            self.engine.policy,
        )

    async def progression(self, exercise_id: str, as_of: datetime | None = None) -> ProgressionSuggestion | None:
        return progression.progression_for(
            await self.store.list_workouts(),
            exercise_id,
            as_of or datetime.now(timezone.utc),
            self.progression_step_percent,
        )

    async def forecast_workout(self, workout: CompletedWorkout, as_of: datetime | None = None) -> WorkoutForecast:
        """Forecast a planned workout against stored state; writes nothing."""
        states, baselines = await self._snapshots(workout)
        return self.engine.forecast_workout(workout, states, baselines, as_of)

    async def recommend_exercises(
        self,
        target_muscle: str,
        as_of: datetime | None = None,
        favorites: Iterable[str] = (),
        avoid: Iterable[str] = (),
        recent_workouts: int = 3,
    ) -> ExerciseRecommendations:
        """Rank library exercises for ``target_muscle``; variety looks at the last few workouts."""
        as_of = as_of or datetime.now(timezone.utc)
        states = {s.muscle: s for s in await self.store.list_muscle_states()}
        baselines = {b.muscle: b for b in await self.store.list_baselines()}
        history = [w for w in await self.store.list_workouts() if w.performed_at <= as_of]
        recent = [e.exercise_id for w in history[-recent_workouts:] for e in w.exercises] if recent_workouts > 0 else []
        return self.engine.recommend_exercises(
            target_muscle, states, baselines, as_of, recent_exercises=recent, favorites=favorites, avoid=avoid
        )
