"""SQLAlchemy-backed store over an AsyncSession.

The store only flushes; the caller owns the transaction (see
``fitforge.db.session.session_scope``), so a whole workout save commits or
rolls back as one unit.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fitforge.core.exceptions import WorkoutNotFoundError
from fitforge.models.muscle_state import MuscleBaselineRow, MuscleStateRow
from fitforge.models.personal_best import PersonalBestRow
from fitforge.models.template import WorkoutTemplateRow
from fitforge.models.workout import Workout, WorkoutSet
from fitforge.schemas.muscle import MuscleBaseline, MuscleState
from fitforge.schemas.personal_best import PersonalBest
from fitforge.schemas.template import WorkoutTemplate
from fitforge.schemas.workout import CompletedWorkout, ExerciseEntry, SetEntry, WorkoutLog
from fitforge.services.exercise_mapping import normalize_exercise_id
from fitforge.services.fatigue import as_utc
from fitforge.services.pr_detection import normalized_best


def _utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    return as_utc(value) if value is not None else None


def _state(row: MuscleStateRow) -> MuscleState:
    return MuscleState(
        muscle=row.muscle,
        fatigue_percent=row.fatigue_percent,
        last_trained=_utc(row.last_trained),
        updated_at=_utc(row.updated_at),
    )


def _baseline(row: MuscleBaselineRow) -> MuscleBaseline:
    return MuscleBaseline(
        muscle=row.muscle,
        system_learned_max=row.system_learned_max,
        user_override=row.user_override,
        updated_at=_utc(row.updated_at),
    )


def _best(row: PersonalBestRow) -> PersonalBest:
    return PersonalBest(
        exercise_id=row.exercise_id,
        best_session_volume=row.best_session_volume,
        best_single_set=row.best_single_set,
        achieved_at=_utc(row.achieved_at),
        updated_at=_utc(row.updated_at),
    )


def _template(row: WorkoutTemplateRow) -> WorkoutTemplate:
    return WorkoutTemplate(
        id=row.id,
        name=row.name,
        category=row.category,
        variation=row.variation,
        exercise_ids=list(row.exercise_ids or []),
        times_used=row.times_used,
        is_favorite=row.is_favorite,
        created_at=_utc(row.created_at),
        updated_at=_utc(row.updated_at),
        last_used_at=_utc(row.last_used_at),
    )


def _workout(row: Workout) -> WorkoutLog:
    """Regroup flat set rows into exercise entries, keeping first-seen exercise order."""
    exercises: dict[str, list[SetEntry]] = {}
    for s in sorted(row.sets, key=lambda x: (x.position, x.id)):
        exercises.setdefault(s.exercise_id, []).append(
            SetEntry(
                weight=s.weight,
                reps=s.reps,
                completed=s.completed,
                to_failure=s.to_failure,
                set_number=s.set_number,
                performed_at=_utc(s.performed_at),
            )
        )
    return WorkoutLog(
        id=row.id,
        performed_at=as_utc(row.performed_at),
        category=row.category,
        variation=row.variation,
        template_id=row.template_id,
        exercises=[ExerciseEntry(exercise_id=e, sets=sets) for e, sets in exercises.items()],
    )


class SQLAlchemyStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_muscle_state(self, muscle: str) -> MuscleState | None:
        row = await self.session.get(MuscleStateRow, muscle)
        return _state(row) if row else None

    async def get_baseline(self, muscle: str) -> MuscleBaseline | None:
        row = await self.session.get(MuscleBaselineRow, muscle)
        return _baseline(row) if row else None

    async def get_personal_best(self, exercise_id: str) -> PersonalBest | None:
        row = await self.session.get(PersonalBestRow, normalize_exercise_id(exercise_id))
        return _best(row) if row else None

    async def list_history(self, category: str) -> list[WorkoutTemplate]:
        result = await self.session.execute(select(WorkoutTemplateRow).order_by(WorkoutTemplateRow.id))
        wanted = category.casefold()
        return [_template(r) for r in result.scalars().all() if r.category.casefold() == wanted]

    async def list_muscle_states(self) -> list[MuscleState]:
        result = await self.session.execute(select(MuscleStateRow).order_by(MuscleStateRow.muscle))
        return [_state(r) for r in result.scalars().all()]

    async def list_baselines(self) -> list[MuscleBaseline]:
        result = await self.session.execute(select(MuscleBaselineRow).order_by(MuscleBaselineRow.muscle))
        return [_baseline(r) for r in result.scalars().all()]

    async def list_personal_bests(self) -> list[PersonalBest]:
        result = await self.session.execute(select(PersonalBestRow).order_by(PersonalBestRow.exercise_id))
        return [_best(r) for r in result.scalars().all()]

    async def list_workouts(self, category: str | None = None) -> list[WorkoutLog]:
        result = await self.session.execute(
            select(Workout).options(selectinload(Workout.sets)).order_by(Workout.performed_at, Workout.id)
        )
        workouts = [_workout(r) for r in result.scalars().all()]
        if category is None:
            return workouts
        return [w for w in workouts if (w.category or "").casefold() == category.casefold()]

    async def put_muscle_state(self, state: MuscleState) -> None:
        row = await self.session.get(MuscleStateRow, state.muscle)
        if row is None:
            row = MuscleStateRow(muscle=state.muscle)
            self.session.add(row)
        row.fatigue_percent = state.fatigue_percent
        row.last_trained = state.last_trained
        row.updated_at = state.updated_at or datetime.now(timezone.utc)
        await self.session.flush()

    async def put_baseline(self, baseline: MuscleBaseline) -> None:
        row = await self.session.get(MuscleBaselineRow, baseline.muscle)
        if row is None:
            row = MuscleBaselineRow(muscle=baseline.muscle)
            self.session.add(row)
        row.system_learned_max = baseline.system_learned_max
        row.user_override = baseline.user_override
        row.updated_at = baseline.updated_at or datetime.now(timezone.utc)
        await self.session.flush()

    async def put_personal_best(self, best: PersonalBest) -> None:
        best = normalized_best(best)
        row = await self.session.get(PersonalBestRow, best.exercise_id)
        if row is None:
            row = PersonalBestRow(exercise_id=best.exercise_id)
            self.session.add(row)
        row.best_session_volume = best.best_session_volume
        row.best_single_set = best.best_single_set
        row.achieved_at = best.achieved_at
        row.updated_at = best.updated_at or datetime.now(timezone.utc)
        await self.session.flush()

    async def replace_muscle_states(self, states: Iterable[MuscleState]) -> None:
        states = list(states)
        keep = {s.muscle for s in states}
        result = await self.session.execute(select(MuscleStateRow))
        for row in result.scalars().all():
            if row.muscle not in keep:
                await self.session.delete(row)
        for state in states:
            await self.put_muscle_state(state)
        await self.session.flush()

    async def replace_personal_bests(self, bests: Iterable[PersonalBest]) -> None:
        bests = [normalized_best(b) for b in bests]
        keep = {b.exercise_id for b in bests}
        result = await self.session.execute(select(PersonalBestRow))
        for row in result.scalars().all():
            if row.exercise_id not in keep:
                await self.session.delete(row)
        for best in bests:
            await self.put_personal_best(best)
        await self.session.flush()

    async def put_template(self, template: WorkoutTemplate) -> WorkoutTemplate:
        now = datetime.now(timezone.utc)
        row = await self.session.get(WorkoutTemplateRow, template.id) if template.id is not None else None
        if row is None:
            row = WorkoutTemplateRow(created_at=template.created_at or now)
            if template.id is not None:
                row.id = template.id
            self.session.add(row)
        row.name = template.name
        row.category = template.category
        row.variation = template.variation
        row.exercise_ids = list(template.exercise_ids)
        row.times_used = template.times_used
        row.is_favorite = template.is_favorite
        row.last_used_at = template.last_used_at
        row.updated_at = now
        await self.session.flush()
        await self.session.refresh(row)
        return _template(row)

    async def increment_template_usage(self, template_id: int, at: datetime) -> WorkoutTemplate | None:
        row = await self.session.get(WorkoutTemplateRow, template_id)
        if row is None:
            return None
        row.times_used = (row.times_used or 0) + 1
        row.last_used_at = at
        row.updated_at = at
        await self.session.flush()
        return _template(row)

    async def save_workout(self, workout: CompletedWorkout) -> WorkoutLog:
        row = Workout(
            performed_at=workout.performed_at or datetime.now(timezone.utc),
            category=workout.category,
            variation=workout.variation,
            template_id=workout.template_id,
        )
        position = 0
        for exercise in workout.exercises:
            for s in exercise.sets:
                row.sets.append(
                    WorkoutSet(
                        exercise_id=exercise.exercise_id,
                        position=position,
                        set_number=s.set_number,
                        weight=s.weight,
                        reps=s.reps,
                        completed=s.completed,
                        to_failure=s.to_failure,
                        performed_at=s.performed_at,
                    )
                )
                position += 1
        self.session.add(row)
        await self.session.flush()
        return _workout(row)

    async def delete_workouts(self, workout_ids: Iterable[int]) -> list[WorkoutLog]:
        ids = list(dict.fromkeys(workout_ids))
        result = await self.session.execute(
            select(Workout).options(selectinload(Workout.sets)).where(Workout.id.in_(ids))
        )
        rows = {r.id: r for r in result.scalars().all()}
        missing = [i for i in ids if i not in rows]
        if missing:
            raise WorkoutNotFoundError(missing)
        deleted = [_workout(rows[i]) for i in ids]
        for row in rows.values():
            await self.session.delete(row)
        await self.session.flush()
        return deleted
