"""Dict-backed store for direct (in-process) use and tests."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from fitforge.core.exceptions import WorkoutNotFoundError
from fitforge.schemas.muscle import MuscleBaseline, MuscleState
from fitforge.schemas.personal_best import PersonalBest
from fitforge.schemas.template import WorkoutTemplate
from fitforge.schemas.workout import CompletedWorkout, WorkoutLog
from fitforge.services.exercise_mapping import normalize_exercise_id
from fitforge.services.pr_detection import normalized_best


class MemoryStore:
    """Single-process store. Values are immutable, so reads hand out the stored objects."""

    def __init__(self):
        self.muscle_states: dict[str, MuscleState] = {}
        self.baselines: dict[str, MuscleBaseline] = {}
        self.personal_bests: dict[str, PersonalBest] = {}
        self.templates: dict[int, WorkoutTemplate] = {}
        self.workouts: dict[int, WorkoutLog] = {}
        self._next_template_id = 1
        self._next_workout_id = 1

    async def get_muscle_state(self, muscle: str) -> MuscleState | None:
        return self.muscle_states.get(muscle)

    async def get_baseline(self, muscle: str) -> MuscleBaseline | None:
        return self.baselines.get(muscle)

    async def get_personal_best(self, exercise_id: str) -> PersonalBest | None:
        return self.personal_bests.get(normalize_exercise_id(exercise_id))

    async def list_history(self, category: str) -> list[WorkoutTemplate]:
        wanted = category.casefold()
        return [t for t in self.templates.values() if t.category.casefold() == wanted]

    async def list_muscle_states(self) -> list[MuscleState]:
        return list(self.muscle_states.values())

    async def list_baselines(self) -> list[MuscleBaseline]:
        return list(self.baselines.values())

    async def list_personal_bests(self) -> list[PersonalBest]:
        return list(self.personal_bests.values())

    async def list_workouts(self, category: str | None = None) -> list[WorkoutLog]:
        workouts = sorted(self.workouts.values(), key=lambda w: (w.performed_at, w.id))
        if category is None:
            return workouts
        return [w for w in workouts if (w.category or "").casefold() == category.casefold()]

    async def put_muscle_state(self, state: MuscleState) -> None:
        self.muscle_states[state.muscle] = state

    async def put_baseline(self, baseline: MuscleBaseline) -> None:
        self.baselines[baseline.muscle] = baseline

    async def put_personal_best(self, best: PersonalBest) -> None:
        best = normalized_best(best)
        self.personal_bests[best.exercise_id] = best

    async def replace_muscle_states(self, states: Iterable[MuscleState]) -> None:
        self.muscle_states = {s.muscle: s for s in states}

    async def replace_personal_bests(self, bests: Iterable[PersonalBest]) -> None:
        self.personal_bests = {b.exercise_id: b for b in map(normalized_best, bests)}

    async def put_template(self, template: WorkoutTemplate) -> WorkoutTemplate:
        now = datetime.now(timezone.utc)
        if template.id is None:
            template = template.model_copy(
                update={"id": self._next_template_id, "created_at": template.created_at or now}
            )
            self._next_template_id += 1
        template = template.model_copy(update={"updated_at": now})
        self.templates[template.id] = template
        return template

    async def increment_template_usage(self, template_id: int, at: datetime) -> WorkoutTemplate | None:
        template = self.templates.get(template_id)
        if template is None:
            return None
        template = template.model_copy(
            update={"times_used": template.times_used + 1, "last_used_at": at, "updated_at": at}
        )
        self.templates[template_id] = template
        return template

    async def save_workout(self, workout: CompletedWorkout) -> WorkoutLog:
        log = WorkoutLog(
            **workout.model_dump(exclude={"id", "performed_at"}),
            id=self._next_workout_id,
            performed_at=workout.performed_at or datetime.now(timezone.utc),
        )
        self.workouts[log.id] = log
        self._next_workout_id += 1
        return log

    async def delete_workouts(self, workout_ids: Iterable[int]) -> list[WorkoutLog]:
        ids = list(dict.fromkeys(workout_ids))
        missing = [i for i in ids if i not in self.workouts]
        if missing:
            raise WorkoutNotFoundError(missing)
        return [self.workouts.pop(i) for i in ids]
