"""Storage collaborator interface the engine reads snapshots from and writes them to.

Implementations are responsible for serializing concurrent writers to the
same muscle / exercise key (a transaction per logical workout save).
Personal bests are keyed by the normalized exercise id.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from fitforge.schemas.muscle import MuscleBaseline, MuscleState
from fitforge.schemas.personal_best import PersonalBest
from fitforge.schemas.template import WorkoutTemplate
from fitforge.schemas.workout import CompletedWorkout, WorkoutLog


class EngineStore(Protocol):
    # Inbound
    async def get_muscle_state(self, muscle: str) -> MuscleState | None: ...

    async def get_baseline(self, muscle: str) -> MuscleBaseline | None: ...

    async def get_personal_best(self, exercise_id: str) -> PersonalBest | None: ...

    async def list_history(self, category: str) -> list[WorkoutTemplate]: ...

    async def list_muscle_states(self) -> list[MuscleState]: ...

    async def list_baselines(self) -> list[MuscleBaseline]: ...

    async def list_personal_bests(self) -> list[PersonalBest]: ...

    async def list_workouts(self, category: str | None = None) -> list[WorkoutLog]: ...

    # Outbound
    async def put_muscle_state(self, state: MuscleState) -> None: ...

    async def put_baseline(self, baseline: MuscleBaseline) -> None: ...

    async def put_personal_best(self, best: PersonalBest) -> None: ...

    async def replace_muscle_states(self, states: Iterable[MuscleState]) -> None: ...

    async def replace_personal_bests(self, bests: Iterable[PersonalBest]) -> None: ...

    async def put_template(self, template: WorkoutTemplate) -> WorkoutTemplate: ...

    async def increment_template_usage(self, template_id: int, at: datetime) -> WorkoutTemplate | None: ...

    async def save_workout(self, workout: CompletedWorkout) -> WorkoutLog: ...

    async def delete_workouts(self, workout_ids: Iterable[int]) -> list[WorkoutLog]: ...
