"""Shared fixtures: a fixed clock, default policy/engine and workout builders."""

from datetime import datetime, timedelta, timezone

import pytest

from fitforge.core.config import Settings
from fitforge.schemas.policy import FatiguePolicy
from fitforge.schemas.workout import CompletedWorkout, ExerciseEntry, SetEntry
from fitforge.services.engine import MuscleEngine
from fitforge.store.memory import MemoryStore

T0 = datetime(2025, 3, 3, 18, 0, tzinfo=timezone.utc)


def make_workout(*exercises, performed_at=T0, category=None, variation=None, template_id=None, completed=True):
    """make_workout(("bench press", [(100, 10), (100, 8)]), ...)"""
    return CompletedWorkout(
        exercises=[
            ExerciseEntry(
                exercise_id=exercise_id,
                sets=[
                    SetEntry(weight=w, reps=r, completed=completed, set_number=i + 1)
                    for i, (w, r) in enumerate(sets)
                ],
            )
            for exercise_id, sets in exercises
        ],
        performed_at=performed_at,
        category=category,
        variation=variation,
        template_id=template_id,
    )


def days(n: float) -> timedelta:
    return timedelta(days=n)


@pytest.fixture
def at():
    return T0


@pytest.fixture
def policy():
    return FatiguePolicy()


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def engine(policy, settings):
    return MuscleEngine(policy=policy, settings=settings)


@pytest.fixture
def store():
    return MemoryStore()
