"""ORM models - import all so Base.metadata is complete for migrations."""

from fitforge.models.muscle_state import MuscleBaselineRow, MuscleStateRow
from fitforge.models.personal_best import PersonalBestRow
from fitforge.models.template import WorkoutTemplateRow
from fitforge.models.workout import Workout, WorkoutSet

__all__ = [
    "MuscleBaselineRow",
    "MuscleStateRow",
    "PersonalBestRow",
    "Workout",
    "WorkoutSet",
    "WorkoutTemplateRow",
]
