"""Exercise -> muscle activation lookup.

Static table of common lifts over the 13 tracked muscle groups. Weights are
activation fractions in (0, 1] and need not sum to 1: a compound lift can
fully work several muscles at once. Lookups never fail; an unknown exercise
simply maps to no muscles and therefore contributes no fatigue.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

from fitforge.core.enums import ExerciseCategory, Muscle
from fitforge.schemas.muscle import MuscleActivation

M = Muscle
C = ExerciseCategory

# (category, {muscle: activation})
EXERCISE_LIBRARY: dict[str, tuple[ExerciseCategory, dict[Muscle, float]]] = {
    # === PUSH ===
    "bench press": (C.PUSH, {M.PECTORALIS: 0.85, M.TRICEPS: 0.45, M.DELTOIDS: 0.35, M.CORE: 0.10}),
    "incline bench press": (C.PUSH, {M.PECTORALIS: 0.75, M.DELTOIDS: 0.50, M.TRICEPS: 0.40, M.CORE: 0.10}),
    "dumbbell bench press": (C.PUSH, {M.PECTORALIS: 0.80, M.TRICEPS: 0.40, M.DELTOIDS: 0.35, M.CORE: 0.15}),
    "close grip bench press": (C.PUSH, {M.TRICEPS: 0.80, M.PECTORALIS: 0.55, M.DELTOIDS: 0.30}),
    "push up": (C.PUSH, {M.PECTORALIS: 0.70, M.TRICEPS: 0.50, M.DELTOIDS: 0.40, M.CORE: 0.35}),
    "dips": (C.PUSH, {M.TRICEPS: 0.75, M.PECTORALIS: 0.60, M.DELTOIDS: 0.35}),
    "overhead press": (C.PUSH, {M.DELTOIDS: 0.85, M.TRICEPS: 0.55, M.TRAPEZIUS: 0.25, M.CORE: 0.30}),
    "dumbbell shoulder press": (C.PUSH, {M.DELTOIDS: 0.85, M.TRICEPS: 0.50, M.TRAPEZIUS: 0.20, M.CORE: 0.20}),
    "lateral raise": (C.PUSH, {M.DELTOIDS: 0.90, M.TRAPEZIUS: 0.30}),
    "chest fly": (C.PUSH, {M.PECTORALIS: 0.85, M.DELTOIDS: 0.25}),
    "cable crossover": (C.PUSH, {M.PECTORALIS: 0.80, M.DELTOIDS: 0.20, M.CORE: 0.10}),
    "tricep pushdown": (C.PUSH, {M.TRICEPS: 0.90, M.FOREARMS: 0.15}),
    "overhead tricep extension": (C.PUSH, {M.TRICEPS: 0.90, M.CORE: 0.10}),
    # === PULL ===
    "pull up": (C.PULL, {M.LATS: 0.85, M.BICEPS: 0.50, M.RHOMBOIDS: 0.35, M.FOREARMS: 0.35, M.CORE: 0.15}),
    "chin up": (C.PULL, {M.LATS: 0.75, M.BICEPS: 0.65, M.RHOMBOIDS: 0.30, M.FOREARMS: 0.35}),
    "lat pulldown": (C.PULL, {M.LATS: 0.85, M.BICEPS: 0.45, M.RHOMBOIDS: 0.30, M.FOREARMS: 0.25}),
    "barbell row": (C.PULL, {M.LATS: 0.70, M.RHOMBOIDS: 0.65, M.TRAPEZIUS: 0.45, M.BICEPS: 0.40, M.CORE: 0.20}),
    "dumbbell row": (C.PULL, {M.LATS: 0.75, M.RHOMBOIDS: 0.55, M.BICEPS: 0.40, M.FOREARMS: 0.20}),
    "seated cable row": (C.PULL, {M.LATS: 0.70, M.RHOMBOIDS: 0.65, M.TRAPEZIUS: 0.40, M.BICEPS: 0.35}),
    "face pull": (C.PULL, {M.DELTOIDS: 0.60, M.RHOMBOIDS: 0.60, M.TRAPEZIUS: 0.50}),
    "shrug": (C.PULL, {M.TRAPEZIUS: 0.95, M.FOREARMS: 0.35}),
    "deadlift": (
        C.PULL,
        {M.HAMSTRINGS: 0.70, M.GLUTES: 0.70, M.TRAPEZIUS: 0.45, M.FOREARMS: 0.45, M.CORE: 0.45, M.LATS: 0.30},
    ),
    "bicep curl": (C.PULL, {M.BICEPS: 0.90, M.FOREARMS: 0.35}),
    "hammer curl": (C.PULL, {M.BICEPS: 0.70, M.FOREARMS: 0.65}),
    "wrist curl": (C.PULL, {M.FOREARMS: 0.95}),
    # === LEGS ===
    "squat": (C.LEGS, {M.QUADRICEPS: 0.90, M.GLUTES: 0.70, M.HAMSTRINGS: 0.30, M.CORE: 0.35, M.CALVES: 0.10}),
    "front squat": (C.LEGS, {M.QUADRICEPS: 0.95, M.GLUTES: 0.55, M.CORE: 0.45}),
    "leg press": (C.LEGS, {M.QUADRICEPS: 0.85, M.GLUTES: 0.55, M.HAMSTRINGS: 0.25}),
    "romanian deadlift": (C.LEGS, {M.HAMSTRINGS: 0.90, M.GLUTES: 0.65, M.CORE: 0.30, M.FOREARMS: 0.25}),
    "bulgarian split squat": (C.LEGS, {M.QUADRICEPS: 0.80, M.GLUTES: 0.70, M.HAMSTRINGS: 0.25, M.CORE: 0.20}),
    "lunge": (C.LEGS, {M.QUADRICEPS: 0.75, M.GLUTES: 0.65, M.HAMSTRINGS: 0.30, M.CALVES: 0.15}),
    "hip thrust": (C.LEGS, {M.GLUTES: 0.95, M.HAMSTRINGS: 0.40, M.CORE: 0.15}),
    "leg extension": (C.LEGS, {M.QUADRICEPS: 0.95}),
    "leg curl": (C.LEGS, {M.HAMSTRINGS: 0.95, M.CALVES: 0.15}),
    "calf raise": (C.LEGS, {M.CALVES: 0.95}),
    "kettlebell swing": (C.LEGS, {M.GLUTES: 0.80, M.HAMSTRINGS: 0.65, M.CORE: 0.40, M.DELTOIDS: 0.15}),
    # === CORE ===
    "plank": (C.CORE, {M.CORE: 0.90, M.DELTOIDS: 0.15}),
    "hanging leg raise": (C.CORE, {M.CORE: 0.90, M.FOREARMS: 0.30, M.LATS: 0.10}),
    "cable crunch": (C.CORE, {M.CORE: 0.95}),
    "ab wheel rollout": (C.CORE, {M.CORE: 0.90, M.LATS: 0.25, M.DELTOIDS: 0.20}),
    "russian twist": (C.CORE, {M.CORE: 0.85}),
}

_SEPARATORS = re.compile(r"[\s_\-]+")


def normalize_exercise_id(exercise_id: str) -> str:
    """'Bench-Press', 'bench_press' and ' bench  press ' all become 'bench press'."""
    return _SEPARATORS.sub(" ", (exercise_id or "").strip().lower()).strip()


class ExerciseMapping:
    """Read-only exercise -> activation table. Inject a custom table for calibrations."""

    def __init__(
        self,
        table: Mapping[str, tuple[ExerciseCategory | str | None, Mapping[Muscle | str, float]]] | None = None,
    ):
        source = EXERCISE_LIBRARY if table is None else table
        self._activations: dict[str, tuple[MuscleActivation, ...]] = {}
        self._categories: dict[str, str | None] = {}
        for exercise_id, (category, muscles) in source.items():
            key = normalize_exercise_id(exercise_id)
            ordered = sorted(
                (
                    MuscleActivation(muscle=_muscle_name(m), weight=w)
                    for m, w in muscles.items()
                ),
                key=lambda a: (-a.weight, a.muscle),
            )
            self._activations[key] = tuple(ordered)
            self._categories[key] = category.value if isinstance(category, ExerciseCategory) else category

    def __contains__(self, exercise_id: str) -> bool:
        return normalize_exercise_id(exercise_id) in self._activations

    def muscles_for(self, exercise_id: str) -> list[MuscleActivation]:
        """Muscles ordered by descending activation; [] for unknown exercises."""
        return list(self._activations.get(normalize_exercise_id(exercise_id), ()))

    def primary_muscles(self, exercise_id: str, threshold: float) -> list[str]:
        """Muscles at or above ``threshold``; the strongest one if none qualify."""
        activations = self.muscles_for(exercise_id)
        if not activations:
            return []
        primary = [a.muscle for a in activations if a.weight >= threshold]
        return primary or [activations[0].muscle]

    def category_for(self, exercise_id: str) -> str | None:
        return self._categories.get(normalize_exercise_id(exercise_id))

    def exercise_ids(self) -> list[str]:
        return sorted(self._activations)

    def muscles_for_many(self, exercise_ids: Iterable[str], threshold: float) -> list[str]:
        """Union of primary muscles, in first-seen order."""
        seen: dict[str, None] = {}
        for exercise_id in exercise_ids:
            for muscle in self.primary_muscles(exercise_id, threshold):
                seen.setdefault(muscle, None)
        return list(seen)


def _muscle_name(muscle: Muscle | str) -> str:
    return muscle.value if isinstance(muscle, Muscle) else str(muscle)


default_mapping = ExerciseMapping()


def muscles_for(exercise_id: str) -> list[MuscleActivation]:
    """Lookup against the default library."""
    return default_mapping.muscles_for(exercise_id)
