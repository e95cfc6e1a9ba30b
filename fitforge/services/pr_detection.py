"""PR detection: flag an exercise as a PR if its session volume beats the all-time best.

Records are keyed by the normalized exercise id, so "Bench Press",
"bench-press" and "bench_press" share one record. Results still carry the
spelling the workout used.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from datetime import datetime

from fitforge.schemas.personal_best import PersonalBest, PersonalBestChange, PRResult
from fitforge.schemas.workout import CompletedWorkout, ExerciseEntry, SetEntry
from fitforge.services.exercise_mapping import normalize_exercise_id


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def session_totals(sets: Iterable[SetEntry]) -> tuple[float, float]:
    """(total volume, best single set) over completed, well-formed sets."""
    volumes = [s.volume for s in sets if s.counts]
    if not volumes:
        return 0.0, 0.0
    return sum(volumes), max(volumes)


def normalized_best(best: PersonalBest) -> PersonalBest:
    """The record re-keyed under its normalized exercise id."""
    key = normalize_exercise_id(best.exercise_id)
    return best if best.exercise_id == key else best.model_copy(update={"exercise_id": key})


def group_sets_by_exercise(exercises: Iterable[ExerciseEntry]) -> dict[str, tuple[str, list[SetEntry]]]:
    """Sets per normalized exercise id with the first spelling seen; repeated entries merge."""
    grouped: dict[str, tuple[str, list[SetEntry]]] = {}
    for exercise in exercises:
        key = normalize_exercise_id(exercise.exercise_id)
        grouped.setdefault(key, (exercise.exercise_id, []))[1].extend(exercise.sets)
    return grouped


def detect(
    exercise_id: str,
    sets: Iterable[SetEntry],
    previous: PersonalBest | None,
    at: datetime,
) -> PRResult | None:
    """
    Compare this session's total volume to the stored best for the exercise.
    Returns a PRResult (carrying the PersonalBest to persist) or None.
    Ties are not records; nothing changes unless the volume strictly exceeds.
    """
    total, best_set = session_totals(sets)
    if total <= 0:
        return None
    key = normalize_exercise_id(exercise_id)

    # A stored best of 0 cannot anchor a percentage; treat it as no record.
    if previous is None or previous.best_session_volume <= 0:
        best = PersonalBest(
            exercise_id=key,
            best_session_volume=total,
            best_single_set=max(best_set, previous.best_single_set if previous else 0.0),
            achieved_at=at,
            updated_at=at,
        )
        return PRResult(exercise=exercise_id, is_first_time=True, new_volume=total, personal_best=best)

    if total <= previous.best_session_volume:
        return None

    prev_volume = previous.best_session_volume
    best = previous.model_copy(
        update={
            "exercise_id": key,
            "best_session_volume": total,
            "best_single_set": max(best_set, previous.best_single_set),
            "achieved_at": at,
            "updated_at": at,
        }
    )
    return PRResult(
        exercise=exercise_id,
        is_first_time=False,
        new_volume=total,
        previous_volume=prev_volume,
        percent_increase=round_half_up((total - prev_volume) / prev_volume * 100),
        personal_best=best,
    )


def rebuild_personal_bests(
    workouts: Iterable[CompletedWorkout],
    at: datetime,
) -> dict[str, PersonalBest]:
    """Bests recomputed from full history (used after workouts are deleted)."""
    bests: dict[str, PersonalBest] = {}
    for workout in sorted(workouts, key=lambda w: (w.performed_at is None, w.performed_at or at)):
        achieved = workout.performed_at or at
        # Same exercise may appear twice in one workout; totals are per session.
        for key, (_, sets) in group_sets_by_exercise(workout.exercises).items():
            total, best_set = session_totals(sets)
            if total <= 0:
                continue
            existing = bests.get(key)
            if existing is None:
                bests[key] = PersonalBest(
                    exercise_id=key,
                    best_session_volume=total,
                    best_single_set=best_set,
                    achieved_at=achieved,
                    updated_at=at,
                )
                continue
            update: dict = {"best_single_set": max(existing.best_single_set, best_set)}
            if total > existing.best_session_volume:
                update.update(best_session_volume=total, achieved_at=achieved)
            bests[key] = existing.model_copy(update=update)
    return bests


def diff_personal_bests(
    old: Mapping[str, PersonalBest],
    new: Mapping[str, PersonalBest],
) -> list[PersonalBestChange]:
    """Records that changed (or vanished) between two snapshots."""
    changes = []
    for exercise_id in sorted(set(old) | set(new)):
        before, after = old.get(exercise_id), new.get(exercise_id)
        if (
            before is not None
            and after is not None
            and before.best_session_volume == after.best_session_volume
            and before.best_single_set == after.best_single_set
        ):
            continue
        changes.append(
            PersonalBestChange(
                exercise_id=exercise_id,
                old_best_session_volume=before.best_session_volume if before else None,
                new_best_session_volume=after.best_session_volume if after else None,
                old_best_single_set=before.best_single_set if before else None,
                new_best_single_set=after.best_single_set if after else None,
            )
        )
    return changes
