from fitforge.core.enums import ProgressionMethod
from fitforge.schemas.progression import Performance
from fitforge.services import progression

from tests.conftest import days, make_workout


def test_first_session_defaults_to_reps(at):
    history = [make_workout(("bench press", [(100, 10), (90, 12)]), performed_at=at)]
    suggestion = progression.progression_for(history, "Bench Press", at + days(3))
    assert suggestion.last_method == ProgressionMethod.NONE
    assert suggestion.suggested == ProgressionMethod.REPS
    assert suggestion.last_performance.weight == 100
    assert suggestion.weight_option.weight == 103
    assert suggestion.reps_option.reps == 11
    assert suggestion.days_ago == 3


def test_alternates_after_reps_progression(at):
    history = [
        make_workout(("bench press", [(100, 10)]), performed_at=at),
        make_workout(("bench press", [(100, 11)]), performed_at=at + days(2)),
    ]
    suggestion = progression.progression_for(history, "bench press", at + days(4))
    assert suggestion.last_method == ProgressionMethod.REPS
    assert suggestion.suggested == ProgressionMethod.WEIGHT
    assert suggestion.reps_option.reps == 12


def test_detect_method():
    prev = Performance(weight=100, reps=10, performed_at="2025-01-01T00:00:00Z")
    heavier = Performance(weight=105, reps=10, performed_at="2025-01-03T00:00:00Z")
    both = Performance(weight=105, reps=12, performed_at="2025-01-03T00:00:00Z")
    assert progression.detect_method(heavier, prev) == ProgressionMethod.WEIGHT
    assert progression.detect_method(both, prev) == ProgressionMethod.NONE


def test_unknown_exercise_has_no_suggestion(at):
    assert progression.progression_for([], "squat", at) is None
