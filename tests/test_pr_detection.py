from fitforge.schemas.personal_best import PersonalBest
from fitforge.schemas.workout import SetEntry
from fitforge.services import pr_detection

from tests.conftest import T0, days, make_workout


def sets(*pairs, completed=True):
    return [SetEntry(weight=w, reps=r, completed=completed) for w, r in pairs]


def test_first_time_pr(at):
    result = pr_detection.detect("Bench Press", sets((100, 10)), None, at)
    assert result.is_first_time
    assert result.new_volume == 1000
    assert result.percent_increase is None
    assert result.to_payload() == {"exercise": "Bench Press", "isFirstTime": True, "newVolume": 1000.0}
    assert result.personal_best.best_session_volume == 1000
    assert result.personal_best.best_single_set == 1000


def test_improvement_reports_rounded_percent(at):
    previous = PersonalBest(exercise_id="Bench Press", best_session_volume=1000, best_single_set=1000)
    result = pr_detection.detect("Bench Press", sets((110, 10)), previous, at)
    assert not result.is_first_time
    assert result.previous_volume == 1000
    assert result.percent_increase == 10
    assert result.to_payload()["percentIncrease"] == 10


def test_percent_rounds_half_up(at):
    previous = PersonalBest(exercise_id="Row", best_session_volume=8)
    # +12.5% rounds up, not to even
    result = pr_detection.detect("Row", sets((9, 1)), previous, at)
    assert result.percent_increase == 13


def test_tie_is_not_a_pr(at):
    previous = PersonalBest(exercise_id="Bench Press", best_session_volume=1000)
    assert pr_detection.detect("Bench Press", sets((100, 10)), previous, at) is None


def test_lower_volume_is_not_a_pr(at):
    previous = PersonalBest(exercise_id="Bench Press", best_session_volume=1000)
    assert pr_detection.detect("Bench Press", sets((90, 10)), previous, at) is None


def test_incomplete_sets_are_excluded(at):
    session = sets((100, 10)) + sets((300, 10), completed=False)
    result = pr_detection.detect("Bench Press", session, None, at)
    assert result.new_volume == 1000


def test_zero_stored_best_counts_as_first_time(at):
    previous = PersonalBest(exercise_id="Squat", best_session_volume=0)
    result = pr_detection.detect("Squat", sets((100, 5)), previous, at)
    assert result.is_first_time
    assert result.percent_increase is None


def test_no_valid_volume_gives_nothing(at):
    assert pr_detection.detect("Squat", sets((100, 0)), None, at) is None


def test_rebuild_and_diff(at):
    history = [
        make_workout(("squat", [(100, 5)]), performed_at=at),
        make_workout(("squat", [(120, 5)]), ("bench press", [(80, 8)]), performed_at=at + days(2)),
    ]
    bests = pr_detection.rebuild_personal_bests(history, T0)
    assert bests["squat"].best_session_volume == 600
    assert bests["squat"].achieved_at == at + days(2)

    remaining = pr_detection.rebuild_personal_bests(history[:1], T0)
    changes = pr_detection.diff_personal_bests(bests, remaining)
    by_id = {c.exercise_id: c for c in changes}
    assert by_id["squat"].old_best_session_volume == 600
    assert by_id["squat"].new_best_session_volume == 500
    assert by_id["bench press"].new_best_session_volume is None


def test_records_use_normalized_ids(at):
    result = pr_detection.detect("Bench-Press", sets((100, 10)), None, at)
    assert result.exercise == "Bench-Press"
    assert result.personal_best.exercise_id == "bench press"

    history = [make_workout(("Bench Press", [(100, 10)]), ("bench_press", [(50, 10)]), performed_at=at)]
    bests = pr_detection.rebuild_personal_bests(history, T0)
    assert list(bests) == ["bench press"]
    assert bests["bench press"].best_session_volume == 1500
    assert bests["bench press"].best_single_set == 1000
