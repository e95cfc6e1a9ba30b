import pytest

from fitforge.core.enums import BottleneckSeverity
from fitforge.schemas.muscle import MuscleState
from fitforge.services import fatigue

from tests.conftest import days, make_workout


def test_apply_fresh_workout(engine, at):
    result = engine.apply_completed_workout(make_workout(("bench press", [(100, 10)])), {}, {}, {}, at)

    by_muscle = {s.muscle: s for s in result.muscle_states}
    assert list(by_muscle) == ["Core", "Deltoids", "Pectoralis", "Triceps"]
    assert by_muscle["Pectoralis"].previous_fatigue == 0
    assert by_muscle["Pectoralis"].fatigue_percent == pytest.approx(8.5)
    assert by_muscle["Pectoralis"].ready
    assert not by_muscle["Pectoralis"].exceeded_baseline

    assert result.to_payload()["prs"] == [{"exercise": "bench press", "isFirstTime": True, "newVolume": 1000.0}]
    learned = {b.muscle: b.system_learned_max for b in result.updated_baselines}
    assert learned["Pectoralis"] == 10000.0
    assert result.baseline_suggestions == []
    assert result.violations == []


def test_repeat_session_is_measured_against_the_same_baseline(engine, at):
    first = engine.apply_completed_workout(make_workout(("bench press", [(100, 10)])), {}, {}, {}, at)
    states = {s.muscle: s for s in first.updated_states}
    baselines = {b.muscle: b for b in first.updated_baselines}
    bests = {b.exercise_id: b for b in first.updated_personal_bests}

    later = at + days(2)
    second = engine.apply_completed_workout(
        make_workout(("bench press", [(110, 10)]), performed_at=later), states, baselines, bests, later
    )
    pecs = next(s for s in second.muscle_states if s.muscle == "Pectoralis")
    assert pecs.previous_fatigue == pytest.approx(5.1)
    assert pecs.fatigue_delta == pytest.approx(9.35, abs=0.06)
    assert pecs.fatigue_percent == pytest.approx(14.45, abs=0.06)
    assert pecs.baseline == 10000
    assert not pecs.exceeded_baseline

    assert second.prs[0].percent_increase == 10
    assert second.baseline_suggestions == []


def test_session_beyond_default_raises_learned_baseline(engine, at):
    result = engine.apply_completed_workout(make_workout(("squat", [(300, 40)])), {}, {}, {}, at)
    learned = {b.muscle: b.system_learned_max for b in result.updated_baselines}
    assert learned["Quadriceps"] == 10800.0
    assert learned["Glutes"] == 10000.0
    quads = next(s for s in result.muscle_states if s.muscle == "Quadriceps")
    assert quads.fatigue_percent == 100.0
    assert quads.exceeded_baseline


def test_corrupt_stored_state_is_reported_once(engine, at):
    stored = {"Pectoralis": MuscleState(muscle="Pectoralis", fatigue_percent=150.0, last_trained=at)}
    result = engine.apply_completed_workout(make_workout(("bench press", [(100, 10)])), stored, {}, {}, at)
    assert len(result.violations) == 1
    assert result.violations[0].muscle == "Pectoralis"
    pecs = next(s for s in result.muscle_states if s.muscle == "Pectoralis")
    assert pecs.previous_fatigue == 100.0
    assert pecs.fatigue_percent == 100.0


def test_spelling_variants_share_one_personal_best(engine, at):
    first = engine.apply_completed_workout(make_workout(("Bench Press", [(100, 10)])), {}, {}, {}, at)
    bests = {b.exercise_id: b for b in first.updated_personal_bests}
    assert list(bests) == ["bench press"]
    assert first.prs[0].exercise == "Bench Press"

    later = at + days(1)
    second = engine.apply_completed_workout(
        make_workout(("bench-press", [(100, 10)]), performed_at=later), {}, {}, bests, later
    )
    assert second.prs == []

    third = engine.apply_completed_workout(
        make_workout(("bench_press", [(100, 11)]), performed_at=later), {}, {}, bests, later
    )
    assert not third.prs[0].is_first_time
    assert third.prs[0].percent_increase == 10


def test_save_and_recompute_agree_on_mixed_spellings(engine, at):
    workout = make_workout(("Bench Press", [(100, 10)]), ("bench-press", [(100, 10)]))
    saved = engine.apply_completed_workout(workout, {}, {}, {}, at)
    assert len(saved.prs) == 1
    assert saved.prs[0].new_volume == 2000

    rebuilt = engine.recompute([workout], {}, {}, {}, at)
    assert [(b.exercise_id, b.best_session_volume) for b in rebuilt.personal_bests] == [("bench press", 2000)]
    assert [(b.exercise_id, b.best_session_volume) for b in saved.updated_personal_bests] == [("bench press", 2000)]


def test_forecast_flags_bottlenecks_without_touching_state(engine, at):
    stored = {
        "Pectoralis": MuscleState(muscle="Pectoralis", fatigue_percent=95.0, last_trained=at),
        "Triceps": MuscleState(muscle="Triceps", fatigue_percent=78.0, last_trained=at),
    }
    forecast = engine.forecast_workout(make_workout(("bench press", [(100, 10)])), stored, {}, at)

    by_muscle = {m.muscle: m for m in forecast.muscles}
    assert by_muscle["Pectoralis"].projected_fatigue == pytest.approx(103.5)
    assert by_muscle["Pectoralis"].forecast_fatigue_percent == 100.0
    assert by_muscle["Triceps"].projected_fatigue == pytest.approx(82.5)
    assert by_muscle["Core"].current_fatigue == 0.0
    assert [(b.muscle, b.severity) for b in forecast.bottlenecks] == [
        ("Pectoralis", BottleneckSeverity.CRITICAL),
        ("Triceps", BottleneckSeverity.WARNING),
    ]
    assert not forecast.is_safe
    assert stored["Pectoralis"].fatigue_percent == 95.0


def test_unmapped_and_invalid_input_is_reported(engine, at):
    workout = make_workout(("bench press", [(100, 10), (100, -2)]), ("juggling", [(5, 20)]))
    result = engine.apply_completed_workout(workout, {}, {}, {}, at)
    assert result.skipped_sets == 1
    assert result.unmapped_exercises == ["juggling"]
    # Unmapped exercises still count toward personal bests.
    assert {pr.exercise for pr in result.prs} == {"bench press", "juggling"}


def test_read_states_decays_lazily(engine, at):
    result = engine.apply_completed_workout(make_workout(("bench press", [(100, 10)])), {}, {}, {}, at)
    readouts = {r.muscle: r for r in engine.read_states(result.updated_states, at + days(1))}
    assert readouts["Pectoralis"].fatigue_percent == pytest.approx(6.8)
    assert readouts["Pectoralis"].as_of == at + days(1)


def test_recompute_replays_remaining_history(engine, at):
    bench = make_workout(("bench press", [(100, 10)]), performed_at=at)
    squat = make_workout(("squat", [(100, 5)]), performed_at=at + days(1))

    first = engine.apply_completed_workout(bench, {}, {}, {}, at)
    states = {s.muscle: s for s in first.updated_states}
    baselines = {b.muscle: b for b in first.updated_baselines}
    bests = {b.exercise_id: b for b in first.updated_personal_bests}
    second = engine.apply_completed_workout(squat, states, baselines, bests, at + days(1))
    states.update({s.muscle: s for s in second.updated_states})
    baselines.update({b.muscle: b for b in second.updated_baselines})
    bests.update({b.exercise_id: b for b in second.updated_personal_bests})

    result = engine.recompute([bench], baselines, states, bests, at + days(2))

    rebuilt = {s.muscle: s for s in result.muscle_states}
    assert rebuilt["Pectoralis"].fatigue_percent == pytest.approx(8.5)
    assert rebuilt["Pectoralis"].last_trained == at
    assert rebuilt["Quadriceps"].fatigue_percent == 0.0
    assert rebuilt["Quadriceps"].last_trained is None
    assert "Quadriceps" in result.affected_muscles

    assert [b.exercise_id for b in result.personal_bests] == ["bench press"]
    assert [c.exercise_id for c in result.personal_best_changes] == ["squat"]
    rebuilt_baselines = {b.muscle: b.system_learned_max for b in result.baselines}
    assert rebuilt_baselines["Quadriceps"] == 10000.0
    assert rebuilt_baselines["Pectoralis"] == 10000.0


def test_recompute_matches_sequential_application(engine, at):
    workouts = [
        make_workout(("squat", [(100, 5)]), performed_at=at),
        make_workout(("leg press", [(200, 10)]), performed_at=at + days(1)),
    ]
    states, baselines = {}, {}
    for workout in workouts:
        result = engine.apply_completed_workout(workout, states, baselines, {}, workout.performed_at)
        states.update({s.muscle: s for s in result.updated_states})
        baselines.update({b.muscle: b for b in result.updated_baselines})

    replayed = engine.recompute(workouts, baselines, states, {}, at + days(2))
    for state in replayed.muscle_states:
        expected = fatigue.decay(states[state.muscle], at + days(2))
        assert fatigue.decay(state, at + days(2)) == pytest.approx(expected)
