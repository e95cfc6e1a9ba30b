from datetime import timedelta

import pytest

from fitforge.core.enums import DecayCurve, RecoveryStatus
from fitforge.core.exceptions import ComputationInvariantViolation
from fitforge.schemas.muscle import MuscleState
from fitforge.schemas.policy import FatiguePolicy
from fitforge.schemas.workout import SetEntry
from fitforge.services import fatigue
from fitforge.services.exercise_mapping import default_mapping, muscles_for

from tests.conftest import make_workout


def test_set_delta_against_default_baseline():
    deltas = fatigue.apply_set(SetEntry(weight=100, reps=10), muscles_for("bench press"))
    # 1000 volume × 0.85 / 10000 × 100
    assert deltas["Pectoralis"] == pytest.approx(8.5)
    assert deltas["Triceps"] == pytest.approx(4.5)


def test_failure_multiplier_applies():
    plain = fatigue.apply_set(SetEntry(weight=100, reps=10), muscles_for("bench press"))
    failed = fatigue.apply_set(SetEntry(weight=100, reps=10, to_failure=True), muscles_for("bench press"))
    assert failed["Pectoralis"] == pytest.approx(plain["Pectoralis"] * 1.25)


def test_learned_baseline_used_when_present():
    deltas = fatigue.apply_set(SetEntry(weight=100, reps=10), muscles_for("leg extension"), {"Quadriceps": 950.0})
    assert deltas["Quadriceps"] == pytest.approx(100.0)


@pytest.mark.parametrize(
    "set_entry",
    [
        SetEntry(weight=-5, reps=10),
        SetEntry(weight=100, reps=0),
        SetEntry(weight=100, reps=-3),
        SetEntry(weight=0, reps=10),
        SetEntry(weight=100, reps=10, completed=False),
    ],
)
def test_invalid_or_incomplete_sets_add_nothing(set_entry):
    assert fatigue.apply_set(set_entry, muscles_for("bench press")) == {}


def test_session_counts_skipped_and_unmapped():
    workout = make_workout(("bench press", [(100, 10), (-1, 5)]), ("mystery move", [(50, 10)]))
    load = fatigue.accumulate_session(workout.exercises, default_mapping)
    assert load.skipped_sets == 1
    assert load.unmapped_exercises == ["mystery move"]
    assert load.deltas["Pectoralis"] == pytest.approx(8.5)
    assert load.volumes["Pectoralis"] == pytest.approx(850.0)


def test_adversarial_volume_saturates_without_violation(at):
    violations = []
    state = fatigue.apply_delta(MuscleState.cold("Pectoralis"), 1e9, at, violations=violations)
    assert state.fatigue_percent == 100.0
    assert violations == []


def test_linear_decay(at):
    state = MuscleState(muscle="Quadriceps", fatigue_percent=80.0, last_trained=at)
    assert fatigue.decay(state, at) == pytest.approx(80.0)
    assert fatigue.decay(state, at + timedelta(hours=24)) == pytest.approx(64.0)
    assert fatigue.decay(state, at + timedelta(days=5)) == 0.0
    assert fatigue.decay(state, at + timedelta(days=30)) == 0.0


def test_exponential_decay(at):
    policy = FatiguePolicy(decay_curve=DecayCurve.EXPONENTIAL, recovery_half_life_hours=36)
    state = MuscleState(muscle="Quadriceps", fatigue_percent=80.0, last_trained=at)
    assert fatigue.decay(state, at + timedelta(hours=36), policy) == pytest.approx(40.0)
    assert fatigue.hours_to_reach(80.0, 0.0, policy) is None


def test_decay_is_monotonic(at):
    state = MuscleState(muscle="Glutes", fatigue_percent=95.0, last_trained=at)
    values = [fatigue.decay(state, at + timedelta(hours=h)) for h in range(0, 150, 6)]
    assert values == sorted(values, reverse=True)
    assert all(0.0 <= v <= 100.0 for v in values)


def test_reading_before_last_trained_does_not_grow(at):
    state = MuscleState(muscle="Glutes", fatigue_percent=50.0, last_trained=at)
    assert fatigue.decay(state, at - timedelta(hours=10)) == pytest.approx(50.0)


def test_corrupt_stored_value_is_clamped_and_reported(at):
    violations = []
    state = MuscleState(muscle="Biceps", fatigue_percent=150.0, last_trained=at)
    assert fatigue.decay(state, at, violations=violations) == 100.0
    assert len(violations) == 1
    assert violations[0].muscle == "Biceps"
    assert violations[0].value == 150.0


def test_strict_mode_raises(at):
    state = MuscleState(muscle="Biceps", fatigue_percent=-4.0, last_trained=at)
    with pytest.raises(ComputationInvariantViolation):
        fatigue.decay(state, at, FatiguePolicy(strict_invariants=True))


def test_status_thresholds():
    assert fatigue.status_for(10) == RecoveryStatus.READY
    assert fatigue.status_for(40) == RecoveryStatus.CAUTION
    assert fatigue.status_for(80) == RecoveryStatus.DONT_TRAIN
    assert fatigue.is_ready(39.9)
    assert not fatigue.is_ready(40.0)


def test_recovery_timeline_linear(at):
    state = MuscleState(muscle="Lats", fatigue_percent=80.0, last_trained=at)
    timeline = fatigue.recovery_timeline(state, at + timedelta(hours=24))
    assert timeline.current.fatigue_percent == pytest.approx(64.0)
    assert [p.hours_from_now for p in timeline.projections] == [24, 48, 72]
    assert [p.fatigue_percent for p in timeline.projections] == [48.0, 32.0, 16.0]
    # 80 -> 40 takes 60h on a 5-day line; 24h have already passed.
    assert timeline.hours_until_ready == pytest.approx(36.0)
    assert timeline.hours_until_recovered == pytest.approx(96.0)


def test_late_logged_session_keeps_latest_last_trained(at):
    state = MuscleState(muscle="Lats", fatigue_percent=20.0, last_trained=at)
    updated = fatigue.apply_delta(state, 10.0, at - timedelta(days=1))
    assert updated.last_trained == at
    assert updated.fatigue_percent == pytest.approx(30.0)


def test_apply_session_starts_missing_muscles_cold(at):
    existing = {"Lats": MuscleState(muscle="Lats", fatigue_percent=30.0, last_trained=at - timedelta(days=1))}
    updated, violations = fatigue.apply_session(existing, {"Lats": 10.0, "Biceps": 5.0}, at)
    assert updated["Lats"].fatigue_percent == pytest.approx(34.0)
    assert updated["Biceps"].fatigue_percent == pytest.approx(5.0)
    assert updated["Biceps"].last_trained == at
    assert violations == []
