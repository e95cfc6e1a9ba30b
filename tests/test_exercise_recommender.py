import pytest

from fitforge.core.enums import BottleneckSeverity
from fitforge.schemas.muscle import MuscleState
from fitforge.services import exercise_recommender
from fitforge.services.exercise_mapping import default_mapping

QUAD_EXERCISES = {"squat", "front squat", "leg press", "bulgarian split squat", "lunge", "leg extension"}


def recommend(at, policy, states=None, **options):
    return exercise_recommender.recommend_exercises(
        "Quadriceps", states or {}, {}, at, default_mapping, policy, **options
    )


def test_fresh_muscles_rank_by_target_match(at, policy):
    result = recommend(at, policy)
    assert result.total_filtered == len(QUAD_EXERCISES)
    assert {r.exercise_id for r in result.safe} == QUAD_EXERCISES
    assert result.unsafe == []

    top = result.safe[0]
    # front squat and leg extension tie at 88; ties go alphabetically.
    assert top.exercise_id == "front squat"
    assert top.score == pytest.approx(88.0)
    assert top.factors.target_match == pytest.approx(38.0)
    assert top.factors.freshness == 25.0
    assert top.factors.variety == 15.0
    assert top.factors.primary == 10.0


def test_favorites_and_avoid_list(at, policy):
    result = recommend(at, policy, favorites=["Leg Extension"], avoid=["front-squat"])
    assert result.total_filtered == len(QUAD_EXERCISES) - 1
    assert "front squat" not in {r.exercise_id for r in result.safe}
    assert result.safe[0].exercise_id == "leg extension"
    assert result.safe[0].factors.preference == 10.0


def test_variety_penalizes_recent_same_category(at, policy):
    result = recommend(at, policy, recent_exercises=["squat", "leg press", "bench press"])
    assert all(r.factors.variety == pytest.approx(9.0) for r in result.safe)


def test_secondary_target_scores_half_primary(at, policy):
    result = exercise_recommender.recommend_exercises("Core", {}, {}, at, default_mapping, policy)
    by_id = {r.exercise_id: r for r in result.safe}
    assert by_id["plank"].factors.primary == 10.0
    assert by_id["squat"].factors.primary == 5.0


def test_overloaded_target_makes_every_option_unsafe(at, policy):
    states = {"Quadriceps": MuscleState(muscle="Quadriceps", fatigue_percent=90.0, last_trained=at)}
    result = recommend(at, policy, states)
    assert result.safe == []
    assert {r.exercise_id for r in result.unsafe} == QUAD_EXERCISES
    assert all(r.score == 0 for r in result.unsafe)
    squat = next(r for r in result.unsafe if r.exercise_id == "squat")
    assert squat.warnings[0].muscle == "Quadriceps"
    assert squat.warnings[0].severity == BottleneckSeverity.CRITICAL
    assert squat.warnings[0].projected_fatigue == pytest.approx(117.0)
    assert "would reach 117.0%" in squat.warnings[0].message


def test_tired_supporting_muscle_warns_but_stays_safe(at, policy):
    states = {"Core": MuscleState(muscle="Core", fatigue_percent=85.0, last_trained=at)}
    result = recommend(at, policy, states)
    squat = next(r for r in result.safe if r.exercise_id == "squat")
    assert squat.is_safe
    assert [(w.muscle, w.severity) for w in squat.warnings] == [("Core", BottleneckSeverity.WARNING)]
    leg_extension = next(r for r in result.safe if r.exercise_id == "leg extension")
    assert leg_extension.warnings == []


def test_target_is_required(at, policy):
    with pytest.raises(ValueError):
        exercise_recommender.recommend_exercises("", {}, {}, at, default_mapping, policy)


def test_limit_caps_safe_list(at, policy):
    result = recommend(at, policy, limit=2)
    assert len(result.safe) == 2
    assert result.total_filtered == len(QUAD_EXERCISES)
