import math

import pytest

from fitforge.schemas.muscle import MuscleState
from fitforge.schemas.template import WorkoutTemplate
from fitforge.services import template_analysis
from fitforge.services.exercise_mapping import default_mapping

from tests.conftest import days, make_workout


@pytest.fixture
def legs_history(at):
    return [
        WorkoutTemplate(
            id=1, name="Legs A", category="Legs", variation="A", exercise_ids=["squat"], last_used_at=at - days(5)
        ),
        WorkoutTemplate(
            id=2,
            name="Legs B",
            category="Legs",
            variation="B",
            exercise_ids=["romanian deadlift"],
            last_used_at=at - days(2),
        ),
    ]


def test_ready_variations_rotate_to_longest_rested(legs_history, at):
    analysis = template_analysis.analyze("Legs", legs_history, {}, at)
    assert analysis.recommended_variation == "A"
    assert analysis.reason == "Ready; last used 5 days ago"
    assert all(v.ready for v in analysis.variations)


def test_never_used_variation_wins_among_ready(legs_history, at):
    history = legs_history + [
        WorkoutTemplate(id=3, name="Legs C", category="Legs", variation="C", exercise_ids=["leg press"])
    ]
    assert template_analysis.recommend_next("Legs", history, {}, at) == "C"


def test_highest_readiness_when_nothing_is_ready(legs_history, at):
    states = {
        "Quadriceps": MuscleState(muscle="Quadriceps", fatigue_percent=90, last_trained=at),
        "Glutes": MuscleState(muscle="Glutes", fatigue_percent=50, last_trained=at),
        "Hamstrings": MuscleState(muscle="Hamstrings", fatigue_percent=60, last_trained=at),
    }
    analysis = template_analysis.analyze("Legs", legs_history, states, at)
    assert not any(v.ready for v in analysis.variations)
    by_name = {v.variation: v for v in analysis.variations}
    assert by_name["A"].mean_readiness == pytest.approx(0.3)
    assert by_name["B"].mean_readiness == pytest.approx(0.45)
    assert analysis.recommended_variation == "B"


def test_no_history_means_no_recommendation(at):
    assert template_analysis.recommend_next("Push", [], {}, at) is None


def test_category_match_is_case_insensitive(legs_history, at):
    assert template_analysis.recommend_next("legs", legs_history, {}, at) == "A"


def test_workout_log_counts_as_use(legs_history, at):
    # B was logged yesterday without touching the template, A was logged just now.
    workouts = [
        make_workout(("squat", [(100, 10)]), performed_at=at, category="Legs", variation="A"),
    ]
    assert template_analysis.recommend_next("Legs", legs_history, {}, at, workouts) == "B"


def test_engagement_scores():
    engagements = template_analysis.muscle_engagements(["squat", "leg extension", "front squat"], default_mapping)
    assert engagements["Quadriceps"] == pytest.approx(280.0)
    assert template_analysis.score_coverage({"Quadriceps": 280, "Glutes": 125}, "Legs") == 40
    assert template_analysis.score_balance({"Quadriceps": 50, "Glutes": 50}) == 100
    assert template_analysis.score_balance({}) == 0


def test_compare_variations_reports_b_minus_a(legs_history, at):
    workouts = [
        make_workout(("squat", [(100, 10)]), performed_at=at - days(5), category="Legs", variation="A"),
        make_workout(("romanian deadlift", [(100, 15)]), performed_at=at - days(2), category="Legs", variation="B"),
    ]
    comparison = template_analysis.compare_variations("Legs", "A", "B", legs_history, {}, at, workouts)
    assert comparison.average_volume_delta == 500
    assert comparison.set_count_delta == 0
    assert comparison.recovery_hours_delta == 0
    assert 0 <= comparison.complementarity <= 100
    assert comparison.summary


def test_compare_recovery_hours(legs_history, at):
    states = {"Quadriceps": MuscleState(muscle="Quadriceps", fatigue_percent=80, last_trained=at)}
    comparison = template_analysis.compare_variations("Legs", "A", "B", legs_history, states, at)
    assert comparison.recovery_hours_a == pytest.approx(60.0)
    assert comparison.recovery_hours_b == 0
    assert math.isclose(comparison.recovery_hours_delta, -60.0)


def test_compare_unknown_variation(legs_history, at):
    with pytest.raises(ValueError):
        template_analysis.compare_variations("Legs", "A", "Z", legs_history, {}, at)
