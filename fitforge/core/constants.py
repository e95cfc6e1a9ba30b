"""Application constants."""

from fitforge.core.enums import ExerciseCategory, Muscle

# Muscles each category is expected to cover (template coverage scoring)
CATEGORY_MUSCLES: dict[ExerciseCategory, tuple[Muscle, ...]] = {
    ExerciseCategory.PUSH: (Muscle.PECTORALIS, Muscle.TRICEPS, Muscle.DELTOIDS, Muscle.CORE),
    ExerciseCategory.PULL: (Muscle.LATS, Muscle.BICEPS, Muscle.RHOMBOIDS, Muscle.TRAPEZIUS, Muscle.FOREARMS),
    ExerciseCategory.LEGS: (Muscle.QUADRICEPS, Muscle.GLUTES, Muscle.HAMSTRINGS, Muscle.CALVES, Muscle.CORE),
    ExerciseCategory.CORE: (Muscle.CORE,),
}

# Fatigue bounds
FATIGUE_MIN = 0.0
FATIGUE_MAX = 100.0

# Recovery timeline projection offsets (hours after now)
RECOVERY_PROJECTION_HOURS = (24, 48, 72)

# Template analysis: summed activation (as %) a muscle needs to count as covered
TEMPLATE_COVERAGE_MIN_ENGAGEMENT = 100.0
# Standard deviation of engagement at which balance score hits 0
TEMPLATE_BALANCE_MAX_STDDEV = 100.0
# Summed engagement above which a muscle is flagged as over-targeted
TEMPLATE_OVERLAP_THRESHOLD = 250.0

# Exercise recommendation: factor weights (sum to 100)
RECOMMENDATION_WEIGHTS = {
    "target_match": 40.0,
    "freshness": 25.0,
    "variety": 15.0,
    "preference": 10.0,
    "primary": 10.0,
}
# Minimum activation of the target muscle for an exercise to be considered
RECOMMENDATION_MIN_ENGAGEMENT = 0.05
# Same-category exercises in recent history at which variety scores 0
RECOMMENDATION_VARIETY_WINDOW = 5
# Volume assumed for bottleneck checks: sets × reps × weight (lbs)
RECOMMENDATION_ESTIMATED_SETS = 3
RECOMMENDATION_ESTIMATED_REPS = 10
RECOMMENDATION_ESTIMATED_WEIGHT = 100.0
RECOMMENDATION_LIMIT = 15
