"""Shared enums for the engine, schemas and models."""

from enum import Enum


class Muscle(str, Enum):
    """Visualization-level muscle groups tracked for fatigue."""

    PECTORALIS = "Pectoralis"
    TRICEPS = "Triceps"
    DELTOIDS = "Deltoids"
    LATS = "Lats"
    BICEPS = "Biceps"
    RHOMBOIDS = "Rhomboids"
    TRAPEZIUS = "Trapezius"
    FOREARMS = "Forearms"
    QUADRICEPS = "Quadriceps"
    GLUTES = "Glutes"
    HAMSTRINGS = "Hamstrings"
    CALVES = "Calves"
    CORE = "Core"


class ExerciseCategory(str, Enum):
    """Workout category a template or exercise belongs to."""

    PUSH = "Push"
    PULL = "Pull"
    LEGS = "Legs"
    CORE = "Core"


class DecayCurve(str, Enum):
    """Shape of the recovery curve used when decaying fatigue."""

    LINEAR = "linear"  # reaches 0 after recovery_days_to_full
    EXPONENTIAL = "exponential"  # halves every recovery_half_life_hours


class RecoveryStatus(str, Enum):
    """Training recommendation derived from current fatigue."""

    READY = "ready"  # below readiness threshold
    CAUTION = "caution"  # between readiness and caution thresholds
    DONT_TRAIN = "dont_train"  # at or above caution threshold


class ProgressionMethod(str, Enum):
    """How load was progressed between two sessions."""

    WEIGHT = "weight"
    REPS = "reps"
    NONE = "none"


class BottleneckSeverity(str, Enum):
    """How close a planned workout pushes a muscle to its limit."""

    WARNING = "warning"  # at or above the caution threshold
    CRITICAL = "critical"  # would reach 100%
