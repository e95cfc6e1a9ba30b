"""Progressive overload suggestion schemas."""

from datetime import datetime

from fitforge.core.enums import ProgressionMethod
from fitforge.schemas.base import EngineModel


class Performance(EngineModel):
    """Top working set of a past session for one exercise."""

    weight: float
    reps: int
    performed_at: datetime


class ProgressionOption(EngineModel):
    weight: float
    reps: int
    method: ProgressionMethod


class ProgressionSuggestion(EngineModel):
    last_performance: Performance
    last_method: ProgressionMethod
    weight_option: ProgressionOption
    reps_option: ProgressionOption
    suggested: ProgressionMethod
    days_ago: int
