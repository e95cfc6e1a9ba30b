"""Per-muscle fatigue snapshots and baselines."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from fitforge.db.base import Base


class MuscleStateRow(Base):
    """Fatigue as of last_trained; current fatigue is decayed at read time."""

    __tablename__ = "muscle_states"

    muscle: Mapped[str] = mapped_column(String(100), primary_key=True)
    fatigue_percent: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    last_trained: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=True
    )


class MuscleBaselineRow(Base):
    """Learned session maximum plus optional user override (override wins)."""

    __tablename__ = "muscle_baselines"

    muscle: Mapped[str] = mapped_column(String(100), primary_key=True)
    system_learned_max: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    user_override: Mapped[float | None] = mapped_column(Float, nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=True
    )
