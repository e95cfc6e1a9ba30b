"""Workout template - category/variation with an ordered exercise list."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fitforge.db.base import Base


class WorkoutTemplateRow(Base):
    """Saved workout structure; times_used bumps whenever a workout is logged against it."""

    __tablename__ = "workout_templates"
    __table_args__ = (Index("ix_workout_templates_category_variation", "category", "variation"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    variation: Mapped[str] = mapped_column(String(50), nullable=False)
    exercise_ids: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    times_used: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
