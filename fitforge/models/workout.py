"""Workout and WorkoutSet models."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fitforge.db.base import Base


class Workout(Base):
    """A logged workout session, optionally tied to a template."""

    __tablename__ = "workouts"
    __table_args__ = (Index("ix_workouts_performed_at", "performed_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    performed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    category: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    variation: Mapped[str | None] = mapped_column(String(50), nullable=True)
    template_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("workout_templates.id", ondelete="SET NULL"), nullable=True
    )

    sets: Mapped[list["WorkoutSet"]] = relationship(
        "WorkoutSet",
        back_populates="workout",
        cascade="all, delete-orphan",
        order_by="WorkoutSet.position",
    )


class WorkoutSet(Base):
    """One set: weight/reps, completion and to-failure flags. Never updated in place."""

    __tablename__ = "workout_sets"
    __table_args__ = (
        Index("ix_workout_sets_workout_id", "workout_id"),
        Index("ix_workout_sets_exercise_id", "exercise_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    workout_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("workouts.id", ondelete="CASCADE"), nullable=False
    )
    exercise_id: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0)  # order within the workout
    set_number: Mapped[int] = mapped_column(Integer, default=0)  # order within the exercise
    weight: Mapped[float] = mapped_column(Float, default=0.0)
    reps: Mapped[int] = mapped_column(Integer, default=0)
    completed: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    to_failure: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    performed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    workout: Mapped["Workout"] = relationship("Workout", back_populates="sets")
