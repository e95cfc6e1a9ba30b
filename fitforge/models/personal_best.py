"""Personal best per exercise."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from fitforge.db.base import Base


class PersonalBestRow(Base):
    """Best session volume and best single set (weight × reps) for one exercise."""

    __tablename__ = "personal_bests"

    exercise_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    best_session_volume: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    best_single_set: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    achieved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=True
    )
