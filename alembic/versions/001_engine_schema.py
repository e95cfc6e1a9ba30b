"""Engine schema: muscle states, baselines, personal bests, templates, workouts.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "muscle_states",
        sa.Column("muscle", sa.String(length=100), nullable=False),
        sa.Column("fatigue_percent", sa.Float(), nullable=False),
        sa.Column("last_trained", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("muscle"),
    )

    op.create_table(
        "muscle_baselines",
        sa.Column("muscle", sa.String(length=100), nullable=False),
        sa.Column("system_learned_max", sa.Float(), nullable=False),
        sa.Column("user_override", sa.Float(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("muscle"),
    )

    op.create_table(
        "personal_bests",
        sa.Column("exercise_id", sa.String(length=255), nullable=False),
        sa.Column("best_session_volume", sa.Float(), nullable=False),
        sa.Column("best_single_set", sa.Float(), nullable=False),
        sa.Column("achieved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("exercise_id"),
    )

    op.create_table(
        "workout_templates",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("variation", sa.String(length=50), nullable=False),
        sa.Column("exercise_ids", sa.JSON(), nullable=False),
        sa.Column("times_used", sa.Integer(), nullable=False),
        sa.Column("is_favorite", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_workout_templates_name"), "workout_templates", ["name"], unique=False)
    op.create_index(
        "ix_workout_templates_category_variation", "workout_templates", ["category", "variation"], unique=False
    )

    op.create_table(
        "workouts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("performed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("category", sa.String(length=50), nullable=True),
        sa.Column("variation", sa.String(length=50), nullable=True),
        sa.Column("template_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["template_id"], ["workout_templates.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_workouts_category"), "workouts", ["category"], unique=False)
    op.create_index("ix_workouts_performed_at", "workouts", ["performed_at"], unique=False)

    op.create_table(
        "workout_sets",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("workout_id", sa.Integer(), nullable=False),
        sa.Column("exercise_id", sa.String(length=255), nullable=False),
        sa.Column("position", sa.Integer(), nullable=True),
        sa.Column("set_number", sa.Integer(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("reps", sa.Integer(), nullable=True),
        sa.Column("completed", sa.Boolean(), nullable=False),
        sa.Column("to_failure", sa.Boolean(), nullable=False),
        sa.Column("performed_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["workout_id"], ["workouts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_workout_sets_workout_id", "workout_sets", ["workout_id"], unique=False)
    op.create_index("ix_workout_sets_exercise_id", "workout_sets", ["exercise_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_workout_sets_exercise_id", table_name="workout_sets")
    op.drop_index("ix_workout_sets_workout_id", table_name="workout_sets")
    op.drop_table("workout_sets")
    op.drop_index("ix_workouts_performed_at", table_name="workouts")
    op.drop_index(op.f("ix_workouts_category"), table_name="workouts")
    op.drop_table("workouts")
    op.drop_index("ix_workout_templates_category_variation", table_name="workout_templates")
    op.drop_index(op.f("ix_workout_templates_name"), table_name="workout_templates")
    op.drop_table("workout_templates")
    op.drop_table("personal_bests")
    op.drop_table("muscle_baselines")
    op.drop_table("muscle_states")
