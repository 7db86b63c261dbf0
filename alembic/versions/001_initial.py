"""Initial tables: drill_queue, training_events, skill_ratings.

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
        "training_events",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("drill_queue_id", sa.String(36), nullable=True),
        sa.Column("scenario_json", sa.Text(), nullable=False),
        sa.Column("drill_type", sa.String(32), nullable=False),
        sa.Column("user_answer", sa.String(16), nullable=False),
        sa.Column("correct_answer", sa.String(16), nullable=False),
        sa.Column("raise_size_bb", sa.Float(), nullable=True),
        sa.Column("is_correct", sa.Boolean(), nullable=False),
        sa.Column("leak_tag", sa.String(64), nullable=False),
        sa.Column("mistake_tag", sa.String(64), nullable=True),
        sa.Column("mistake_reason", sa.String(16), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_training_events_user_id"), "training_events", ["user_id"], unique=False)
    op.create_index(op.f("ix_training_events_drill_queue_id"), "training_events", ["drill_queue_id"], unique=False)
    op.create_index(
        "ix_training_events_user_leak_created",
        "training_events",
        ["user_id", "leak_tag", "created_at"],
        unique=False,
    )

    op.create_table(
        "drill_queue",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("leak_tag", sa.String(64), nullable=False),
        sa.Column("drill_type", sa.String(32), nullable=False, server_default="action_decision"),
        sa.Column("status", sa.String(16), nullable=False, server_default="due"),
        sa.Column("due_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("repetition", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_score", sa.Integer(), nullable=True),
        sa.Column("last_drill_id", sa.String(36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["last_drill_id"], ["training_events.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "leak_tag", name="uq_drill_queue_user_leak_tag"),
    )
    op.create_index(op.f("ix_drill_queue_user_id"), "drill_queue", ["user_id"], unique=False)
    op.create_index("ix_drill_queue_user_due_at", "drill_queue", ["user_id", "due_at"], unique=False)

    op.create_table(
        "skill_ratings",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("leak_tag", sa.String(64), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False, server_default=sa.text("50")),
        sa.Column("streak_correct", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("attempts_7d", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("correct_7d", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("attempts_30d", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("correct_30d", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_attempts", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("total_correct", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_practice_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_mistake_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "leak_tag", name="uq_skill_ratings_user_leak_tag"),
    )
    op.create_index(op.f("ix_skill_ratings_user_id"), "skill_ratings", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_skill_ratings_user_id"), table_name="skill_ratings")
    op.drop_table("skill_ratings")
    op.drop_index("ix_drill_queue_user_due_at", table_name="drill_queue")
    op.drop_index(op.f("ix_drill_queue_user_id"), table_name="drill_queue")
    op.drop_table("drill_queue")
    op.drop_index("ix_training_events_user_leak_created", table_name="training_events")
    op.drop_index(op.f("ix_training_events_drill_queue_id"), table_name="training_events")
    op.drop_index(op.f("ix_training_events_user_id"), table_name="training_events")
    op.drop_table("training_events")
