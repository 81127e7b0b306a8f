"""Initial schema — daily_questions, user_question_attempts, push_tokens.

Revision ID: 001_initial
Revises: None
Create Date: 2025-08-15

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "push_tokens",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("token", sa.Text, nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "daily_questions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("question_date", sa.Date, nullable=False),
        sa.Column("question_text", sa.Text, nullable=False),
        sa.Column("correct_answer", sa.Text, nullable=False),
        sa.Column("incorrect_answers", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_daily_questions_question_date", "daily_questions",
        ["question_date"], unique=True,
    )

    op.create_table(
        "user_question_attempts",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("device_id", sa.String(255), nullable=False),
        sa.Column("question_date", sa.Date, nullable=False),
        sa.Column("daily_question_id", UUID(as_uuid=True), sa.ForeignKey("daily_questions.id"), nullable=False),
        sa.Column("has_attempted", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("is_completed", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("device_id", "question_date", name="uq_attempt_device_date"),
    )
    op.create_index(
        "idx_user_attempts_question_id", "user_question_attempts",
        ["daily_question_id"],
    )


def downgrade() -> None:
    op.drop_index("idx_user_attempts_question_id", table_name="user_question_attempts")
    op.drop_table("user_question_attempts")
    op.drop_index("ix_daily_questions_question_date", table_name="daily_questions")
    op.drop_table("daily_questions")
    op.drop_table("push_tokens")
