"""QuestionAttempt ORM — a device's progress on one day's question.

Invariants:
    - UNIQUE (device_id, question_date): at most one row per device per day
    - is_completed is monotonic: only ever written True
    - has_attempted is True whenever is_completed is True

Design Decisions:
    - question_date denormalized next to daily_question_id: lookups by the natural
      key never need a join
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import (
    String, Boolean, Date, DateTime, ForeignKey, Index, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from quizr.db.base import Base


class QuestionAttempt(Base):
    """Attempt record for (device_id, question_date)."""
    __tablename__ = "user_question_attempts"
    __table_args__ = (
        UniqueConstraint(
            "device_id", "question_date", name="uq_attempt_device_date",
        ),
        Index("idx_user_attempts_question_id", "daily_question_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    device_id: Mapped[str] = mapped_column(String(255), nullable=False)
    question_date: Mapped[date] = mapped_column(Date, nullable=False)
    daily_question_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("daily_questions.id"), nullable=False,
    )
    has_attempted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    is_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    daily_question: Mapped["DailyQuestion"] = relationship(
        "DailyQuestion", back_populates="attempts",
    )
