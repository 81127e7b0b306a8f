"""DailyQuestion ORM — the single authoritative trivia item for a calendar day.

Invariants:
    - question_date is UNIQUE: the database, not the application, enforces one row per day
    - Rows are append-only by date: never updated, never deleted
    - incorrect_answers is an ordered JSON list of sanitized strings

Design Decisions:
    - JSON column for incorrect_answers: small fixed-size list, always read whole
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Text, Date, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from quizr.db.base import Base


class DailyQuestion(Base):
    """One trivia question per UTC day."""
    __tablename__ = "daily_questions"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    question_date: Mapped[date] = mapped_column(
        Date, nullable=False, unique=True, index=True,
    )
    question_text: Mapped[str] = mapped_column(Text, nullable=False)
    correct_answer: Mapped[str] = mapped_column(Text, nullable=False)
    incorrect_answers: Mapped[list] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    attempts: Mapped[list["QuestionAttempt"]] = relationship(
        "QuestionAttempt", back_populates="daily_question", lazy="noload",
    )
