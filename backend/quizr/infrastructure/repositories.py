"""SQL Repositories — SQLAlchemy implementations of the persistence protocols.

Invariants:
    - insert() commits immediately; a unique violation rolls back and returns
      InsertResult(CONFLICT) — it never raises
    - Every other driver failure surfaces as PersistenceError (translate_errors)
    - Rows are converted to frozen records before leaving this module
    - mark_completed only ever writes True to has_attempted / is_completed

Design Decisions:
    - One AsyncSession shared by all repositories of a request: the rollback
      after a conflict cannot expire anything callers hold, since they hold records
    - Commit per write: no transaction spans read-then-insert, the UNIQUE
      constraint is the only concurrency control
"""

import logging
from datetime import date, datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from quizr.core.domain_types import (
    AttemptRecord, DailyQuestionRecord, InsertOutcome, InsertResult,
    ValidatedQuestion,
)
from quizr.infrastructure.database import is_unique_violation, translate_errors
from quizr.models import DailyQuestion, PushToken, QuestionAttempt

logger = logging.getLogger(__name__)


def to_question_record(row: DailyQuestion) -> DailyQuestionRecord:
    return DailyQuestionRecord(
        id=row.id,
        question_date=row.question_date,
        question_text=row.question_text,
        correct_answer=row.correct_answer,
        incorrect_answers=tuple(row.incorrect_answers),
        created_at=row.created_at,
    )


def to_attempt_record(row: QuestionAttempt) -> AttemptRecord:
    return AttemptRecord(
        id=row.id,
        device_id=row.device_id,
        question_date=row.question_date,
        daily_question_id=row.daily_question_id,
        has_attempted=row.has_attempted,
        is_completed=row.is_completed,
        updated_at=row.updated_at,
    )


async def _commit_or_conflict(db: AsyncSession, row, operation: str) -> bool:
    """Add and commit row. False on unique violation (after rollback)."""
    async with translate_errors(operation):
        db.add(row)
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if is_unique_violation(e):
                return False
            raise
    return True


class SqlDailyQuestionRepository:
    """Daily questions keyed by question_date."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_date(self, question_date: date) -> DailyQuestionRecord | None:
        async with translate_errors("select daily_question"):
            result = await self.db.execute(
                select(DailyQuestion).where(
                    DailyQuestion.question_date == question_date,
                ),
            )
            row = result.scalar_one_or_none()
        return to_question_record(row) if row else None

    async def insert(
        self, question_date: date, question: ValidatedQuestion,
    ) -> InsertResult:
        row = DailyQuestion(
            question_date=question_date,
            question_text=question.question,
            correct_answer=question.correct_answer,
            incorrect_answers=list(question.incorrect_answers),
        )
        if not await _commit_or_conflict(self.db, row, "insert daily_question"):
            logger.info(
                "Daily question insert lost the race",
                extra={"question_date": question_date.isoformat(), "outcome": "conflict"},
            )
            return InsertResult(InsertOutcome.CONFLICT)
        return InsertResult(InsertOutcome.CREATED, to_question_record(row))


class SqlAttemptRepository:
    """Attempt records keyed by (device_id, question_date)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_row(
        self, device_id: str, question_date: date,
    ) -> QuestionAttempt | None:
        result = await self.db.execute(
            select(QuestionAttempt)
            .where(QuestionAttempt.device_id == device_id)
            .where(QuestionAttempt.question_date == question_date),
        )
        return result.scalar_one_or_none()

    async def get(self, device_id: str, question_date: date) -> AttemptRecord | None:
        async with translate_errors("select attempt"):
            row = await self._get_row(device_id, question_date)
        return to_attempt_record(row) if row else None

    async def insert(
        self, device_id: str, question_date: date, daily_question_id,
    ) -> InsertResult:
        row = QuestionAttempt(
            device_id=device_id,
            question_date=question_date,
            daily_question_id=daily_question_id,
            has_attempted=False,
            is_completed=False,
        )
        if not await _commit_or_conflict(self.db, row, "insert attempt"):
            return InsertResult(InsertOutcome.CONFLICT)
        return InsertResult(InsertOutcome.CREATED, to_attempt_record(row))

    async def mark_completed(
        self, device_id: str, question_date: date, now: datetime,
    ) -> AttemptRecord | None:
        async with translate_errors("update attempt"):
            row = await self._get_row(device_id, question_date)
            if row is None:
                return None
            row.has_attempted = True
            row.is_completed = True
            row.updated_at = now
            await self.db.commit()
        return to_attempt_record(row)


class SqlPushTokenRepository:
    """Push tokens keyed by token."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, token: str) -> bool:
        """Register token. False if it was already registered."""
        return await _commit_or_conflict(
            self.db, PushToken(token=token), "insert push_token",
        )

    async def list_tokens(self) -> list[str]:
        async with translate_errors("select push_tokens"):
            result = await self.db.execute(
                select(PushToken.token).order_by(PushToken.created_at),
            )
            return list(result.scalars().all())

    async def remove(self, tokens: list[str]) -> int:
        if not tokens:
            return 0
        async with translate_errors("delete push_tokens"):
            result = await self.db.execute(
                delete(PushToken).where(PushToken.token.in_(tokens)),
            )
            await self.db.commit()
        return result.rowcount or 0
