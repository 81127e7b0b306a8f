"""Daily Question Provisioner — idempotent get-or-create of the question for a date.

Invariants:
    - Existing row for the date -> returned unchanged, content source NOT called
    - Miss -> exactly one fetch, then one optimistic insert
    - CONFLICT on insert -> re-read and return the winner (at-most-one-creation)
    - Fetch failure or non-conflict persistence failure -> nothing created, error propagates

Design Decisions:
    - No lock: correctness rests on the UNIQUE(question_date) constraint and the
      typed conflict outcome
"""

import logging

from quizr.core.domain_types import DailyQuestionRecord, QuestionDate
from quizr.core.errors import PersistenceError
from quizr.core.repository_protocols import DailyQuestionRepository, QuestionSource

logger = logging.getLogger(__name__)


class DailyQuestionProvisioner:
    """Owns the one-question-per-day guarantee."""

    def __init__(self, questions: DailyQuestionRepository, source: QuestionSource):
        self.questions = questions
        self.source = source

    async def get_or_create(self, today: QuestionDate) -> DailyQuestionRecord:
        existing = await self.questions.get_by_date(today)
        if existing is not None:
            return existing

        content = await self.source.fetch_question()
        result = await self.questions.insert(today, content)
        if result.created:
            logger.info(
                "Created daily question",
                extra={"question_date": today.isoformat(), "outcome": "created"},
            )
            return result.record

        winner = await self.questions.get_by_date(today)
        if winner is None:
            raise PersistenceError(
                "Conflicting daily question not readable", "reread daily_question",
            )
        return winner
