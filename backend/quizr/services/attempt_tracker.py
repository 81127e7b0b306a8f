"""Attempt Tracker — per-device, per-day attempt records.

Invariants:
    - ensure_attempt never creates a second row for (device_id, date); a CONFLICT
      from a duplicate concurrent request is resolved by re-reading
    - ensure_attempt returns an existing record untouched
    - mark_completed is one-way: it only writes True; repeating it is a no-op
    - mark_completed without a prior record raises AttemptNotFoundError
"""

import logging
from datetime import datetime, timezone
from typing import Callable

from quizr.core.domain_types import (
    AttemptRecord, DailyQuestionRecord, DeviceId, QuestionDate,
)
from quizr.core.errors import AttemptNotFoundError, PersistenceError
from quizr.core.repository_protocols import AttemptRepository

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AttemptTracker:
    """Get-or-create and completion for attempt records."""

    def __init__(
        self,
        attempts: AttemptRepository,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.attempts = attempts
        self._clock = clock

    async def ensure_attempt(
        self,
        device_id: DeviceId,
        today: QuestionDate,
        question: DailyQuestionRecord,
    ) -> AttemptRecord:
        existing = await self.attempts.get(device_id, today)
        if existing is not None:
            return existing

        result = await self.attempts.insert(device_id, today, question.id)
        if result.created:
            return result.record

        winner = await self.attempts.get(device_id, today)
        if winner is None:
            raise PersistenceError(
                "Conflicting attempt not readable", "reread attempt",
            )
        return winner

    async def mark_completed(
        self, device_id: DeviceId, today: QuestionDate,
    ) -> AttemptRecord:
        record = await self.attempts.mark_completed(device_id, today, self._clock())
        if record is None:
            raise AttemptNotFoundError(device_id, today.isoformat())
        logger.info(
            "Attempt completed",
            extra={
                "device_id": device_id,
                "question_date": today.isoformat(),
                "outcome": "completed",
            },
        )
        return record
