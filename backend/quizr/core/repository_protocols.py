"""Boundary Protocols — contracts between core/services and the persistence shell.

Invariants:
    - Services NEVER import SQLAlchemy — dependency arrows point inward only
    - insert() reports a uniqueness conflict as InsertOutcome.CONFLICT, never as an exception
    - Any other persistence failure raises PersistenceError
    - All reads return frozen records, never ORM instances

Design Decisions:
    - Protocol over ABC: structural subtyping, in-memory fakes in tests need no inheritance
    - Async in Protocol: implementations do IO
"""

from datetime import datetime
from typing import Protocol

from quizr.core.domain_types import (
    AttemptRecord, DailyQuestionRecord, DeviceId, InsertResult, PushMessage,
    PushTicket, QuestionDate, ValidatedQuestion,
)


class DailyQuestionRepository(Protocol):
    """Contract for daily question persistence, keyed by date."""
    async def get_by_date(
        self, question_date: QuestionDate,
    ) -> DailyQuestionRecord | None: ...
    async def insert(
        self, question_date: QuestionDate, question: ValidatedQuestion,
    ) -> InsertResult: ...


class AttemptRepository(Protocol):
    """Contract for attempt persistence, keyed by (device_id, date)."""
    async def get(
        self, device_id: DeviceId, question_date: QuestionDate,
    ) -> AttemptRecord | None: ...
    async def insert(
        self, device_id: DeviceId, question_date: QuestionDate, daily_question_id,
    ) -> InsertResult: ...
    async def mark_completed(
        self, device_id: DeviceId, question_date: QuestionDate, now: datetime,
    ) -> AttemptRecord | None: ...


class PushTokenRepository(Protocol):
    """Contract for push token persistence, keyed by token."""
    async def add(self, token: str) -> bool: ...
    async def list_tokens(self) -> list[str]: ...
    async def remove(self, tokens: list[str]) -> int: ...


class QuestionSource(Protocol):
    """Contract for the external trivia content source."""
    async def fetch_question(self) -> ValidatedQuestion: ...


class PushSender(Protocol):
    """Contract for the push-delivery service."""
    async def send(self, messages: list[PushMessage]) -> list[PushTicket]: ...
