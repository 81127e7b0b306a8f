"""Domain Types — identity types, enums and immutable records shared across layers.

Invariants:
    - DeviceId wraps the opaque client-generated identifier — never a bare str in services
    - QuestionDate is always a UTC calendar day
    - Records are frozen: repositories convert ORM rows at the boundary, so no
      caller ever holds a session-bound object
    - InsertOutcome is the only way a uniqueness conflict is reported

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

DeviceId = NewType("DeviceId", str)
ClientId = NewType("ClientId", str)
QuestionDate = NewType("QuestionDate", date)


# ─── Enums ───────────────────────────────────────────────────────

class InsertOutcome(str, Enum):
    """Result tag of an optimistic insert."""
    CREATED = "created"
    CONFLICT = "conflict"


class AttemptState(str, Enum):
    """Per-device, per-day progress. NOT_STARTED means no row exists."""
    NOT_STARTED = "not_started"
    ATTEMPTED = "attempted"
    COMPLETED = "completed"


# ─── Records ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class ValidatedQuestion:
    """Sanitized trivia item, ready to persist or return."""
    question: str
    correct_answer: str
    incorrect_answers: tuple[str, ...]
    category: str | None = None
    type: str | None = None
    difficulty: str | None = None


@dataclass(frozen=True)
class DailyQuestionRecord:
    """The authoritative question for one calendar day."""
    id: UUID
    question_date: date
    question_text: str
    correct_answer: str
    incorrect_answers: tuple[str, ...]
    created_at: datetime | None = None


@dataclass(frozen=True)
class AttemptRecord:
    """A device's progress on one day's question."""
    id: UUID
    device_id: str
    question_date: date
    daily_question_id: UUID
    has_attempted: bool = False
    is_completed: bool = False
    updated_at: datetime | None = None


@dataclass(frozen=True)
class InsertResult:
    """Tagged outcome of insert-with-conflict-detection.

    record is set only when outcome is CREATED.
    """
    outcome: InsertOutcome
    record: DailyQuestionRecord | AttemptRecord | None = None

    @property
    def created(self) -> bool:
        return self.outcome is InsertOutcome.CREATED


@dataclass(frozen=True)
class PushMessage:
    """One notification addressed to one push token."""
    to: str
    title: str
    body: str
    sound: str = "default"


@dataclass(frozen=True)
class PushTicket:
    """Per-message delivery result reported by the push service."""
    token: str
    ok: bool
    error: str | None = None
    message: str | None = None


@dataclass
class BroadcastSummary:
    """Outcome of one broadcast run."""
    question_date: date | None = None
    sent: int = 0
    failed: int = 0
    pruned: int = 0
    errors: list[str] = field(default_factory=list)
