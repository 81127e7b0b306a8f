"""Question Schemas — public response contracts for the question endpoints.

Invariants:
    - can_attempt == not is_completed
    - DailyQuestionResponse.id is the daily question UUID as a string
"""

from pydantic import BaseModel


class UserStatus(BaseModel):
    """A device's progress on today's question."""
    has_attempted: bool
    is_completed: bool
    can_attempt: bool


class DailyQuestionResponse(BaseModel):
    """Today's question plus the caller's status."""
    id: str
    question: str
    correct_answer: str
    incorrect_answers: list[str]
    user_status: UserStatus


class CompletionResponse(BaseModel):
    """Result of marking today's question completed."""
    success: bool
    message: str
    user_status: UserStatus


class TriviaQuestionResponse(BaseModel):
    """A freshly fetched, sanitized question (not persisted)."""
    question: str
    correct_answer: str
    incorrect_answers: list[str]
    category: str | None = None
    type: str | None = None
    difficulty: str | None = None
