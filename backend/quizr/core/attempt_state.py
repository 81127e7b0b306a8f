"""Attempt State — derive a device's progress and the public user_status from a record.

Invariants:
    - No record -> NOT_STARTED, can_attempt True
    - is_completed -> COMPLETED, can_attempt False (terminal for the day)
    - can_attempt is always the negation of is_completed
"""

from datetime import date, datetime, timezone

from quizr.core.domain_types import AttemptRecord, AttemptState


def attempt_state(record: AttemptRecord | None) -> AttemptState:
    """Map a (possibly missing) attempt record to its state."""
    if record is None:
        return AttemptState.NOT_STARTED
    if record.is_completed:
        return AttemptState.COMPLETED
    return AttemptState.ATTEMPTED


def user_status(record: AttemptRecord | None) -> dict:
    """Public status block returned with every question response."""
    state = attempt_state(record)
    if state is AttemptState.NOT_STARTED:
        return {"has_attempted": False, "is_completed": False, "can_attempt": True}
    completed = state is AttemptState.COMPLETED
    return {
        "has_attempted": record.has_attempted or completed,
        "is_completed": completed,
        "can_attempt": not completed,
    }


def utc_today(now: datetime | None = None) -> date:
    """Calendar day in UTC. Naive datetimes are treated as UTC."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.date()
    return now.astimezone(timezone.utc).date()
