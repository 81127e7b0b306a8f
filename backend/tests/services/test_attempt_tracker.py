"""Attempt Tracker — idempotent creation and one-way completion.

Invariants:
    - ensure_attempt never duplicates (device_id, date), even under concurrency
    - mark_completed is monotonic and idempotent
    - mark_completed without a record raises AttemptNotFoundError
"""

import asyncio
import uuid
from datetime import date, datetime, timezone

import pytest

from quizr.core.domain_types import DailyQuestionRecord
from quizr.core.errors import AttemptNotFoundError
from quizr.services.attempt_tracker import AttemptTracker

from tests.fakes import InMemoryAttemptRepository

DAY = date(2025, 3, 1)
NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def question():
    return DailyQuestionRecord(
        id=uuid.uuid4(),
        question_date=DAY,
        question_text="Which planet is red?",
        correct_answer="Mars",
        incorrect_answers=("Venus", "Jupiter", "Saturn"),
    )


@pytest.fixture
def repo():
    return InMemoryAttemptRepository()


@pytest.fixture
def tracker(repo):
    return AttemptTracker(repo, clock=lambda: NOW)


async def test_first_request_creates_default_record(tracker, repo, question):
    record = await tracker.ensure_attempt("device_abc", DAY, question)
    assert record.has_attempted is False
    assert record.is_completed is False
    assert record.daily_question_id == question.id
    assert len(repo.rows) == 1


async def test_repeat_device_returns_same_record(tracker, repo, question):
    first = await tracker.ensure_attempt("device_abc", DAY, question)
    second = await tracker.ensure_attempt("device_abc", DAY, question)
    assert second == first
    assert len(repo.rows) == 1


async def test_duplicate_concurrent_requests_do_not_duplicate(tracker, repo, question):
    records = await asyncio.gather(*[
        tracker.ensure_attempt("device_abc", DAY, question) for _ in range(4)
    ])
    assert len(repo.rows) == 1
    assert len({r.id for r in records}) == 1


async def test_devices_are_isolated(tracker, repo, question):
    await tracker.ensure_attempt("device_a", DAY, question)
    await tracker.ensure_attempt("device_b", DAY, question)
    assert len(repo.rows) == 2


async def test_mark_completed_sets_both_flags(tracker, question):
    await tracker.ensure_attempt("device_abc", DAY, question)
    record = await tracker.mark_completed("device_abc", DAY)
    assert record.has_attempted is True
    assert record.is_completed is True
    assert record.updated_at == NOW


async def test_mark_completed_twice_stays_completed(tracker, question):
    await tracker.ensure_attempt("device_abc", DAY, question)
    await tracker.mark_completed("device_abc", DAY)
    again = await tracker.mark_completed("device_abc", DAY)
    assert again.is_completed is True


async def test_ensure_after_completion_keeps_completed(tracker, question):
    await tracker.ensure_attempt("device_abc", DAY, question)
    await tracker.mark_completed("device_abc", DAY)
    record = await tracker.ensure_attempt("device_abc", DAY, question)
    assert record.is_completed is True
    assert record.has_attempted is True


async def test_mark_completed_without_record_raises(tracker):
    with pytest.raises(AttemptNotFoundError) as exc:
        await tracker.mark_completed("device_abc", DAY)
    assert exc.value.context.question_date == "2025-03-01"


async def test_new_day_resets_state(tracker, question):
    await tracker.ensure_attempt("device_abc", DAY, question)
    await tracker.mark_completed("device_abc", DAY)
    with pytest.raises(AttemptNotFoundError):
        await tracker.mark_completed("device_abc", date(2025, 3, 2))
