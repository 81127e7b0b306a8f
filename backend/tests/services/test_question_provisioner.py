"""Daily Question Provisioner — get-or-create semantics and race recovery.

Invariants:
    - Existing question returned without calling the content source
    - Concurrent first requests of a day leave exactly one row; all callers agree
    - Fetch failures create nothing

Design Decisions:
    - In-memory repository yields between read and insert, so asyncio.gather
      reproduces the read-miss / insert-conflict interleaving deterministically
"""

import asyncio
from datetime import date

import pytest

from quizr.core.domain_types import InsertOutcome, InsertResult
from quizr.core.errors import ContentSourceError, PersistenceError
from quizr.services.question_provisioner import DailyQuestionProvisioner

from tests.fakes import FakeQuestionSource, InMemoryDailyQuestionRepository

DAY = date(2025, 3, 1)


async def test_creates_question_on_first_request():
    repo = InMemoryDailyQuestionRepository()
    source = FakeQuestionSource()
    provisioner = DailyQuestionProvisioner(repo, source)

    question = await provisioner.get_or_create(DAY)

    assert question.question_date == DAY
    assert question.question_text == "Question number 1?"
    assert source.calls == 1
    assert list(repo.rows) == [DAY]


async def test_existing_question_returned_without_fetch():
    repo = InMemoryDailyQuestionRepository()
    source = FakeQuestionSource()
    provisioner = DailyQuestionProvisioner(repo, source)
    first = await provisioner.get_or_create(DAY)

    second = await provisioner.get_or_create(DAY)

    assert second == first
    assert source.calls == 1


async def test_new_day_gets_new_question():
    repo = InMemoryDailyQuestionRepository()
    provisioner = DailyQuestionProvisioner(repo, FakeQuestionSource())
    q1 = await provisioner.get_or_create(DAY)
    q2 = await provisioner.get_or_create(date(2025, 3, 2))
    assert q1.id != q2.id
    assert len(repo.rows) == 2


async def test_concurrent_first_requests_create_exactly_one_row():
    """Fresh day: many callers race; one insert wins, the rest re-read it."""
    repo = InMemoryDailyQuestionRepository()
    source = FakeQuestionSource()

    results = await asyncio.gather(*[
        DailyQuestionProvisioner(repo, source).get_or_create(DAY)
        for _ in range(5)
    ])

    assert len(repo.rows) == 1
    assert repo.insert_attempts >= 2  # the race actually happened
    assert {r.id for r in results} == {repo.rows[DAY].id}
    assert {r.question_text for r in results} == {repo.rows[DAY].question_text}
    assert {r.correct_answer for r in results} == {repo.rows[DAY].correct_answer}


async def test_two_concurrent_requests_return_matching_text():
    repo = InMemoryDailyQuestionRepository()
    source = FakeQuestionSource()
    provisioner = DailyQuestionProvisioner(repo, source)

    a, b = await asyncio.gather(
        provisioner.get_or_create(DAY), provisioner.get_or_create(DAY),
    )

    assert a.question_text == b.question_text
    assert len(repo.rows) == 1


async def test_fetch_failure_creates_nothing():
    repo = InMemoryDailyQuestionRepository()
    provisioner = DailyQuestionProvisioner(
        repo, FakeQuestionSource(error=ContentSourceError("HTTP 500")),
    )

    with pytest.raises(ContentSourceError):
        await provisioner.get_or_create(DAY)

    assert repo.rows == {}
    assert repo.insert_attempts == 0


class _VanishingRepo(InMemoryDailyQuestionRepository):
    """Reports a conflict but never shows the winner."""

    async def insert(self, question_date, question):
        return InsertResult(InsertOutcome.CONFLICT)


async def test_conflict_without_readable_winner_is_persistence_error():
    provisioner = DailyQuestionProvisioner(_VanishingRepo(), FakeQuestionSource())
    with pytest.raises(PersistenceError):
        await provisioner.get_or_create(DAY)


class _FailingInsertRepo(InMemoryDailyQuestionRepository):
    async def insert(self, question_date, question):
        raise PersistenceError("disk full", "insert daily_question")


async def test_non_conflict_insert_failure_propagates():
    repo = _FailingInsertRepo()
    provisioner = DailyQuestionProvisioner(repo, FakeQuestionSource())
    with pytest.raises(PersistenceError):
        await provisioner.get_or_create(DAY)
    assert repo.rows == {}
