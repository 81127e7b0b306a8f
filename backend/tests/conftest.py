"""Root conftest — async DB, fakes wired into the FastAPI app, test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db overridden to use the test DB; db_manager patched for the readiness probe
    - Content source, push sender, rate limiter and "today" are overridden with
      deterministic fakes — no test touches the network or the wall clock

Design Decisions:
    - SQLite in-memory: fast, no external dependency; UNIQUE constraints behave
      the same as PostgreSQL for the conflict paths exercised here
"""

import os
from datetime import date

# Ensure tests never point at a real database
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from quizr.api.dependencies import (
    get_push_sender, get_question_source, get_rate_limiter, get_today,
)
from quizr.core.rate_limiter import RateLimiter
from quizr.db.base import Base
from quizr.infrastructure.database import get_db, DatabaseSessionManager
import quizr.infrastructure.database as db_module
import quizr.models  # noqa: F401
from quizr.main import app

from tests.fakes import FakeClock, FakePushSender, FakeQuestionSource

TODAY = date(2025, 3, 1)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock(start=1_000_000.0)


@pytest.fixture
def rate_limiter(clock):
    return RateLimiter(window_seconds=60, max_requests=10, clock=clock)


@pytest.fixture
def question_source():
    return FakeQuestionSource()


@pytest.fixture
def push_sender():
    return FakePushSender()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
async def client(
    test_engine, test_session_factory, rate_limiter, question_source,
    push_sender, today,
):
    """FastAPI test client with DB and collaborators overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rate_limiter] = lambda: rate_limiter
    app.dependency_overrides[get_question_source] = lambda: question_source
    app.dependency_overrides[get_push_sender] = lambda: push_sender
    app.dependency_overrides[get_today] = lambda: today

    # Patch db_manager for the readiness probe, which uses it directly
    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
