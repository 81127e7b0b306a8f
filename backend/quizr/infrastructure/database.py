"""Database Session Manager — async connection pool with automatic rollback and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Connection pool uses pool_pre_ping for stale connection detection
    - Every statement is bounded by timeout_seconds (driver-level)
    - translate_errors() maps SQLAlchemy/timeout failures to PersistenceError;
      timeouts and connection failures are marked retryable

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
    - expire_on_commit=False: prevents lazy-load issues in async context
    - Unique violations detected by SQLSTATE 23505 (PostgreSQL) or SQLite's
      "UNIQUE constraint failed" — the only place driver messages are inspected
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy import text

from quizr.core.errors import PersistenceError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(error: IntegrityError) -> bool:
    """True if the integrity error is a uniqueness conflict (not FK / NOT NULL)."""
    orig = error.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE
    return "UNIQUE constraint failed" in str(orig)


def _connect_args(database_url: str, timeout_seconds: float) -> dict:
    if database_url.startswith("postgresql+asyncpg"):
        return {"timeout": timeout_seconds, "command_timeout": timeout_seconds}
    if database_url.startswith("sqlite"):
        return {"timeout": timeout_seconds}
    return {}


@asynccontextmanager
async def translate_errors(operation: str) -> AsyncGenerator[None, None]:
    """Map driver-level failures inside the block to PersistenceError."""
    try:
        yield
    except (TimeoutError, asyncio.TimeoutError) as e:
        logger.error(f"DB timeout during {operation}: {e}")
        raise PersistenceError("Request timed out", operation, retryable=True)
    except IntegrityError as e:
        logger.error(f"DB integrity error during {operation}: {e}")
        raise PersistenceError("Integrity constraint violated", operation)
    except OperationalError as e:
        logger.error(f"DB operational error during {operation}: {e}")
        raise PersistenceError(
            "Connection or operational error", operation, retryable=True,
        )
    except DBAPIError as e:
        logger.error(f"DB driver error during {operation}: {e}")
        raise PersistenceError("Database driver error", operation)
    except SQLAlchemyError as e:
        logger.error(f"SQLAlchemy error during {operation}: {e}")
        raise PersistenceError("Database operation failed", operation)


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 10,
        timeout_seconds: float = 5.0,
    ):
        self.engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=timeout_seconds,
            pool_pre_ping=True,
            pool_recycle=3600,
            connect_args=_connect_args(database_url, timeout_seconds),
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except BaseException:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
