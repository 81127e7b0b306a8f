"""Quizr API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map QuizrError → uniform JSON envelope
    - CORS configured from settings (not hardcoded)
    - One RateLimiter per process, owned by app.state
    - Database and outbound HTTP clients opened on startup, closed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - RateLimiter built at import (not in lifespan) so it exists for every request,
      including test clients that skip lifespan
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quizr.api.error_handlers import register_error_handlers
from quizr.api.routes import daily_question, health, notifications, trivia
from quizr.config import Settings, get_settings
from quizr.core.rate_limiter import RateLimiter
from quizr.infrastructure.database import init_db
from quizr.infrastructure.observability import setup_logging
from quizr.infrastructure.push_client import ExpoPushClient
from quizr.infrastructure.trivia_client import TriviaClient

logger = logging.getLogger(__name__)


def build_rate_limiter(settings: Settings) -> RateLimiter:
    return RateLimiter(
        window_seconds=settings.rate_limit_window_seconds,
        max_requests=settings.rate_limit_max_requests,
        max_store_size=settings.rate_limit_max_store_size,
        cleanup_interval_seconds=settings.rate_limit_cleanup_interval_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        timeout_seconds=settings.database_timeout_seconds,
    )
    app.state.trivia_client = TriviaClient(
        settings.trivia_api_url, settings.trivia_timeout_seconds,
    )
    app.state.push_client = ExpoPushClient(
        settings.push_api_url, settings.push_timeout_seconds,
    )
    logger.info("Quizr API started")
    yield
    logger.info("Quizr API shutting down")
    await app.state.trivia_client.aclose()
    await app.state.push_client.aclose()
    await manager.dispose()


app = FastAPI(
    title="Quizr API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.state.rate_limiter = build_rate_limiter(settings)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=[
        "authorization", "x-client-info", "apikey", "content-type",
        "x-device-id", "x-broadcast-secret",
    ],
)

app.include_router(health.router)
app.include_router(daily_question.router)
app.include_router(trivia.router)
app.include_router(notifications.router)

register_error_handlers(app)
