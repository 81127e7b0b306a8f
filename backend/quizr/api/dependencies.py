"""Request Dependencies — per-request identity, clock, and service wiring.

Invariants:
    - today is computed ONCE per request from a UTC clock (get_today) and passed down
    - Device id: X-Device-Id header, else first X-Forwarded-For hop, else the
      peer address, else "anonymous" — the same policy on every endpoint
    - Rate-limit client id: first X-Forwarded-For hop, else CF-Connecting-IP,
      else the peer address, else "unknown"
    - enforce_rate_limit is async and never awaits, so the limiter runs on the
      event loop thread one request at a time, before the handler; a rejected
      request never reaches the database or the content source
    - Broadcast fails closed: no configured secret -> every trigger is rejected

Design Decisions:
    - RateLimiter, TriviaClient and ExpoPushClient live on app.state (built by
      main.py) and are reached through overridable dependencies
"""

import logging
import secrets

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from quizr.config import get_settings
from quizr.core.attempt_state import utc_today
from quizr.core.domain_types import ClientId, DeviceId, QuestionDate
from quizr.core.errors import RateLimitExceededError, UnauthorizedError
from quizr.core.rate_limiter import RateLimiter
from quizr.core.repository_protocols import PushSender, QuestionSource
from quizr.infrastructure.database import get_db
from quizr.infrastructure.repositories import (
    SqlAttemptRepository, SqlDailyQuestionRepository, SqlPushTokenRepository,
)
from quizr.services.attempt_tracker import AttemptTracker
from quizr.services.notification_broadcast import NotificationBroadcaster
from quizr.services.question_provisioner import DailyQuestionProvisioner

logger = logging.getLogger(__name__)

ANONYMOUS_DEVICE_ID = "anonymous"
UNKNOWN_CLIENT_ID = "unknown"
MAX_DEVICE_ID_LENGTH = 255


def _first_forwarded_hop(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if not forwarded:
        return None
    hop = forwarded.split(",")[0].strip()
    return hop or None


def get_today() -> QuestionDate:
    return QuestionDate(utc_today())


def get_device_id(request: Request) -> DeviceId:
    device_id = (request.headers.get("x-device-id") or "").strip()
    if device_id:
        return DeviceId(device_id[:MAX_DEVICE_ID_LENGTH])
    peer = request.client.host if request.client else None
    return DeviceId(_first_forwarded_hop(request) or peer or ANONYMOUS_DEVICE_ID)


def get_client_id(request: Request) -> ClientId:
    peer = request.client.host if request.client else None
    return ClientId(
        _first_forwarded_hop(request)
        or request.headers.get("cf-connecting-ip")
        or peer
        or UNKNOWN_CLIENT_ID
    )


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_question_source(request: Request) -> QuestionSource:
    return request.app.state.trivia_client


def get_push_sender(request: Request) -> PushSender:
    return request.app.state.push_client


async def enforce_rate_limit(
    client_id: ClientId = Depends(get_client_id),
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> None:
    if limiter.is_rate_limited(client_id):
        logger.warning(
            "Rate limit exceeded",
            extra={"client_id": client_id, "outcome": "rate_limited"},
        )
        raise RateLimitExceededError(
            retry_after_seconds=limiter.retry_after(client_id),
            limit=limiter.max_requests,
            window_seconds=int(limiter.window_seconds),
        )


def require_broadcast_secret(
    x_broadcast_secret: str | None = Header(default=None),
) -> None:
    secret = get_settings().broadcast_secret
    if not secret:
        logger.warning(
            "Broadcast rejected: BROADCAST_SECRET is not configured",
            extra={"outcome": "unauthorized"},
        )
        raise UnauthorizedError()
    if not x_broadcast_secret or not secrets.compare_digest(
        x_broadcast_secret, secret,
    ):
        raise UnauthorizedError()


def get_provisioner(
    db: AsyncSession = Depends(get_db),
    source: QuestionSource = Depends(get_question_source),
) -> DailyQuestionProvisioner:
    return DailyQuestionProvisioner(SqlDailyQuestionRepository(db), source)


def get_attempt_tracker(db: AsyncSession = Depends(get_db)) -> AttemptTracker:
    return AttemptTracker(SqlAttemptRepository(db))


def get_push_token_repository(
    db: AsyncSession = Depends(get_db),
) -> SqlPushTokenRepository:
    return SqlPushTokenRepository(db)


def get_broadcaster(
    provisioner: DailyQuestionProvisioner = Depends(get_provisioner),
    tokens: SqlPushTokenRepository = Depends(get_push_token_repository),
    sender: PushSender = Depends(get_push_sender),
) -> NotificationBroadcaster:
    return NotificationBroadcaster(
        provisioner, tokens, sender, get_settings().notification_title,
    )
