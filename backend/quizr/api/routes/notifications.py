"""Notification Routes — push token registration and the daily broadcast trigger.

Invariants:
    - Registering a known token returns 200 with created=False (idempotent)
    - Broadcast requires X-Broadcast-Secret matching broadcast_secret; with no
      secret configured every broadcast is rejected with 401
    - Broadcast always targets today's provisioned question

Design Decisions:
    - Broadcast triggered over HTTP: the scheduler (cron) lives outside this service
"""


from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from quizr.api.dependencies import (
    get_broadcaster, get_push_token_repository, get_today,
    require_broadcast_secret,
)
from quizr.core.domain_types import QuestionDate
from quizr.infrastructure.repositories import SqlPushTokenRepository
from quizr.schemas.notification import (
    BroadcastResponse, PushTokenCreate, PushTokenResponse,
)
from quizr.services.notification_broadcast import (
    NotificationBroadcaster, register_push_token,
)

router = APIRouter(prefix="/api/v1", tags=["notifications"])


@router.post(
    "/push-tokens", response_model=PushTokenResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_push_token(
    body: PushTokenCreate,
    tokens: SqlPushTokenRepository = Depends(get_push_token_repository),
):
    """Register a device's Expo push token."""
    created = await register_push_token(tokens, body.token)
    if not created:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"token": body.token, "created": False},
        )
    return PushTokenResponse(token=body.token, created=True)


@router.post(
    "/notifications/daily", response_model=BroadcastResponse,
    dependencies=[Depends(require_broadcast_secret)],
)
async def broadcast_daily_question(
    today: QuestionDate = Depends(get_today),
    broadcaster: NotificationBroadcaster = Depends(get_broadcaster),
):
    """Send today's question to every registered device."""
    summary = await broadcaster.broadcast(today)
    return BroadcastResponse(
        message="Notifications sent" if summary.sent else "No notifications sent",
        question_date=summary.question_date,
        sent=summary.sent,
        failed=summary.failed,
        pruned=summary.pruned,
    )
