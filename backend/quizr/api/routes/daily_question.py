"""Daily Question Routes — get-or-create today's question and mark it completed.

Invariants:
    - Both endpoints are rate-limited before any IO
    - Both endpoints resolve the device id and today's date once, via dependencies
    - Completion without a prior fetch -> 404 ATTEMPT_NOT_FOUND

Design Decisions:
    - GET and POST both accepted on /daily-question: mobile clients call it either way
"""

import logging

from fastapi import APIRouter, Depends

from quizr.api.dependencies import (
    enforce_rate_limit, get_attempt_tracker, get_device_id, get_provisioner,
    get_today,
)
from quizr.core.domain_types import DeviceId, QuestionDate
from quizr.schemas.question import CompletionResponse, DailyQuestionResponse
from quizr.services.attempt_tracker import AttemptTracker
from quizr.services.daily_question import (
    complete_daily_question, serve_daily_question,
)
from quizr.services.question_provisioner import DailyQuestionProvisioner

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/v1/daily-question",
    tags=["daily-question"],
    dependencies=[Depends(enforce_rate_limit)],
)


@router.api_route(
    "", methods=["GET", "POST"], response_model=DailyQuestionResponse,
)
async def get_daily_question(
    device_id: DeviceId = Depends(get_device_id),
    today: QuestionDate = Depends(get_today),
    provisioner: DailyQuestionProvisioner = Depends(get_provisioner),
    tracker: AttemptTracker = Depends(get_attempt_tracker),
):
    """Return today's question and this device's status, creating either if missing."""
    return await serve_daily_question(provisioner, tracker, device_id, today)


@router.post("/complete", response_model=CompletionResponse)
async def mark_question_completed(
    device_id: DeviceId = Depends(get_device_id),
    today: QuestionDate = Depends(get_today),
    tracker: AttemptTracker = Depends(get_attempt_tracker),
):
    """Mark today's attempt completed (one-way)."""
    return await complete_daily_question(tracker, device_id, today)
