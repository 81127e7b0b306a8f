"""Daily Question Flow — what the get-or-create endpoint returns for one device.

Invariants:
    - The question is provisioned before the attempt record (FK needs its id)
    - Response shape: {id, question, correct_answer, incorrect_answers, user_status}
"""


from quizr.core.attempt_state import user_status
from quizr.core.domain_types import (
    AttemptRecord, DailyQuestionRecord, DeviceId, QuestionDate,
)
from quizr.services.attempt_tracker import AttemptTracker
from quizr.services.question_provisioner import DailyQuestionProvisioner


def build_question_response(
    question: DailyQuestionRecord, attempt: AttemptRecord,
) -> dict:
    return {
        "id": str(question.id),
        "question": question.question_text,
        "correct_answer": question.correct_answer,
        "incorrect_answers": list(question.incorrect_answers),
        "user_status": user_status(attempt),
    }


async def serve_daily_question(
    provisioner: DailyQuestionProvisioner,
    tracker: AttemptTracker,
    device_id: DeviceId,
    today: QuestionDate,
) -> dict:
    """Provision today's question and ensure the device's attempt record."""
    question = await provisioner.get_or_create(today)
    attempt = await tracker.ensure_attempt(device_id, today, question)
    return build_question_response(question, attempt)


async def complete_daily_question(
    tracker: AttemptTracker, device_id: DeviceId, today: QuestionDate,
) -> dict:
    """Flip today's attempt to completed and report the terminal status."""
    attempt = await tracker.mark_completed(device_id, today)
    return {
        "success": True,
        "message": "Question marked as completed",
        "user_status": user_status(attempt),
    }
