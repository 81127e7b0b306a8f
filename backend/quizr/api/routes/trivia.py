"""Trivia Route — rate-limited pass-through to the content source.

Invariants:
    - Nothing is persisted: every call fetches a fresh, sanitized question
    - Rate-limited before the outbound call
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends

from quizr.api.dependencies import enforce_rate_limit, get_question_source
from quizr.core.repository_protocols import QuestionSource
from quizr.schemas.question import TriviaQuestionResponse

router = APIRouter(
    prefix="/api/v1/trivia",
    tags=["trivia"],
    dependencies=[Depends(enforce_rate_limit)],
)


@router.get("/question", response_model=TriviaQuestionResponse)
async def get_trivia_question(
    source: QuestionSource = Depends(get_question_source),
):
    """Fetch one random question without making it today's question."""
    question = await source.fetch_question()
    payload = asdict(question)
    payload["incorrect_answers"] = list(question.incorrect_answers)
    return payload
