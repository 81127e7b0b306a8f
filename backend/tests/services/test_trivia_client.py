"""TriviaClient over httpx.MockTransport — error mapping for every upstream failure mode."""

import httpx
import pytest

from quizr.core.errors import ContentSourceError, QuestionValidationError
from quizr.infrastructure.trivia_client import TriviaClient

API_URL = "https://opentdb.test/api.php?amount=1&type=multiple"

GOOD_PAYLOAD = {
    "response_code": 0,
    "results": [{
        "category": "Science &amp; Nature",
        "type": "multiple",
        "difficulty": "easy",
        "question": "What is H&#039;s atomic number?",
        "correct_answer": "1",
        "incorrect_answers": ["2", "3", "4"],
    }],
}


def _client(handler) -> TriviaClient:
    return TriviaClient(
        API_URL, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


async def test_fetch_success_sanitizes_content():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=GOOD_PAYLOAD)

    question = await _client(handler).fetch_question()

    assert len(requests) == 1
    assert question.question == "What is H's atomic number?"
    assert question.correct_answer == "1"
    assert question.incorrect_answers == ("2", "3", "4")
    assert question.category == "Science & Nature"


async def test_non_success_status_raises():
    client = _client(lambda r: httpx.Response(503, json={"detail": "down"}))
    with pytest.raises(ContentSourceError) as exc:
        await client.fetch_question()
    assert exc.value.retryable is True


async def test_non_json_content_type_raises():
    client = _client(lambda r: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(ContentSourceError):
        await client.fetch_question()


async def test_invalid_json_body_raises():
    client = _client(lambda r: httpx.Response(
        200, content=b"{not json", headers={"content-type": "application/json"},
    ))
    with pytest.raises(ContentSourceError):
        await client.fetch_question()


async def test_timeout_raises():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(ContentSourceError):
        await _client(handler).fetch_question()


async def test_connection_error_raises():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ContentSourceError):
        await _client(handler).fetch_question()


async def test_upstream_error_code_raises():
    client = _client(lambda r: httpx.Response(
        200, json={"response_code": 1, "results": []},
    ))
    with pytest.raises(ContentSourceError):
        await client.fetch_question()


async def test_invalid_item_raises_validation_error():
    payload = {"response_code": 0, "results": [{
        "question": "Pick one", "correct_answer": "A", "incorrect_answers": [],
    }]}
    client = _client(lambda r: httpx.Response(200, json=payload))
    with pytest.raises(QuestionValidationError):
        await client.fetch_question()


async def test_aclose_leaves_injected_client_open():
    injected = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda r: httpx.Response(200, json=GOOD_PAYLOAD)),
    )
    client = TriviaClient(API_URL, client=injected)
    await client.aclose()
    assert injected.is_closed is False
    await injected.aclose()
