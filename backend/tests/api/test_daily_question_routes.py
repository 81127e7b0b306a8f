"""Daily question endpoints end to end — SQLite DB, fake content source, fake clock.

Invariants covered:
    - First request of a day creates the question and the device's attempt
    - Same device, same day -> same question, no extra fetch
    - Completion flips status one way; completion without a fetch is 404
    - Rate limiting rejects before any IO and recovers after the window
"""

from sqlalchemy import select

from quizr.core.errors import ContentSourceError
from quizr.models import DailyQuestion

DEVICE = {"X-Device-Id": "device_abc"}


async def test_first_request_creates_question_and_status(client, question_source):
    response = await client.get("/api/v1/daily-question", headers=DEVICE)

    assert response.status_code == 200
    data = response.json()
    assert data["question"] == "Question number 1?"
    assert data["correct_answer"] == "Right 1"
    assert data["incorrect_answers"] == ["Wrong A", "Wrong B", "Wrong C"]
    assert data["user_status"] == {
        "has_attempted": False, "is_completed": False, "can_attempt": True,
    }
    assert question_source.calls == 1


async def test_post_is_accepted_like_get(client):
    get = await client.get("/api/v1/daily-question", headers=DEVICE)
    post = await client.post("/api/v1/daily-question", headers=DEVICE)
    assert post.status_code == 200
    assert post.json()["id"] == get.json()["id"]


async def test_same_question_for_all_devices(client, question_source):
    a = await client.get("/api/v1/daily-question", headers={"X-Device-Id": "a"})
    b = await client.get("/api/v1/daily-question", headers={"X-Device-Id": "b"})
    assert a.json()["id"] == b.json()["id"]
    assert a.json()["question"] == b.json()["question"]
    assert question_source.calls == 1


async def test_complete_then_status_reflects_completion(client):
    await client.get("/api/v1/daily-question", headers=DEVICE)

    done = await client.post("/api/v1/daily-question/complete", headers=DEVICE)

    assert done.status_code == 200
    assert done.json() == {
        "success": True,
        "message": "Question marked as completed",
        "user_status": {
            "has_attempted": True, "is_completed": True, "can_attempt": False,
        },
    }
    again = await client.get("/api/v1/daily-question", headers=DEVICE)
    assert again.json()["user_status"]["is_completed"] is True
    assert again.json()["user_status"]["can_attempt"] is False


async def test_complete_twice_is_idempotent(client):
    await client.get("/api/v1/daily-question", headers=DEVICE)
    await client.post("/api/v1/daily-question/complete", headers=DEVICE)
    second = await client.post("/api/v1/daily-question/complete", headers=DEVICE)
    assert second.status_code == 200
    assert second.json()["user_status"]["is_completed"] is True


async def test_complete_without_fetch_is_404(client):
    response = await client.post("/api/v1/daily-question/complete", headers=DEVICE)

    assert response.status_code == 404
    body = response.json()
    assert body["code"] == "ATTEMPT_NOT_FOUND"
    assert body["can_retry"] is False
    assert "error" in body and "timestamp" in body


async def test_missing_device_header_falls_back_to_forwarded_for(client):
    headers = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}
    await client.get("/api/v1/daily-question", headers=headers)

    # same fallback identity on the completion endpoint
    done = await client.post("/api/v1/daily-question/complete", headers=headers)
    assert done.status_code == 200

    other = await client.post(
        "/api/v1/daily-question/complete", headers={"X-Device-Id": "203.0.113.8"},
    )
    assert other.status_code == 404


async def test_content_source_failure_is_502_and_creates_nothing(
    client, question_source,
):
    question_source.error = ContentSourceError("HTTP 500 from upstream")
    response = await client.get("/api/v1/daily-question", headers=DEVICE)

    assert response.status_code == 502
    body = response.json()
    assert body["code"] == "CONTENT_SOURCE_ERROR"
    assert body["can_retry"] is True
    assert "upstream" not in body["error"]

    question_source.error = None
    recovered = await client.get("/api/v1/daily-question", headers=DEVICE)
    assert recovered.status_code == 200


async def test_rate_limit_rejects_eleventh_request_then_recovers(client, clock):
    headers = {"X-Forwarded-For": "198.51.100.1", **DEVICE}
    for _ in range(10):
        ok = await client.get("/api/v1/daily-question", headers=headers)
        assert ok.status_code == 200

    limited = await client.get("/api/v1/daily-question", headers=headers)

    assert limited.status_code == 429
    body = limited.json()
    assert body["code"] == "RATE_LIMIT_EXCEEDED"
    assert body["retry_after"] == 60
    assert body["can_retry"] is True
    assert limited.headers["Retry-After"] == "60"
    assert limited.headers["X-RateLimit-Limit"] == "10"
    assert limited.headers["X-RateLimit-Window"] == "60"

    clock.advance(61)
    again = await client.get("/api/v1/daily-question", headers=headers)
    assert again.status_code == 200


async def test_rate_limit_is_per_client(client):
    for _ in range(10):
        await client.get(
            "/api/v1/daily-question",
            headers={"X-Forwarded-For": "198.51.100.1", **DEVICE},
        )
    other = await client.get(
        "/api/v1/daily-question",
        headers={"X-Forwarded-For": "198.51.100.2", **DEVICE},
    )
    assert other.status_code == 200


async def test_rate_limit_counts_completion_endpoint(client):
    headers = {"X-Forwarded-For": "198.51.100.9", **DEVICE}
    for _ in range(10):
        await client.post("/api/v1/daily-question/complete", headers=headers)
    limited = await client.post("/api/v1/daily-question/complete", headers=headers)
    assert limited.status_code == 429


async def test_question_is_for_the_request_day(client, test_session_factory, today):
    await client.get("/api/v1/daily-question", headers=DEVICE)

    async with test_session_factory() as session:
        dates = (await session.execute(select(DailyQuestion.question_date))).scalars().all()
    assert dates == [today]
