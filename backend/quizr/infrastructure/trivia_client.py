"""Trivia Content Client — fetches one multiple-choice item from the content source.

Invariants:
    - Exactly one outbound GET per fetch_question() call, no automatic retry
    - Transport errors, timeouts, non-2xx, non-JSON content type and unparsable
      bodies all raise ContentSourceError
    - Returned content is always sanitized and bounds-checked (core/question_content)

Design Decisions:
    - httpx.AsyncClient owned by the app lifespan; tests inject a MockTransport
    - Upstream bodies are logged, never placed in the user-facing error message
"""

import logging

import httpx

from quizr.core.domain_types import ValidatedQuestion
from quizr.core.errors import ContentSourceError
from quizr.core.question_content import extract_question

logger = logging.getLogger(__name__)


class TriviaClient:
    """Content source wrapper with error mapping."""

    def __init__(
        self,
        api_url: str,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_url = api_url
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def fetch_question(self) -> ValidatedQuestion:
        """Fetch, sanitize and validate one question."""
        try:
            response = await self.client.get(self.api_url)
        except httpx.TimeoutException as e:
            logger.error(f"Trivia source timeout: {e}")
            raise ContentSourceError("timeout")
        except httpx.HTTPError as e:
            logger.error(f"Trivia source unreachable: {e}")
            raise ContentSourceError("unreachable")

        if not response.is_success:
            logger.error(
                f"Trivia source returned {response.status_code}",
                extra={"status_code": response.status_code},
            )
            raise ContentSourceError(f"HTTP {response.status_code}")

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise ContentSourceError("non-JSON response")

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Trivia source sent invalid JSON: {e}")
            raise ContentSourceError("invalid JSON body")

        question = extract_question(payload)
        logger.info("Fetched trivia question", extra={"outcome": "fetched"})
        return question

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
