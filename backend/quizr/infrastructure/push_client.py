"""Push Client — delivers notifications through the Expo push API.

Invariants:
    - Messages are sent in chunks of at most MAX_MESSAGES_PER_REQUEST
    - One PushTicket per input message, in input order
    - Transport failure or non-2xx on any chunk raises PushDeliveryError
    - A ticket with status != "ok" is a per-message failure, not an exception

Design Decisions:
    - Chunks sent sequentially: broadcast is a background job, not latency-bound
"""

import logging

import httpx

from quizr.core.domain_types import PushMessage, PushTicket
from quizr.core.errors import PushDeliveryError

logger = logging.getLogger(__name__)

MAX_MESSAGES_PER_REQUEST = 100


def chunked(items: list, size: int) -> list[list]:
    return [items[i:i + size] for i in range(0, len(items), size)]


def parse_tickets(messages: list[PushMessage], body: object) -> list[PushTicket]:
    """Pair each message with the ticket at the same index."""
    data = body.get("data") if isinstance(body, dict) else None
    if not isinstance(data, list):
        data = []
    tickets = []
    for i, message in enumerate(messages):
        raw = data[i] if i < len(data) and isinstance(data[i], dict) else None
        if raw is None:
            tickets.append(PushTicket(message.to, False, error="MissingTicket"))
            continue
        if raw.get("status") == "ok":
            tickets.append(PushTicket(message.to, True))
            continue
        details = raw.get("details") if isinstance(raw.get("details"), dict) else {}
        tickets.append(PushTicket(
            message.to, False,
            error=details.get("error") or "Unknown",
            message=raw.get("message"),
        ))
    return tickets


class ExpoPushClient:
    """Sends PushMessage batches to the Expo push endpoint."""

    def __init__(
        self,
        api_url: str,
        timeout_seconds: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_url = api_url
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout_seconds)

    async def send(self, messages: list[PushMessage]) -> list[PushTicket]:
        tickets: list[PushTicket] = []
        for chunk in chunked(messages, MAX_MESSAGES_PER_REQUEST):
            tickets.extend(await self._send_chunk(chunk))
        return tickets

    async def _send_chunk(self, chunk: list[PushMessage]) -> list[PushTicket]:
        payload = [
            {"to": m.to, "sound": m.sound, "title": m.title, "body": m.body}
            for m in chunk
        ]
        try:
            response = await self.client.post(
                self.api_url,
                json=payload,
                headers={
                    "Accept": "application/json",
                    "Accept-Encoding": "gzip, deflate",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Push API unreachable: {e}")
            raise PushDeliveryError("push service unreachable")

        if not response.is_success:
            logger.error(
                f"Push API returned {response.status_code}: {response.text}",
                extra={"status_code": response.status_code},
            )
            raise PushDeliveryError(f"HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            raise PushDeliveryError("invalid JSON body")
        if isinstance(body, dict) and body.get("errors"):
            logger.warning(f"Push API reported errors: {body['errors']}")
        return parse_tickets(chunk, body)

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
