"""Notification Broadcast — push today's question to every registered device.

Invariants:
    - The body is today's provisioned question text (same one the app will show)
    - No tokens -> no push call, zero summary
    - Tokens whose ticket says DeviceNotRegistered are removed after the send
    - PushDeliveryError from the sender propagates; nothing is pruned in that case

Design Decisions:
    - Token registration lives here too: tiny, and the only consumer of tokens
      is the broadcast
"""

import logging
import re

from quizr.core.domain_types import BroadcastSummary, PushMessage, QuestionDate
from quizr.core.errors import InvalidPushTokenError
from quizr.core.repository_protocols import PushSender, PushTokenRepository
from quizr.services.question_provisioner import DailyQuestionProvisioner

logger = logging.getLogger(__name__)

EXPO_TOKEN_PATTERN = re.compile(r"^Expo(nent)?PushToken\[[^\[\]\s]+\]$")
DEVICE_NOT_REGISTERED = "DeviceNotRegistered"


async def register_push_token(tokens: PushTokenRepository, token: str) -> bool:
    """Register an Expo push token. True if newly added, False if already known."""
    token = token.strip()
    if not EXPO_TOKEN_PATTERN.match(token):
        raise InvalidPushTokenError()
    return await tokens.add(token)


class NotificationBroadcaster:
    """Sends the daily question to all push tokens."""

    def __init__(
        self,
        provisioner: DailyQuestionProvisioner,
        tokens: PushTokenRepository,
        sender: PushSender,
        title: str,
    ):
        self.provisioner = provisioner
        self.tokens = tokens
        self.sender = sender
        self.title = title

    async def broadcast(self, today: QuestionDate) -> BroadcastSummary:
        question = await self.provisioner.get_or_create(today)
        summary = BroadcastSummary(question_date=today)

        destinations = await self.tokens.list_tokens()
        if not destinations:
            logger.info("No push tokens registered", extra={"outcome": "skipped"})
            return summary

        messages = [
            PushMessage(to=token, title=self.title, body=question.question_text)
            for token in destinations
        ]
        tickets = await self.sender.send(messages)

        stale = []
        for ticket in tickets:
            if ticket.ok:
                summary.sent += 1
                continue
            summary.failed += 1
            if ticket.error:
                summary.errors.append(ticket.error)
            if ticket.error == DEVICE_NOT_REGISTERED:
                stale.append(ticket.token)

        summary.pruned = await self.tokens.remove(stale)
        logger.info(
            "Daily notification broadcast finished",
            extra={
                "question_date": today.isoformat(),
                "sent": summary.sent,
                "failed": summary.failed,
                "pruned": summary.pruned,
            },
        )
        return summary
