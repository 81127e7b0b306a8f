"""Error Hierarchy — typed, categorized exceptions for all Quizr failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Every error declares whether the client may retry (can_retry in the envelope)
    - to_response() produces the {error, code, can_retry, timestamp} envelope
    - No internal details leaked in user-facing messages
    - Uniqueness conflicts are NOT errors — repositories return InsertOutcome.CONFLICT

Design Decisions:
    - Single hierarchy with QuizrError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    RATE_LIMIT = "rate_limit"
    AUTHORIZATION = "authorization"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    device_id: str | None = None
    question_date: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_seconds: int | None = None


class QuizrError(Exception):
    """Base exception for all Quizr errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status
        self.retryable = retryable

    def to_response(self) -> dict:
        """Convert to the public error envelope."""
        return {
            "error": self.message,
            "code": self.code,
            "can_retry": self.retryable,
            "timestamp": self.context.timestamp.isoformat(),
        }

    def response_headers(self) -> dict[str, str] | None:
        """Extra HTTP headers for this error (none by default)."""
        return None


# ─── Client Errors (400-level) ──────────────────────────────────

class AttemptNotFoundError(QuizrError):
    """Completion requested before the device fetched today's question."""
    def __init__(
        self, device_id: str, question_date: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.device_id = device_id
        ctx.question_date = question_date
        super().__init__(
            "No attempt found for today. Fetch today's question first.",
            "ATTEMPT_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )


class RateLimitExceededError(QuizrError):
    """Client exceeded its request budget for the current window."""
    def __init__(
        self,
        retry_after_seconds: int,
        limit: int,
        window_seconds: int,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_seconds = retry_after_seconds
        super().__init__(
            "Rate limit exceeded. Please try again later.",
            "RATE_LIMIT_EXCEEDED", ErrorCategory.RATE_LIMIT,
            ErrorSeverity.WARNING, ctx, 429, retryable=True,
        )
        self.retry_after_seconds = retry_after_seconds
        self.limit = limit
        self.window_seconds = window_seconds

    def to_response(self) -> dict:
        response = super().to_response()
        response.update({
            "retry_after": self.retry_after_seconds,
            "limit": self.limit,
            "window_seconds": self.window_seconds,
        })
        return response

    def response_headers(self) -> dict[str, str]:
        return {
            "Retry-After": str(self.retry_after_seconds),
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Window": str(self.window_seconds),
        }


class UnauthorizedError(QuizrError):
    """Caller did not present the expected shared secret."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Unauthorized", "UNAUTHORIZED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 401,
        )


class InvalidPushTokenError(QuizrError):
    """Submitted token is not an Expo push token."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Invalid push token format", "INVALID_PUSH_TOKEN",
            ErrorCategory.VALIDATION, ErrorSeverity.WARNING, context, 400,
        )


# ─── Upstream / Infrastructure Errors (500-level) ───────────────

class ContentSourceError(QuizrError):
    """Trivia content source unreachable, non-success, or structurally invalid."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Trivia content source error: {message}",
            "CONTENT_SOURCE_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 502, retryable=True,
        )

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"] = "Failed to fetch trivia question. Please try again later."
        return response


class QuestionValidationError(QuizrError):
    """Sanitized trivia content violates length or shape constraints."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid question data: {message}",
            "QUESTION_VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 502, retryable=True,
        )
        self.field = field

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"] = "Failed to fetch trivia question. Please try again later."
        return response


class PersistenceError(QuizrError):
    """Non-conflict database failure.

    retryable=True for timeouts and connection-level failures (503),
    False for everything else (500).
    """
    def __init__(
        self,
        message: str,
        operation: str,
        retryable: bool = False,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context,
            503 if retryable else 500, retryable=retryable,
        )
        self.operation = operation

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"] = "A database error occurred"
        return response


class PushDeliveryError(QuizrError):
    """Push service rejected the batch or was unreachable."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Push delivery failed: {message}",
            "PUSH_DELIVERY_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, context, 502, retryable=True,
        )

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"] = "Failed to send notifications"
        return response
