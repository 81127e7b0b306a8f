"""Structured Logging — one JSON object per line for the Quizr API.

Invariants:
    - Every line carries timestamp, level, logger and message
    - Request-scoped extras from _EXTRA_KEYS (device, client, question date,
      outcome, broadcast counters, ...) are copied when the call site sets them;
      any other extra attribute is dropped
    - log_format "json" -> JSONFormatter, anything else -> plain text

Design Decisions:
    - Hand-written formatter on stdlib logging, no logging dependency
    - setup_logging runs from the lifespan; its handler is named "quizr" so a
      second call replaces it instead of stacking another
"""

import logging
import json
from datetime import datetime, timezone

_EXTRA_KEYS = (
    "device_id", "client_id", "question_date", "error_code", "path",
    "outcome", "sent", "failed", "pruned", "status_code",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    handler.set_name("quizr")
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s - %(message)s",
        ))
    for existing in list(logging.root.handlers):
        if existing.get_name() == "quizr":
            logging.root.removeHandler(existing)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
