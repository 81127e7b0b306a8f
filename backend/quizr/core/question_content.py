"""Question Content — sanitize and validate one raw trivia item.

Invariants:
    - sanitize_text is idempotent on text with no markup and no entities; decoded
      "<" ... ">" pairs read as a tag on a second pass, so raw content is
      sanitized exactly once
    - Validated question text <= MAX_QUESTION_LENGTH, each answer <= MAX_ANSWER_LENGTH
    - 1..MAX_INCORRECT_ANSWERS incorrect answers, none empty after sanitization
    - Envelope problems raise ContentSourceError; item problems raise QuestionValidationError

Design Decisions:
    - Markup stripped BEFORE entity decoding: encoded text like "5 &lt; 6" survives
      as "5 < 6" instead of being eaten by the tag pattern
    - Typographic entities mapped to ASCII first, html.unescape handles the rest
"""

import html
import re

from quizr.core.domain_types import ValidatedQuestion
from quizr.core.errors import ContentSourceError, QuestionValidationError

TRIVIA_API_SUCCESS_CODE = 0

MAX_QUESTION_LENGTH = 500
MAX_ANSWER_LENGTH = 200
MAX_INCORRECT_ANSWERS = 10

_SCRIPT_BLOCK = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_TAG = re.compile(r"<[^>]*>")
_JS_SCHEME = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"\bon\w+\s*=", re.IGNORECASE)
_ENCODED_SCRIPT = re.compile(r"&lt;/?script", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")

_ASCII_ENTITIES = {
    "&nbsp;": " ",
    "&hellip;": "...",
    "&mdash;": "-",
    "&ndash;": "-",
    "&rsquo;": "'",
    "&lsquo;": "'",
    "&rdquo;": '"',
    "&ldquo;": '"',
}

_OPTIONAL_FIELDS = ("category", "type", "difficulty")


def sanitize_text(text: str) -> str:
    """Strip markup and script-like content, decode entities, collapse whitespace."""
    if not isinstance(text, str):
        raise TypeError("sanitize_text expects a string")
    cleaned = _SCRIPT_BLOCK.sub("", text)
    cleaned = _TAG.sub("", cleaned)
    cleaned = _JS_SCHEME.sub("", cleaned)
    cleaned = _EVENT_HANDLER.sub("", cleaned)
    cleaned = _ENCODED_SCRIPT.sub("", cleaned)
    for entity, replacement in _ASCII_ENTITIES.items():
        cleaned = cleaned.replace(entity, replacement)
    cleaned = html.unescape(cleaned)
    return _WHITESPACE.sub(" ", cleaned).strip()


def extract_question(payload: object) -> ValidatedQuestion:
    """Validate the content-source envelope and return its single sanitized item."""
    if not isinstance(payload, dict):
        raise ContentSourceError("response is not an object")
    response_code = payload.get("response_code")
    if not isinstance(response_code, int) or isinstance(response_code, bool):
        raise ContentSourceError("missing or invalid response_code")
    if response_code != TRIVIA_API_SUCCESS_CODE:
        raise ContentSourceError(f"response_code {response_code}")
    results = payload.get("results")
    if not isinstance(results, list) or not results:
        raise ContentSourceError("missing or empty results list")
    return validate_question(results[0])


def validate_question(item: object) -> ValidatedQuestion:
    """Sanitize and bound-check one raw trivia item."""
    if not isinstance(item, dict):
        raise QuestionValidationError("item is not an object", "item")

    question = _sanitized_field(item.get("question"), "question", MAX_QUESTION_LENGTH)
    correct = _sanitized_field(
        item.get("correct_answer"), "correct_answer", MAX_ANSWER_LENGTH,
    )

    raw_incorrect = item.get("incorrect_answers")
    if not isinstance(raw_incorrect, list):
        raise QuestionValidationError(
            "missing or invalid incorrect answers", "incorrect_answers",
        )
    if not 1 <= len(raw_incorrect) <= MAX_INCORRECT_ANSWERS:
        raise QuestionValidationError(
            f"incorrect answers count out of range (1-{MAX_INCORRECT_ANSWERS})",
            "incorrect_answers",
        )
    incorrect = tuple(
        _sanitized_field(answer, f"incorrect_answers[{i}]", MAX_ANSWER_LENGTH)
        for i, answer in enumerate(raw_incorrect)
    )

    optional = {
        name: sanitize_text(item[name])
        for name in _OPTIONAL_FIELDS
        if isinstance(item.get(name), str) and item[name]
    }
    return ValidatedQuestion(
        question=question,
        correct_answer=correct,
        incorrect_answers=incorrect,
        **optional,
    )


def _sanitized_field(value: object, name: str, max_length: int) -> str:
    if not isinstance(value, str) or not value:
        raise QuestionValidationError(f"missing or invalid {name}", name)
    cleaned = sanitize_text(value)
    if not cleaned:
        raise QuestionValidationError(f"{name} is empty after sanitization", name)
    if len(cleaned) > max_length:
        raise QuestionValidationError(
            f"{name} too long ({len(cleaned)} > {max_length})", name,
        )
    return cleaned
