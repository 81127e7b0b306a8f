"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Natural keys (date; device_id + date; token) carry UNIQUE constraints

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from quizr.models.daily_question import DailyQuestion  # noqa: F401
from quizr.models.question_attempt import QuestionAttempt  # noqa: F401
from quizr.models.push_token import PushToken  # noqa: F401
