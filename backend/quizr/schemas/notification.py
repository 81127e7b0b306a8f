"""Notification Schemas — push token registration and broadcast results.

Invariants:
    - PushTokenCreate.token: 1-255 chars, stripped, non-empty
"""

from datetime import date

from pydantic import BaseModel, Field, field_validator


class PushTokenCreate(BaseModel):
    """Push token registration body."""
    token: str = Field(min_length=1, max_length=255)

    @field_validator("token")
    @classmethod
    def strip_token(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("token cannot be empty or whitespace")
        return v


class PushTokenResponse(BaseModel):
    token: str
    created: bool


class BroadcastResponse(BaseModel):
    """Summary of one daily broadcast."""
    message: str
    question_date: date | None
    sent: int
    failed: int
    pruned: int
