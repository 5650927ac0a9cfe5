"""
Message models.

Messages are immutable once stored and ordered within a chat by created_at.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.utils.datetime_utils import ensure_utc


class MessageBase(BaseModel):
    """Base message fields."""

    content: str = Field(..., description="Message text")
    is_bot: bool = Field(False, description="True for bot-authored rows")


class MessageCreate(MessageBase):
    """Schema for inserting a message row."""

    chat_id: str = Field(..., description="Parent chat ID")
    user_id: Optional[str] = Field(None, description="Author user ID")


class Message(MessageBase):
    """Message model as returned by queries and subscriptions."""

    id: str
    chat_id: Optional[str] = None
    user_id: Optional[str] = None
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


def sort_messages(messages: list[Message]) -> list[Message]:
    """Order messages by creation time. Stable for equal timestamps."""
    return sorted(messages, key=lambda message: message.created_at)
