"""
Chat thread models.

A Chat belongs to exactly one user and owns an ordered list of messages.
Rows live in the GraphQL backend; these models mirror its projections.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.utils.datetime_utils import ensure_utc


class ChatBase(BaseModel):
    """Base chat fields."""

    title: str = Field(..., description="Chat title")


class ChatCreate(ChatBase):
    """Schema for creating a chat."""

    @field_validator("title")
    @classmethod
    def _strip_title(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title must not be empty")
        return value


class Chat(ChatBase):
    """Chat model as returned by the chats list query."""

    id: str = Field(..., description="Chat ID (uuid)")
    user_id: Optional[str] = Field(None, description="Owner user ID")
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)
