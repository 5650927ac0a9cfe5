"""Pydantic models (schemas) for the application."""

from app.models.auth import AuthSession
from app.models.chat import Chat, ChatBase, ChatCreate
from app.models.message import Message, MessageBase, MessageCreate
from app.models.relay import RelayRequest, RelayResult

__all__ = [
    # Chat
    "Chat",
    "ChatBase",
    "ChatCreate",
    # Message
    "Message",
    "MessageBase",
    "MessageCreate",
    # Relay
    "RelayRequest",
    "RelayResult",
    # Auth
    "AuthSession",
]
