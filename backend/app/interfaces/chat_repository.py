"""
Chat repository interface.

Defines the contract for the user-scoped operations the chat client performs
with the signed-in user's own credentials.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from app.models.chat import Chat
from app.models.message import Message


class IChatRepository(ABC):
    """Abstract interface for user-scoped chat and message access."""

    @abstractmethod
    async def list_chats(self) -> list[Chat]:
        """List the user's chats, most recently updated first."""
        pass

    @abstractmethod
    async def create_chat(self, title: str) -> Chat:
        """Create a chat owned by the user."""
        pass

    @abstractmethod
    async def rename_chat(self, chat_id: str, title: str) -> Optional[Chat]:
        """Rename a chat. Returns None if it no longer exists."""
        pass

    @abstractmethod
    async def delete_chat(self, chat_id: str) -> bool:
        """Delete a chat. Returns False if nothing was deleted."""
        pass

    @abstractmethod
    async def list_messages(self, chat_id: str) -> list[Message]:
        """List a chat's messages, oldest first."""
        pass

    @abstractmethod
    async def send_message(self, chat_id: str, content: str) -> Message:
        """Insert a human-authored message row (is_bot = false)."""
        pass

    @abstractmethod
    async def request_bot_reply(self, chat_id: str, message: str) -> Optional[str]:
        """
        Invoke the chatbot action for the latest user message.

        Returns:
            Reply text returned by the relay, if any
        """
        pass
