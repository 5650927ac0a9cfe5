"""
Message repository interface.

Defines the contract for writing message rows with service-level credentials.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from app.models.message import Message


class IMessageRepository(ABC):
    """Abstract interface for privileged message writes."""

    @abstractmethod
    async def insert_message(
        self,
        chat_id: str,
        content: str,
        is_bot: bool,
        user_id: Optional[str] = None,
    ) -> Message:
        """
        Insert one message row.

        Args:
            chat_id: Parent chat ID
            content: Message text
            is_bot: Author flag
            user_id: Author (or requesting) user ID, if any

        Returns:
            Stored message with backend-assigned id and created_at

        Raises:
            PersistenceWriteFailed: If the backend rejects or cannot be reached
        """
        pass
