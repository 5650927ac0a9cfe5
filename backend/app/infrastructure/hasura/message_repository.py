"""
Hasura implementation of the privileged message repository.
"""

from __future__ import annotations

from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import ChatbotError, PersistenceWriteFailed
from app.infrastructure.hasura.documents import INSERT_MESSAGE
from app.infrastructure.hasura.graphql_client import GraphQLClient
from app.interfaces.message_repository import IMessageRepository
from app.models.message import Message, MessageCreate


class HasuraMessageRepository(IMessageRepository):
    """Writes message rows with the admin secret (service-level credentials)."""

    def __init__(self, client: GraphQLClient):
        self._client = client

    async def insert_message(
        self,
        chat_id: str,
        content: str,
        is_bot: bool,
        user_id: Optional[str] = None,
    ) -> Message:
        row_in = MessageCreate(chat_id=chat_id, content=content, is_bot=is_bot, user_id=user_id)
        try:
            data = await self._client.execute(
                INSERT_MESSAGE,
                {
                    "chatId": row_in.chat_id,
                    "content": row_in.content,
                    "isBot": row_in.is_bot,
                    "userId": row_in.user_id,
                },
            )
        except ChatbotError as e:
            raise PersistenceWriteFailed(
                f"Failed to store message for chat {chat_id}: {e.message}",
                details=e.details,
            ) from e

        row = data.get("insert_messages_one")
        if not row:
            raise PersistenceWriteFailed(f"Backend stored no message row for chat {chat_id}")

        try:
            return Message.model_validate({"chat_id": chat_id, **row})
        except PydanticValidationError as e:
            raise PersistenceWriteFailed(f"Backend returned a malformed message row: {e}") from e
