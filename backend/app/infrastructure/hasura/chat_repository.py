"""
Hasura implementation of the user-scoped chat repository.

Every call goes out with the signed-in user's bearer token, so the backend's
row-level permissions decide what the user can see and change.
"""

from __future__ import annotations

from typing import Any, Optional, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import GraphQLError, ValidationFailed
from app.infrastructure.hasura import documents
from app.infrastructure.hasura.graphql_client import GraphQLClient
from app.interfaces.chat_repository import IChatRepository
from app.models.chat import Chat, ChatCreate
from app.models.message import Message

ModelT = TypeVar("ModelT", bound=BaseModel)


def _to_model(model: type[ModelT], row: dict[str, Any]) -> ModelT:
    try:
        return model.model_validate(row)
    except PydanticValidationError as e:
        raise GraphQLError(
            f"Backend returned a malformed {model.__name__} row: {e}",
            e.errors(include_url=False),
        ) from e


def _chat_input(title: str) -> ChatCreate:
    try:
        return ChatCreate(title=title)
    except PydanticValidationError as e:
        raise ValidationFailed("Invalid chat title", details=e.errors(include_url=False)) from e


class HasuraChatRepository(IChatRepository):
    """GraphQL-backed chat and message access for one user session."""

    def __init__(self, client: GraphQLClient):
        self._client = client

    async def list_chats(self) -> list[Chat]:
        data = await self._client.execute(documents.GET_CHATS)
        return [_to_model(Chat, row) for row in data.get("chats") or []]

    async def create_chat(self, title: str) -> Chat:
        chat_in = _chat_input(title)
        data = await self._client.execute(documents.CREATE_CHAT, {"title": chat_in.title})
        row = data.get("insert_chats_one")
        if not row:
            raise GraphQLError("Chat was not created")
        return _to_model(Chat, row)

    async def rename_chat(self, chat_id: str, title: str) -> Optional[Chat]:
        chat_in = _chat_input(title)
        data = await self._client.execute(
            documents.UPDATE_CHAT,
            {"id": chat_id, "title": chat_in.title},
        )
        row = data.get("update_chats_by_pk")
        return _to_model(Chat, row) if row else None

    async def delete_chat(self, chat_id: str) -> bool:
        data = await self._client.execute(documents.DELETE_CHAT, {"id": chat_id})
        return bool(data.get("delete_chats_by_pk"))

    async def list_messages(self, chat_id: str) -> list[Message]:
        data = await self._client.execute(documents.GET_CHAT_MESSAGES, {"chatId": chat_id})
        return [
            _to_model(Message, {"chat_id": chat_id, **row})
            for row in data.get("messages") or []
        ]

    async def send_message(self, chat_id: str, content: str) -> Message:
        data = await self._client.execute(
            documents.SEND_MESSAGE,
            {"chatId": chat_id, "content": content},
        )
        row = data.get("insert_messages_one")
        if not row:
            raise GraphQLError("Message was not stored")
        return _to_model(Message, {"chat_id": chat_id, **row})

    async def request_bot_reply(self, chat_id: str, message: str) -> Optional[str]:
        data = await self._client.execute(
            documents.SEND_CHATBOT_MESSAGE,
            {"chatId": chat_id, "message": message},
        )
        return _reply_text(data.get("sendChatbotMessage"))


def _reply_text(result: Any) -> Optional[str]:
    # Scalar action output is the bare reply; object outputs carry it in `response`
    if isinstance(result, str):
        return result
    if isinstance(result, dict):
        reply = result.get("response") or result.get("message")
        return reply if isinstance(reply, str) else None
    return None
