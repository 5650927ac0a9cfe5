"""
Relay service.

Takes one user message to a stored bot reply: completion call first, then a
single privileged message write. No retries; the first failure is final.
"""

from __future__ import annotations

from app.core.exceptions import ValidationFailed
from app.core.logger import setup_logger
from app.interfaces.completion_provider import ICompletionProvider
from app.interfaces.message_repository import IMessageRepository
from app.models.relay import RelayRequest, RelayResult

logger = setup_logger(__name__)


class RelayService:
    """Bridges a chatbot action call to the completion API and back."""

    def __init__(
        self,
        completion_provider: ICompletionProvider,
        message_repo: IMessageRepository,
    ):
        self._completion_provider = completion_provider
        self._message_repo = message_repo

    async def relay(self, request: RelayRequest) -> RelayResult:
        """
        Produce and store the bot reply for one user message.

        Raises:
            ValidationFailed: Message text is empty
            CompletionUnavailable: Completion API failed; nothing was stored
            PersistenceWriteFailed: Reply could not be stored
        """
        if not request.message.strip():
            raise ValidationFailed("Message text must not be empty")

        logger.info(
            f"Relaying message for chat {request.chat_id} "
            f"(user {request.user_id}, {len(request.message)} chars) "
            f"via {self._completion_provider.get_model_name()}"
        )

        reply = await self._completion_provider.complete(request.message)

        stored = await self._message_repo.insert_message(
            chat_id=request.chat_id,
            content=reply,
            is_bot=True,
            user_id=request.user_id,
        )
        logger.info(f"Bot message {stored.id} stored for chat {request.chat_id}")

        return RelayResult(reply=reply, message_id=stored.id, created_at=stored.created_at)
