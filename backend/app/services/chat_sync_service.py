"""
Chat sync service.

Keeps a client's view of chats and messages consistent with the backend by
combining three sources:
- a chat-list query repeated on a fixed interval (and right after the user
  creates, renames or deletes a chat)
- a live subscription streaming the open chat's messages
- a message-list query used until the subscription has delivered data

plus the local "awaiting reply" state between submitting a message and the
bot reply showing up. Failures are logged and swallowed; the user only sees
that no reply arrived.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import AsyncIterator, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from pydantic import ValidationError as PydanticValidationError

from app.core.config import Settings, get_settings
from app.core.exceptions import ChatbotError, SubscriptionError
from app.core.logger import setup_logger
from app.infrastructure.hasura.chat_repository import HasuraChatRepository
from app.infrastructure.hasura.documents import MESSAGES_SUBSCRIPTION
from app.infrastructure.hasura.graphql_client import GraphQLClient
from app.infrastructure.hasura.subscription import GraphQLSubscription
from app.interfaces.chat_repository import IChatRepository
from app.models.auth import AuthSession
from app.models.chat import Chat
from app.models.message import Message, sort_messages
from app.services.realtime_service import SyncEventBus, sync_events

logger = setup_logger(__name__)

CHAT_LIST_POLL_JOB_ID = "chat_list_poll"

MessageStreamFactory = Callable[[str], AsyncIterator[list[Message]]]


@dataclass
class MessageFeed:
    """
    Messages of one open chat from both sources.

    Visible messages are the subscription snapshot when it is non-empty,
    otherwise the last list-query snapshot, ordered by created_at.
    """

    chat_id: str
    polled: Optional[list[Message]] = None
    streamed: Optional[list[Message]] = None

    def apply_query(self, rows: list[Message]) -> None:
        self.polled = sort_messages(rows)

    def apply_subscription(self, rows: list[Message]) -> None:
        self.streamed = sort_messages(rows)

    @property
    def has_stream_data(self) -> bool:
        return bool(self.streamed)

    @property
    def messages(self) -> list[Message]:
        if self.streamed:
            return list(self.streamed)
        return list(self.polled or [])


class ChatSyncService:
    """Client-side state for one signed-in user."""

    def __init__(
        self,
        repo: IChatRepository,
        channel: str,
        message_stream: Optional[MessageStreamFactory] = None,
        events: Optional[SyncEventBus] = None,
        poll_seconds: float = 2.0,
    ):
        self._repo = repo
        self._channel = channel
        self._message_stream = message_stream
        self._events = events or sync_events
        self._poll_seconds = poll_seconds
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._stream_task: Optional[asyncio.Task[None]] = None
        self._reply_after: Optional[datetime] = None

        self.chats: list[Chat] = []
        self.selected_chat_id: Optional[str] = None
        self.feed: Optional[MessageFeed] = None
        self.awaiting_reply = False
        self.draft = ""

    @property
    def channel(self) -> str:
        return self._channel

    @property
    def messages(self) -> list[Message]:
        return self.feed.messages if self.feed else []

    # -------------------------------------------------
    # Lifecycle
    # -------------------------------------------------
    async def start(self) -> None:
        """Load the chat list and start the periodic refresh."""
        await self.refresh_chats()

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_job(
            self.refresh_chats,
            IntervalTrigger(seconds=self._poll_seconds),
            id=CHAT_LIST_POLL_JOB_ID,
            name="Chat List Poll",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._scheduler.start()
        logger.info(f"Chat list polling started: every {self._poll_seconds}s")

    async def stop(self) -> None:
        if self._scheduler:
            self._scheduler.shutdown(wait=False)
            self._scheduler = None
            logger.info("Chat list polling stopped")
        await self._stop_stream()

    # -------------------------------------------------
    # Chat list
    # -------------------------------------------------
    async def refresh_chats(self) -> list[Chat]:
        try:
            chats = await self._repo.list_chats()
        except ChatbotError as e:
            logger.warning(f"Failed to refresh chat list: {e}")
            return self.chats

        if chats != self.chats:
            self.chats = chats
            await self._publish("chats")
        return self.chats

    async def create_chat(self, title: str) -> Optional[Chat]:
        title = title.strip()
        if not title:
            return None

        try:
            chat = await self._repo.create_chat(title)
        except ChatbotError as e:
            logger.warning(f"Error creating chat: {e}")
            return None

        await self.refresh_chats()
        await self.select_chat(chat.id)
        return chat

    async def rename_chat(self, chat_id: str, title: str) -> Optional[Chat]:
        title = title.strip()
        if not title:
            return None

        try:
            chat = await self._repo.rename_chat(chat_id, title)
        except ChatbotError as e:
            logger.warning(f"Error renaming chat {chat_id}: {e}")
            return None

        await self.refresh_chats()
        return chat

    async def delete_chat(self, chat_id: str) -> bool:
        try:
            deleted = await self._repo.delete_chat(chat_id)
        except ChatbotError as e:
            logger.warning(f"Error deleting chat {chat_id}: {e}")
            return False

        await self.refresh_chats()
        if self.selected_chat_id == chat_id:
            await self.select_chat(None)
        return deleted

    # -------------------------------------------------
    # Open chat
    # -------------------------------------------------
    async def select_chat(self, chat_id: Optional[str]) -> None:
        """Open a chat (or none): load its messages and follow the live stream."""
        await self._stop_stream()
        self.selected_chat_id = chat_id or None

        if not self.selected_chat_id:
            self.feed = None
            await self._publish("selection")
            return

        feed = MessageFeed(chat_id=self.selected_chat_id)
        self.feed = feed
        await self._publish("selection")

        await self._load_messages(feed)

        if self._message_stream is not None:
            self._stream_task = asyncio.create_task(self._follow_stream(feed))

    async def _load_messages(self, feed: MessageFeed) -> None:
        try:
            rows = await self._repo.list_messages(feed.chat_id)
        except ChatbotError as e:
            logger.warning(f"Failed to load messages for chat {feed.chat_id}: {e}")
            return
        if self.feed is not feed:
            return
        feed.apply_query(rows)
        await self._publish("messages")

    async def _follow_stream(self, feed: MessageFeed) -> None:
        try:
            async for rows in self._message_stream(feed.chat_id):
                if self.feed is not feed:
                    return
                feed.apply_subscription(rows)
                await self._publish("messages")
                if self._reply_delivered(feed):
                    await self._set_awaiting(False)
        except ChatbotError as e:
            logger.warning(f"Message subscription for chat {feed.chat_id} ended: {e}")

    async def _stop_stream(self) -> None:
        task, self._stream_task = self._stream_task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    def _reply_delivered(self, feed: MessageFeed) -> bool:
        if not self.awaiting_reply or self._reply_after is None:
            return False
        return any(
            message.is_bot and message.created_at > self._reply_after
            for message in feed.messages
        )

    # -------------------------------------------------
    # Sending
    # -------------------------------------------------
    async def send_message(self, text: Optional[str] = None) -> bool:
        """
        Submit a message to the open chat and ask the bot to reply.

        Returns True when the relay accepted the request. Empty text, a send
        while a reply is pending, or no open chat are ignored.
        """
        content = (self.draft if text is None else text).strip()
        chat_id = self.selected_chat_id
        if not content or self.awaiting_reply or not chat_id:
            return False

        self.draft = ""
        await self._set_awaiting(True)
        try:
            user_message = await self._repo.send_message(chat_id, content)
            self._reply_after = user_message.created_at
            await self._repo.request_bot_reply(chat_id, content)
        except ChatbotError as e:
            logger.warning(f"Error sending message to chat {chat_id}: {e}")
            return False
        finally:
            self._reply_after = None
            await self._set_awaiting(False)
            feed = self.feed
            if feed is not None and feed.chat_id == chat_id and not feed.has_stream_data:
                await self._load_messages(feed)
        return True

    async def _set_awaiting(self, value: bool) -> None:
        if self.awaiting_reply == value:
            return
        self.awaiting_reply = value
        await self._publish("pending")

    async def _publish(self, event_type: str) -> None:
        await self._events.publish(self._channel, event_type, self.selected_chat_id)


def subscription_stream_factory(
    ws_url: str,
    authorization: str,
    protocol: str = "graphql-transport-ws",
) -> MessageStreamFactory:
    """Build a per-chat message stream backed by the live subscription."""

    async def stream(chat_id: str) -> AsyncIterator[list[Message]]:
        subscription = GraphQLSubscription(
            ws_url,
            MESSAGES_SUBSCRIPTION,
            variables={"chatId": chat_id},
            headers={"authorization": authorization},
            protocol=protocol,
        )
        async for data in subscription.stream():
            try:
                rows = [
                    Message.model_validate({"chat_id": chat_id, **row})
                    for row in data.get("messages") or []
                ]
            except PydanticValidationError as e:
                raise SubscriptionError(
                    f"Subscription delivered a malformed message row: {e}",
                    e.errors(include_url=False),
                ) from e
            yield rows

    return stream


def create_chat_sync_service(
    session: AuthSession,
    settings: Optional[Settings] = None,
    events: Optional[SyncEventBus] = None,
) -> ChatSyncService:
    """Wire a sync service for a signed-in session from settings."""
    settings = settings or get_settings()
    client = GraphQLClient(
        settings.HASURA_ENDPOINT,
        headers={"Authorization": session.authorization},
        timeout=settings.GRAPHQL_TIMEOUT_SECONDS,
    )
    message_stream = None
    if settings.HASURA_WS_ENDPOINT:
        message_stream = subscription_stream_factory(
            settings.HASURA_WS_ENDPOINT,
            session.authorization,
            protocol=settings.SUBSCRIPTION_PROTOCOL,
        )
    return ChatSyncService(
        repo=HasuraChatRepository(client),
        channel=session.user_id,
        message_stream=message_stream,
        events=events,
        poll_seconds=settings.CHAT_LIST_POLL_SECONDS,
    )
