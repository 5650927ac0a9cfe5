"""
In-process event bus for the chat sync layer.

The sync service publishes small change notifications ("chats", "messages",
"pending", "selection") on a per-user channel; front-ends listen and
re-render from the service's state. Listener queues are bounded: when a
listener falls behind, its oldest events are dropped, since every event only
says "state changed" and the newest one is enough to catch up.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from app.core.logger import setup_logger

logger = setup_logger(__name__)

SYNC_EVENT_TYPES = frozenset({"chats", "messages", "pending", "selection"})

DEFAULT_QUEUE_SIZE = 100


class SyncEventBus:
    """Fans sync events out to every listener queue registered on a channel."""

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self._queue_size = queue_size
        self._listeners: dict[str, set[asyncio.Queue[dict[str, Any]]]] = {}

    async def connect(self, channel: str) -> asyncio.Queue[dict[str, Any]]:
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=self._queue_size)
        self._listeners.setdefault(channel, set()).add(queue)
        return queue

    async def disconnect(self, channel: str, queue: asyncio.Queue[dict[str, Any]]) -> None:
        queues = self._listeners.get(channel)
        if not queues:
            return
        queues.discard(queue)
        if not queues:
            self._listeners.pop(channel, None)

    @asynccontextmanager
    async def listen(self, channel: str) -> AsyncIterator[asyncio.Queue[dict[str, Any]]]:
        """Register a listener queue for the duration of the block."""
        queue = await self.connect(channel)
        try:
            yield queue
        finally:
            await self.disconnect(channel, queue)

    async def publish(self, channel: str, event_type: str, chat_id: Optional[str] = None) -> None:
        if event_type not in SYNC_EVENT_TYPES:
            raise ValueError(f"Unknown sync event type: {event_type}")

        event = {"type": event_type, "chat_id": chat_id}
        for queue in list(self._listeners.get(channel, ())):
            if queue.full():
                queue.get_nowait()
                logger.debug(f"Listener on {channel} is behind; dropped oldest event")
            queue.put_nowait(event)


sync_events = SyncEventBus()
