"""
GraphQL subscriptions over WebSocket.

Supports the graphql-transport-ws protocol and the legacy graphql-ws
(subscriptions-transport-ws) protocol. Each delivered result is the full
current result set of the subscription (Hasura live queries), not a delta.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Optional

from websockets.asyncio.client import connect as ws_connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from app.core.exceptions import SubscriptionError
from app.core.logger import logger


@dataclass(frozen=True)
class _Protocol:
    subscribe: str
    data: str
    stop: str
    errors: tuple[str, ...]
    keepalive: tuple[str, ...]


_PROTOCOLS: dict[str, _Protocol] = {
    "graphql-transport-ws": _Protocol(
        subscribe="subscribe",
        data="next",
        stop="complete",
        errors=("error",),
        keepalive=("pong",),
    ),
    "graphql-ws": _Protocol(
        subscribe="start",
        data="data",
        stop="stop",
        errors=("error", "connection_error"),
        keepalive=("ka",),
    ),
}


class GraphQLSubscription:
    """One subscription operation on its own WebSocket connection."""

    def __init__(
        self,
        url: str,
        query: str,
        variables: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        protocol: str = "graphql-transport-ws",
        connect: Callable[..., Any] = ws_connect,
        ack_timeout: float = 10.0,
    ):
        if protocol not in _PROTOCOLS:
            raise ValueError(f"Unknown subscription protocol: {protocol}")
        self._url = url
        self._query = query
        self._variables = variables or {}
        self._headers = dict(headers or {})
        self._protocol_name = protocol
        self._protocol = _PROTOCOLS[protocol]
        self._connect = connect
        self._ack_timeout = ack_timeout
        self._operation_id = "1"

    async def stream(self) -> AsyncIterator[dict[str, Any]]:
        """
        Yield the `data` object of every result the server pushes.

        Ends when the server completes the operation or closes the socket
        normally.

        Raises:
            SubscriptionError: On connection failure, rejection or a GraphQL error
        """
        if not self._url:
            raise SubscriptionError("GraphQL WebSocket endpoint is not configured")

        try:
            async with self._connect(self._url, subprotocols=[self._protocol_name]) as ws:
                await self._send(ws, {"type": "connection_init", "payload": {"headers": self._headers}})
                await self._wait_for_ack(ws)
                await self._send(
                    ws,
                    {
                        "id": self._operation_id,
                        "type": self._protocol.subscribe,
                        "payload": {"query": self._query, "variables": self._variables},
                    },
                )
                try:
                    async for raw in ws:
                        message = _decode(raw)
                        message_type = message.get("type")

                        if message_type == "ping":
                            await self._send(ws, {"type": "pong"})
                            continue
                        if message_type in self._protocol.keepalive:
                            continue
                        if message.get("id") not in (None, self._operation_id):
                            continue

                        if message_type == self._protocol.data:
                            payload = message.get("payload") or {}
                            if payload.get("errors"):
                                raise SubscriptionError(
                                    "Subscription returned errors", payload["errors"]
                                )
                            yield payload.get("data") or {}
                        elif message_type in self._protocol.errors:
                            errors = message.get("payload")
                            raise SubscriptionError(
                                "Subscription rejected by server",
                                errors if isinstance(errors, list) else [errors],
                            )
                        elif message_type == "complete":
                            return
                finally:
                    with contextlib.suppress(ConnectionClosed):
                        await self._send(ws, {"id": self._operation_id, "type": self._protocol.stop})
        except (OSError, WebSocketException) as e:
            raise SubscriptionError(f"Subscription connection failed: {e!r}") from e

    async def _wait_for_ack(self, ws: Any) -> None:
        try:
            async with asyncio.timeout(self._ack_timeout):
                while True:
                    message = _decode(await ws.recv())
                    message_type = message.get("type")
                    if message_type == "connection_ack":
                        logger.debug(f"Subscription acknowledged on {self._url}")
                        return
                    if message_type == "ping":
                        await self._send(ws, {"type": "pong"})
                    elif message_type in self._protocol.errors:
                        raise SubscriptionError(
                            "Subscription connection rejected",
                            [message.get("payload")],
                        )
        except TimeoutError as e:
            raise SubscriptionError("Timed out waiting for connection_ack") from e

    @staticmethod
    async def _send(ws: Any, message: dict[str, Any]) -> None:
        await ws.send(json.dumps(message))


def _decode(raw: Any) -> dict[str, Any]:
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        message = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise SubscriptionError("Subscription received a non-JSON frame") from e
    if not isinstance(message, dict):
        raise SubscriptionError("Subscription received an unexpected frame")
    return message
