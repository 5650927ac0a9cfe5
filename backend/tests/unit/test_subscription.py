"""
Unit tests for GraphQL subscriptions over WebSocket.
"""

import json

import pytest

from app.core.exceptions import SubscriptionError
from app.infrastructure.hasura.subscription import GraphQLSubscription

WS_URL = "wss://backend.test/v1/graphql"
QUERY = "subscription ($chatId: uuid!) { messages(where: {chat_id: {_eq: $chatId}}) { id } }"


class FakeWebSocket:
    """Scripted server side of one WebSocket connection."""

    def __init__(self, frames):
        self._frames = [f if isinstance(f, (str, bytes)) else json.dumps(f) for f in frames]
        self.sent: list[dict] = []

    async def send(self, raw: str) -> None:
        self.sent.append(json.loads(raw))

    async def recv(self):
        return self._frames.pop(0)

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._frames:
            raise StopAsyncIteration
        return self._frames.pop(0)


class FakeConnect:
    """Stands in for websockets' connect(): records arguments, yields the fake socket."""

    def __init__(self, ws: FakeWebSocket):
        self.ws = ws
        self.url = None
        self.subprotocols = None

    def __call__(self, url, subprotocols=None):
        self.url = url
        self.subprotocols = subprotocols
        return self

    async def __aenter__(self):
        return self.ws

    async def __aexit__(self, *exc):
        return False


def _subscription(frames, protocol="graphql-transport-ws", **kwargs):
    connect = FakeConnect(FakeWebSocket(frames))
    subscription = GraphQLSubscription(
        WS_URL,
        QUERY,
        variables={"chatId": "c1"},
        headers={"authorization": "Bearer user-token"},
        protocol=protocol,
        connect=connect,
        **kwargs,
    )
    return subscription, connect


async def _collect(subscription):
    return [data async for data in subscription.stream()]


@pytest.mark.asyncio
async def test_transport_ws_handshake_and_results():
    subscription, connect = _subscription(
        [
            {"type": "connection_ack"},
            {"id": "1", "type": "next", "payload": {"data": {"messages": [{"id": "m1"}]}}},
            {"type": "ping"},
            {"id": "1", "type": "next", "payload": {"data": {"messages": [{"id": "m1"}, {"id": "m2"}]}}},
            {"id": "1", "type": "complete"},
        ]
    )

    results = await _collect(subscription)

    assert results == [
        {"messages": [{"id": "m1"}]},
        {"messages": [{"id": "m1"}, {"id": "m2"}]},
    ]
    assert connect.url == WS_URL
    assert connect.subprotocols == ["graphql-transport-ws"]

    sent = connect.ws.sent
    assert sent[0] == {
        "type": "connection_init",
        "payload": {"headers": {"authorization": "Bearer user-token"}},
    }
    assert sent[1]["type"] == "subscribe"
    assert sent[1]["id"] == "1"
    assert sent[1]["payload"] == {"query": QUERY, "variables": {"chatId": "c1"}}
    assert {"type": "pong"} in sent
    assert sent[-1] == {"id": "1", "type": "complete"}


@pytest.mark.asyncio
async def test_legacy_graphql_ws_protocol():
    subscription, connect = _subscription(
        [
            {"type": "connection_ack"},
            {"type": "ka"},
            {"id": "1", "type": "data", "payload": {"data": {"messages": []}}},
            {"type": "ka"},
            b'{"id": "1", "type": "data", "payload": {"data": {"messages": [{"id": "m1"}]}}}',
            {"id": "1", "type": "complete"},
        ],
        protocol="graphql-ws",
    )

    results = await _collect(subscription)

    assert results == [{"messages": []}, {"messages": [{"id": "m1"}]}]
    assert connect.subprotocols == ["graphql-ws"]
    assert connect.ws.sent[1]["type"] == "start"
    assert connect.ws.sent[-1] == {"id": "1", "type": "stop"}


@pytest.mark.asyncio
async def test_frames_for_other_operations_are_ignored():
    subscription, _ = _subscription(
        [
            {"type": "connection_ack"},
            {"id": "7", "type": "next", "payload": {"data": {"other": True}}},
            {"id": "1", "type": "next", "payload": {"data": {"messages": []}}},
        ]
    )

    assert await _collect(subscription) == [{"messages": []}]


@pytest.mark.asyncio
async def test_error_frame_raises():
    subscription, _ = _subscription(
        [
            {"type": "connection_ack"},
            {"id": "1", "type": "error", "payload": [{"message": "field 'messages' not found"}]},
        ]
    )

    with pytest.raises(SubscriptionError) as exc_info:
        await _collect(subscription)
    assert exc_info.value.errors == [{"message": "field 'messages' not found"}]


@pytest.mark.asyncio
async def test_result_with_errors_raises():
    subscription, _ = _subscription(
        [
            {"type": "connection_ack"},
            {"id": "1", "type": "next", "payload": {"errors": [{"message": "permission denied"}]}},
        ]
    )

    with pytest.raises(SubscriptionError):
        await _collect(subscription)


@pytest.mark.asyncio
async def test_connection_error_during_handshake_raises():
    subscription, _ = _subscription(
        [{"type": "connection_error", "payload": {"message": "Could not verify JWT"}}],
        protocol="graphql-ws",
    )

    with pytest.raises(SubscriptionError):
        await _collect(subscription)


@pytest.mark.asyncio
async def test_non_json_frame_raises():
    subscription, _ = _subscription([{"type": "connection_ack"}, "<<garbage>>"])

    with pytest.raises(SubscriptionError):
        await _collect(subscription)


@pytest.mark.asyncio
async def test_invalid_utf8_frame_raises_subscription_error():
    subscription, _ = _subscription([{"type": "connection_ack"}, b"\xff\xfe"])

    with pytest.raises(SubscriptionError):
        await _collect(subscription)


@pytest.mark.asyncio
async def test_connect_failure_raises_subscription_error():
    def refuse(url, subprotocols=None):
        raise OSError("connection refused")

    subscription = GraphQLSubscription(WS_URL, QUERY, connect=refuse)

    with pytest.raises(SubscriptionError):
        await _collect(subscription)


@pytest.mark.asyncio
async def test_missing_url_raises():
    with pytest.raises(SubscriptionError):
        await _collect(GraphQLSubscription("", QUERY))


def test_unknown_protocol_rejected():
    with pytest.raises(ValueError):
        GraphQLSubscription(WS_URL, QUERY, protocol="sse")
