"""
Unit tests for the Nhost auth client.
"""

import json

import httpx
import pytest

from app.core.exceptions import ChatbotError, Unauthorized
from app.infrastructure.auth.nhost_client import NhostAuthClient
from app.models.auth import AuthSession

AUTH_URL = "https://auth.test/v1/"
USER_ID = "bfb90155-3508-44a4-a9f2-6db540c1b1c6"

SESSION_BODY = {
    "session": {
        "accessToken": "access-123",
        "refreshToken": "refresh-456",
        "user": {"id": USER_ID, "email": "ada@example.com", "displayName": "Ada"},
    },
    "mfa": None,
}


def _client(handler) -> NhostAuthClient:
    return NhostAuthClient(AUTH_URL, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_sign_in_returns_session():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(200, json=SESSION_BODY)

    session = await _client(handler).sign_in("ada@example.com", "pw")

    assert session.access_token == "access-123"
    assert session.refresh_token == "refresh-456"
    assert session.user_id == USER_ID
    assert session.display_name == "Ada"
    assert session.authorization == "Bearer access-123"
    assert str(captured["request"].url) == "https://auth.test/v1/signin/email-password"
    assert json.loads(captured["request"].content) == {"email": "ada@example.com", "password": "pw"}


@pytest.mark.asyncio
async def test_sign_in_rejected_credentials_raise_unauthorized():
    client = _client(
        lambda request: httpx.Response(401, json={"error": "invalid-email-password", "message": "Incorrect email or password"})
    )

    with pytest.raises(Unauthorized) as exc_info:
        await client.sign_in("ada@example.com", "wrong")
    assert "Incorrect email or password" in exc_info.value.message


@pytest.mark.asyncio
async def test_sign_in_server_error_raises():
    with pytest.raises(ChatbotError):
        await _client(lambda request: httpx.Response(503)).sign_in("ada@example.com", "pw")


@pytest.mark.asyncio
async def test_sign_up_sends_display_name():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json=SESSION_BODY)

    session = await _client(handler).sign_up("ada@example.com", "pw", display_name="Ada")

    assert isinstance(session, AuthSession)
    assert captured["body"]["options"] == {"displayName": "Ada"}


@pytest.mark.asyncio
async def test_sign_up_pending_verification_returns_none():
    client = _client(lambda request: httpx.Response(200, json={"session": None}))

    assert await client.sign_up("ada@example.com", "pw") is None


@pytest.mark.asyncio
async def test_sign_out_posts_refresh_token():
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        return httpx.Response(200, text="OK")

    session = AuthSession(access_token="a", refresh_token="r", user_id=USER_ID)
    await _client(handler).sign_out(session)

    assert captured["request"].url.path == "/v1/signout"
    assert json.loads(captured["request"].content) == {"refreshToken": "r"}


def test_auth_url_required():
    with pytest.raises(ValueError):
        NhostAuthClient("")
