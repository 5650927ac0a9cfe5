"""
Unit tests for the terminal chat client commands.
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.core.exceptions import GraphQLError
from app.models.auth import AuthSession
from app.models.chat import Chat
from app.models.message import Message
from chat_client import WELCOME_TEXT, build_parser, format_messages, handle_line, run_client

AT = datetime(2025, 1, 20, 9, 0, 0, tzinfo=timezone.utc)


def _service(selected=None, chats=None, messages=None, awaiting=False) -> MagicMock:
    service = MagicMock()
    service.selected_chat_id = selected
    service.chats = chats if chats is not None else [
        Chat(id="c1", title="First", created_at=AT, updated_at=AT),
        Chat(id="c2", title="Second", created_at=AT, updated_at=AT),
    ]
    service.messages = messages or []
    service.awaiting_reply = awaiting
    for name in ("refresh_chats", "create_chat", "rename_chat", "delete_chat", "select_chat", "send_message"):
        setattr(service, name, AsyncMock())
    return service


@pytest.mark.asyncio
async def test_plain_text_is_sent_to_open_chat():
    service = _service(selected="c1")

    assert await handle_line(service, "Hello there") is True
    service.send_message.assert_awaited_once_with("Hello there")


@pytest.mark.asyncio
async def test_plain_text_without_open_chat_is_not_sent(capsys):
    service = _service()

    await handle_line(service, "Hello")

    service.send_message.assert_not_awaited()
    assert "Open or create a chat first" in capsys.readouterr().out


@pytest.mark.asyncio
@pytest.mark.parametrize("line", ["/quit", "/exit"])
async def test_quit_commands(line):
    assert await handle_line(_service(), line) is False


@pytest.mark.asyncio
async def test_open_uses_list_position():
    service = _service()

    await handle_line(service, "/open 2")

    service.select_chat.assert_awaited_once_with("c2")


@pytest.mark.asyncio
@pytest.mark.parametrize("argument", ["", "0", "3", "abc"])
async def test_open_rejects_bad_position(argument):
    service = _service()

    await handle_line(service, f"/open {argument}")

    service.select_chat.assert_not_awaited()


@pytest.mark.asyncio
async def test_new_creates_chat_with_title():
    service = _service()

    await handle_line(service, "/new  Trip ideas ")

    service.create_chat.assert_awaited_once_with("Trip ideas")


@pytest.mark.asyncio
async def test_rename_targets_open_chat():
    service = _service(selected="c1")

    await handle_line(service, "/rename Better title")

    service.rename_chat.assert_awaited_once_with("c1", "Better title")


@pytest.mark.asyncio
async def test_delete_uses_list_position():
    service = _service()

    await handle_line(service, "/delete 1")

    service.delete_chat.assert_awaited_once_with("c1")


def test_format_messages_without_chat_shows_welcome():
    assert format_messages(_service()) == WELCOME_TEXT


def test_format_messages_shows_typing_indicator():
    messages = [
        Message(id="m1", content="Hello", is_bot=False, created_at=AT),
        Message(id="m2", content="Hi!", is_bot=True, created_at=AT),
    ]
    text = format_messages(_service(selected="c1", messages=messages, awaiting=True))

    lines = text.splitlines()
    assert lines[0].endswith("You: Hello")
    assert lines[1].endswith("Assistant: Hi!")
    assert lines[-1] == "Assistant is typing..."


def test_parser_token_mode():
    args = build_parser().parse_args(["--token", "abc", "--user-id", "u1"])

    assert args.token == "abc"
    assert args.user_id == "u1"
    assert args.sign_up is False


SETTINGS = SimpleNamespace(NHOST_AUTH_URL="https://auth.test/v1", GRAPHQL_TIMEOUT_SECONDS=5.0)


def _sync_service() -> MagicMock:
    service = MagicMock()
    service.channel = "u1"
    service.start = AsyncMock()
    service.stop = AsyncMock()
    return service


async def _run(argv, auth=None):
    service = _sync_service()
    with patch("chat_client.get_settings", return_value=SETTINGS), \
            patch("chat_client.NhostAuthClient", return_value=auth) as auth_cls, \
            patch("chat_client.create_chat_sync_service", return_value=service), \
            patch("chat_client._read_input", new=AsyncMock()):
        await run_client(build_parser().parse_args(argv))
    return service, auth_cls


def _auth() -> MagicMock:
    auth = MagicMock()
    session = AuthSession(access_token="jwt", refresh_token="rt", user_id="u1")
    auth.sign_in = AsyncMock(return_value=session)
    auth.sign_out = AsyncMock()
    return auth


@pytest.mark.asyncio
async def test_run_client_signs_out_on_exit():
    auth = _auth()

    service, _ = await _run(["--email", "a@b.c", "--password", "pw"], auth=auth)

    auth.sign_in.assert_awaited_once_with("a@b.c", "pw")
    service.stop.assert_awaited_once()
    auth.sign_out.assert_awaited_once()
    assert auth.sign_out.await_args.args[0].refresh_token == "rt"


@pytest.mark.asyncio
async def test_run_client_token_mode_skips_sign_out():
    service, auth_cls = await _run(["--token", "abc", "--user-id", "u1"])

    auth_cls.assert_not_called()
    service.stop.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_client_sign_out_failure_is_logged():
    auth = _auth()
    auth.sign_out.side_effect = GraphQLError("sign-out rejected")

    service, _ = await _run(["--email", "a@b.c", "--password", "pw"], auth=auth)

    auth.sign_out.assert_awaited_once()
    service.stop.assert_awaited_once()
