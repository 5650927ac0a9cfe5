"""
Chatbot - terminal chat client

Signs in, keeps the chat list and the open chat in sync with the backend,
and sends messages to the bot.

Usage:
    python chat_client.py --email you@example.com
    python chat_client.py --token <access token> --user-id <user id>
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
from typing import Optional

from app.core.config import Settings, get_settings
from app.core.exceptions import ChatbotError
from app.core.logger import logger
from app.infrastructure.auth.nhost_client import NhostAuthClient
from app.models.auth import AuthSession
from app.services.chat_sync_service import ChatSyncService, create_chat_sync_service
from app.services.realtime_service import sync_events

HELP_TEXT = """Commands:
  /list            show your chats
  /new <title>     create a chat and open it
  /open <n>        open chat number n from /list
  /rename <title>  rename the open chat
  /delete <n>      delete chat number n
  /help            show this help
  /quit            exit
Anything else is sent to the open chat."""

WELCOME_TEXT = """Welcome to Your AI Chatbot
Get started by creating a new conversation or opening an existing chat.
Tip: type /new <title> to create your first chat!"""


def format_chats(service: ChatSyncService) -> str:
    if not service.chats:
        return "No chats yet."
    lines = []
    for index, chat in enumerate(service.chats, start=1):
        marker = "*" if chat.id == service.selected_chat_id else " "
        updated = chat.updated_at.astimezone().strftime("%Y-%m-%d")
        lines.append(f"{marker}{index:>3}. {chat.title}  ({updated})")
    return "\n".join(lines)


def format_messages(service: ChatSyncService) -> str:
    if service.selected_chat_id is None:
        return WELCOME_TEXT
    lines = []
    for message in service.messages:
        author = "Assistant" if message.is_bot else "You"
        stamp = message.created_at.astimezone().strftime("%H:%M:%S")
        lines.append(f"[{stamp}] {author}: {message.content}")
    if service.awaiting_reply:
        lines.append("Assistant is typing...")
    return "\n".join(lines) if lines else "No messages yet. Say hello!"


def _chat_at(service: ChatSyncService, position: str) -> Optional[str]:
    try:
        index = int(position) - 1
    except ValueError:
        return None
    if 0 <= index < len(service.chats):
        return service.chats[index].id
    return None


async def handle_line(service: ChatSyncService, line: str) -> bool:
    """Apply one line of user input. Returns False when the user quits."""
    line = line.strip()
    if not line:
        return True

    if not line.startswith("/"):
        if service.selected_chat_id is None:
            print("Open or create a chat first (/list, /open <n>, /new <title>).")
            return True
        await service.send_message(line)
        return True

    command, _, argument = line.partition(" ")
    argument = argument.strip()

    if command in ("/quit", "/exit"):
        return False
    if command == "/help":
        print(HELP_TEXT)
    elif command == "/list":
        await service.refresh_chats()
        print(format_chats(service))
    elif command == "/new":
        if not await service.create_chat(argument):
            print("Usage: /new <title>")
    elif command == "/open":
        chat_id = _chat_at(service, argument)
        if chat_id is None:
            print("Usage: /open <n> (see /list)")
        else:
            await service.select_chat(chat_id)
    elif command == "/rename":
        if service.selected_chat_id is None or not await service.rename_chat(
            service.selected_chat_id, argument
        ):
            print("Usage: /rename <title> (with a chat open)")
    elif command == "/delete":
        chat_id = _chat_at(service, argument)
        if chat_id is None:
            print("Usage: /delete <n> (see /list)")
        else:
            await service.delete_chat(chat_id)
    else:
        print(f"Unknown command {command}. Type /help for help.")
    return True


async def _render_events(service: ChatSyncService) -> None:
    async with sync_events.listen(service.channel) as queue:
        while True:
            event = await queue.get()
            if event["type"] == "chats":
                print("\n" + format_chats(service))
            else:
                print("\n" + format_messages(service))


async def _read_input(service: ChatSyncService) -> None:
    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            return
        if not await handle_line(service, line):
            return


async def _sign_in(
    args: argparse.Namespace,
    settings: Settings,
) -> tuple[AuthSession, Optional[NhostAuthClient]]:
    """Return the session and, when it was issued here, the auth client to end it with."""
    if args.token:
        return AuthSession(access_token=args.token, user_id=args.user_id or "me"), None

    auth = NhostAuthClient(settings.NHOST_AUTH_URL, timeout=settings.GRAPHQL_TIMEOUT_SECONDS)
    email = args.email or input("Email: ")
    password = args.password or getpass.getpass("Password: ")
    if args.sign_up:
        session = await auth.sign_up(email, password, display_name=args.display_name)
        if session is None:
            raise SystemExit("Account created. Verify your email, then sign in.")
        return session, auth
    return await auth.sign_in(email, password), auth


async def _sign_out(auth: Optional[NhostAuthClient], session: AuthSession) -> None:
    if auth is None:
        return
    try:
        await auth.sign_out(session)
    except ChatbotError as e:
        logger.warning(f"Sign-out failed: {e.message}")


async def run_client(args: argparse.Namespace) -> None:
    settings = get_settings()
    try:
        session, auth = await _sign_in(args, settings)
    except ChatbotError as e:
        raise SystemExit(f"Sign-in failed: {e.message}")

    service = create_chat_sync_service(session, settings=settings)
    renderer = asyncio.create_task(_render_events(service))
    # Give the renderer a chance to register before the first events
    await asyncio.sleep(0)

    await service.start()
    print(WELCOME_TEXT)
    print(HELP_TEXT)
    try:
        await _read_input(service)
    finally:
        await service.stop()
        renderer.cancel()
        try:
            await renderer
        except asyncio.CancelledError:
            pass
        await _sign_out(auth, session)
        logger.info("Chat client stopped")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Terminal client for the AI chatbot")
    parser.add_argument("--email", help="Account email")
    parser.add_argument("--password", help="Account password (prompted if omitted)")
    parser.add_argument("--sign-up", action="store_true", help="Create the account first")
    parser.add_argument("--display-name", help="Display name for --sign-up")
    parser.add_argument("--token", help="Use an existing access token instead of signing in")
    parser.add_argument("--user-id", help="User ID that goes with --token")
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        asyncio.run(run_client(args))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
