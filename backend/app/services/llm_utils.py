"""
Shared chat-completion request/response helpers.
"""

from __future__ import annotations

from typing import Any

from app.core.exceptions import CompletionUnavailable


def build_chat_messages(system_prompt: str, text: str) -> list[dict[str, str]]:
    """Two-turn conversation: fixed system instruction plus the user text."""
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": text},
    ]


def _get(obj: Any, key: str) -> Any:
    # OpenAI-style responses arrive as dicts (raw JSON) or attribute objects (LiteLLM)
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def extract_reply_text(response: Any) -> str:
    """
    Pull choices[0].message.content out of a completion response.

    Raises:
        CompletionUnavailable: If the response does not have that shape or the
            content is not a non-blank string
    """
    choices = _get(response, "choices")
    if not isinstance(choices, (list, tuple)) or not choices:
        raise CompletionUnavailable("Completion response has no choices")

    message = _get(choices[0], "message")
    content = _get(message, "content") if message is not None else None
    if not isinstance(content, str) or not content.strip():
        raise CompletionUnavailable("Completion response has no message content")
    return content
