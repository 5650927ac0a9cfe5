"""
LiteLLM completion provider.

Routes the same two-turn request through LiteLLM, so any provider LiteLLM
supports (OpenRouter, OpenAI, Bedrock, a local proxy) can answer the bot.
Includes support for custom endpoints (api_base) for proxy servers.
"""

import os
from typing import Any, Optional

import litellm

from app.core.config import get_settings
from app.core.exceptions import CompletionUnavailable
from app.core.logger import logger
from app.interfaces.completion_provider import ICompletionProvider
from app.services.llm_utils import build_chat_messages, extract_reply_text


class LiteLLMCompletionProvider(ICompletionProvider):
    """LiteLLM provider with custom endpoint support."""

    def __init__(
        self,
        model_name: str,
        api_base: Optional[str] = None,
        api_key: Optional[str] = None,
    ):
        """
        Initialize LiteLLM provider.

        Args:
            model_name: LiteLLM model identifier
                (e.g., "openrouter/mistralai/mistral-7b-instruct:free")
            api_base: Custom API endpoint URL (optional, for proxy servers)
            api_key: Custom API key (optional, overrides default)
        """
        self._model_name = model_name
        self._settings = get_settings()
        self._api_base = api_base or self._settings.LITELLM_API_BASE or None
        self._api_key = api_key or self._settings.LITELLM_API_KEY or None

        if self._settings.DEBUG:
            os.environ["LITELLM_LOG"] = "DEBUG"

    def get_model_name(self) -> str:
        """Get human-readable model name."""
        if self._api_base:
            return f"LiteLLM ({self._model_name} @ {self._api_base})"
        return f"LiteLLM ({self._model_name})"

    async def complete(self, text: str) -> str:
        kwargs: dict[str, Any] = {
            "model": self._model_name,
            "messages": build_chat_messages(self._settings.COMPLETION_SYSTEM_PROMPT, text),
            "max_tokens": self._settings.COMPLETION_MAX_TOKENS,
            "temperature": self._settings.COMPLETION_TEMPERATURE,
            "timeout": self._settings.COMPLETION_TIMEOUT_SECONDS,
            "num_retries": 0,
        }
        if self._api_base:
            kwargs["api_base"] = self._api_base
        if self._api_key:
            kwargs["api_key"] = self._api_key

        try:
            response = await litellm.acompletion(**kwargs)
        except Exception as e:
            raise CompletionUnavailable(f"LiteLLM completion failed: {e}") from e

        reply = extract_reply_text(response)
        logger.info(f"Completion received from {self._model_name}: {len(reply)} chars")
        return reply
