"""
OpenAI-compatible chat-completion provider (OpenRouter by default).

Sends one POST per call with bearer auth and parses choices[0].message.content.
"""

from typing import Any, Optional

import httpx

from app.core.exceptions import CompletionUnavailable
from app.core.logger import logger
from app.interfaces.completion_provider import ICompletionProvider
from app.services.llm_utils import build_chat_messages, extract_reply_text

DEFAULT_API_URL = "https://openrouter.ai/api/v1/chat/completions"


class OpenRouterCompletionProvider(ICompletionProvider):
    """Direct HTTP provider for OpenAI-compatible /chat/completions endpoints."""

    def __init__(
        self,
        api_key: str,
        model: str,
        system_prompt: str,
        api_url: str = DEFAULT_API_URL,
        max_tokens: int = 500,
        temperature: float = 0.7,
        timeout: float = 30.0,
        referer: Optional[str] = None,
        app_title: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the provider.

        Args:
            api_key: Bearer token for the completion API
            model: Model identifier (e.g., "mistralai/mistral-7b-instruct:free")
            system_prompt: Fixed system instruction sent with every request
            api_url: Full /chat/completions URL
            max_tokens: Response length bound
            temperature: Sampling temperature
            timeout: Request timeout in seconds
            referer: Optional HTTP-Referer attribution header
            app_title: Optional X-Title attribution header
            transport: Optional httpx transport (tests)
        """
        self._api_key = api_key
        self._model = model
        self._system_prompt = system_prompt
        self._api_url = api_url
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._timeout = timeout
        self._referer = referer
        self._app_title = app_title
        self._transport = transport

    def get_model_name(self) -> str:
        return f"OpenRouter ({self._model})"

    def build_payload(self, text: str) -> dict[str, Any]:
        return {
            "model": self._model,
            "messages": build_chat_messages(self._system_prompt, text),
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
        }

    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        if self._referer:
            headers["HTTP-Referer"] = self._referer
        if self._app_title:
            headers["X-Title"] = self._app_title
        return headers

    async def complete(self, text: str) -> str:
        if not self._api_key:
            raise CompletionUnavailable("Completion API key is not configured")

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self._api_url,
                    json=self.build_payload(text),
                    headers=self._headers(),
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise CompletionUnavailable(
                f"Completion API returned HTTP {e.response.status_code}",
                details=e.response.text[:500],
            ) from e
        except httpx.HTTPError as e:
            raise CompletionUnavailable(f"Completion API request failed: {e!r}") from e
        except ValueError as e:
            raise CompletionUnavailable("Completion API returned invalid JSON") from e

        reply = extract_reply_text(data)
        logger.info(f"Completion received from {self._model}: {len(reply)} chars")
        return reply
