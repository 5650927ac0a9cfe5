"""
Completion provider interface.

Defines the contract for chat-completion API access.
Implementations: direct OpenAI-compatible HTTP (OpenRouter), LiteLLM.
"""

from abc import ABC, abstractmethod


class ICompletionProvider(ABC):
    """Abstract interface for chat-completion providers."""

    @abstractmethod
    async def complete(self, text: str) -> str:
        """
        Get a single reply for one user message.

        The request carries the fixed system instruction and the user text as
        the only conversation turn. No history, no retry.

        Args:
            text: User message text

        Returns:
            Reply text of the first returned choice

        Raises:
            CompletionUnavailable: On any upstream error or unexpected response
        """
        pass

    @abstractmethod
    def get_model_name(self) -> str:
        """
        Get the human-readable model name.

        Returns:
            Model name string for logging/display
        """
        pass
