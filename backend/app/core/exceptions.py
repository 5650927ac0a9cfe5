"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class ChatbotError(Exception):
    """Base exception for the chatbot relay and client."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationFailed(ChatbotError):
    """Request payload failed validation (e.g. empty message text)."""

    pass


class Unauthorized(ChatbotError):
    """Caller or credentials rejected."""

    pass


class CompletionUnavailable(ChatbotError):
    """Completion API error, timeout or malformed response."""

    pass


class PersistenceWriteFailed(ChatbotError):
    """GraphQL backend rejected or could not receive a message write."""

    pass


class GraphQLError(ChatbotError):
    """GraphQL request failed or returned an errors array."""

    def __init__(self, message: str, errors: Optional[list[dict[str, Any]]] = None):
        super().__init__(message, details={"errors": errors or []})
        self.errors = errors or []


class SubscriptionError(GraphQLError):
    """Live subscription failed or was rejected by the server."""

    pass
