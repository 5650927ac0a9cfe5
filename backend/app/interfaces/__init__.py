"""Abstract interfaces for infrastructure abstraction."""

from app.interfaces.auth_provider import IRelayAuthProvider
from app.interfaces.chat_repository import IChatRepository
from app.interfaces.completion_provider import ICompletionProvider
from app.interfaces.message_repository import IMessageRepository

__all__ = [
    "ICompletionProvider",
    "IMessageRepository",
    "IChatRepository",
    "IRelayAuthProvider",
]
