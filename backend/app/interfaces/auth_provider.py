"""
Relay caller verification interface.
"""

from abc import ABC, abstractmethod
from typing import Optional

from app.models.relay import RelayRequest


class IRelayAuthProvider(ABC):
    """Decides whether a webhook call may act for the user it names."""

    @abstractmethod
    async def authorize(
        self,
        request: RelayRequest,
        authorization: Optional[str] = None,
        relay_secret: Optional[str] = None,
    ) -> None:
        """
        Check the caller.

        Args:
            request: Parsed relay request
            authorization: Forwarded Authorization header, if any
            relay_secret: Value of the x-relay-secret header, if any

        Raises:
            Unauthorized: If the caller is not allowed to act for request.user_id
        """
        pass
