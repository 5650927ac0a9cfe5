"""
Pass-through relay caller check.
"""

import hmac
from typing import Optional

from app.core.exceptions import Unauthorized
from app.interfaces.auth_provider import IRelayAuthProvider
from app.models.relay import RelayRequest


class TrustRelayAuthProvider(IRelayAuthProvider):
    """
    Accepts the user id the backend action supplies.

    The backend has already authenticated the end user before invoking the
    action. Only the optional shared secret is checked here.
    """

    def __init__(self, shared_secret: str = ""):
        self._shared_secret = shared_secret

    def check_shared_secret(self, relay_secret: Optional[str]) -> None:
        if not self._shared_secret:
            return
        if not relay_secret or not hmac.compare_digest(relay_secret, self._shared_secret):
            raise Unauthorized("Relay shared secret missing or invalid")

    async def authorize(
        self,
        request: RelayRequest,
        authorization: Optional[str] = None,
        relay_secret: Optional[str] = None,
    ) -> None:
        self.check_shared_secret(relay_secret)
