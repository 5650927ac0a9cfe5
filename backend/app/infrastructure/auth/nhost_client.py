"""
Nhost auth client.

Email/password sign-in for the chat client. The access token it returns is
the bearer token for all user-path GraphQL calls and the subscription.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from app.core.exceptions import ChatbotError, Unauthorized
from app.models.auth import AuthSession


class NhostAuthClient:
    """Talks to the Nhost auth service (/v1 base URL)."""

    def __init__(
        self,
        auth_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not auth_url:
            raise ValueError("NHOST_AUTH_URL must be set to sign in")
        self._auth_url = auth_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(f"{self._auth_url}{path}", json=payload)
        except httpx.HTTPError as e:
            raise ChatbotError(f"Auth request failed: {e!r}") from e

        if response.status_code in (400, 401, 403):
            try:
                detail = response.json().get("message") or response.text
            except ValueError:
                detail = response.text
            raise Unauthorized(f"Authentication failed: {detail}")
        if response.is_error:
            raise ChatbotError(f"Auth service returned HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    async def sign_in(self, email: str, password: str) -> AuthSession:
        body = await self._post(
            "/signin/email-password",
            {"email": email, "password": password},
        )
        return _session_from_body(body)

    async def sign_up(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> Optional[AuthSession]:
        """
        Register a new user.

        Returns None when the backend requires email verification before the
        first session is issued.
        """
        payload: dict[str, Any] = {"email": email, "password": password}
        if display_name:
            payload["options"] = {"displayName": display_name}
        body = await self._post("/signup/email-password", payload)
        if not body.get("session"):
            return None
        return _session_from_body(body)

    async def sign_out(self, session: AuthSession) -> None:
        if not session.refresh_token:
            return
        await self._post("/signout", {"refreshToken": session.refresh_token})


def _session_from_body(body: dict[str, Any]) -> AuthSession:
    session = body.get("session") or {}
    user = session.get("user") or {}
    access_token = session.get("accessToken")
    if not access_token or not user.get("id"):
        raise Unauthorized("Auth service returned no session")
    return AuthSession(
        access_token=access_token,
        refresh_token=session.get("refreshToken"),
        user_id=user["id"],
        email=user.get("email"),
        display_name=user.get("displayName"),
    )
