"""
Minimal async GraphQL-over-HTTP client for Hasura.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from app.core.exceptions import GraphQLError, Unauthorized

# Hasura error codes raised by its permission / auth layer
PERMISSION_ERROR_CODES = frozenset(
    {
        "access-denied",
        "permission-error",
        "invalid-jwt",
        "invalid-headers",
        "jwt-invalid-claims",
        "jwt-missing-role-claims",
    }
)


class GraphQLClient:
    """Posts GraphQL documents to one endpoint with a fixed set of headers."""

    def __init__(
        self,
        endpoint: str,
        headers: Optional[dict[str, str]] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._endpoint = endpoint
        self._headers = dict(headers or {})
        self._timeout = timeout
        self._transport = transport

    async def execute(
        self,
        query: str,
        variables: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """
        Execute a query or mutation and return its `data` object.

        Raises:
            Unauthorized: If the backend's permission layer rejected the call
            GraphQLError: On transport errors, HTTP errors or an errors array
        """
        if not self._endpoint:
            raise GraphQLError("GraphQL endpoint is not configured")

        payload = {"query": query, "variables": variables or {}}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._endpoint, json=payload, headers=self._headers)
        except httpx.HTTPError as e:
            raise GraphQLError(f"GraphQL request failed: {e!r}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("errors"):
            _raise_for_errors(body["errors"])

        if response.is_error:
            raise GraphQLError(f"GraphQL endpoint returned HTTP {response.status_code}")

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise GraphQLError("GraphQL response has no data")
        return data


def _raise_for_errors(errors: Any) -> None:
    if not isinstance(errors, list):
        errors = [errors]
    normalized = [err if isinstance(err, dict) else {"message": str(err)} for err in errors]
    message = "; ".join(str(err.get("message", "unknown error")) for err in normalized)
    codes = {(err.get("extensions") or {}).get("code") for err in normalized}
    if codes & PERMISSION_ERROR_CODES:
        raise Unauthorized(message, details={"errors": normalized})
    raise GraphQLError(message, normalized)
