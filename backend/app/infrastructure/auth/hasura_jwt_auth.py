"""
Hasura JWT relay caller check.
"""

from __future__ import annotations

from typing import Any, Optional

from jose import JWTError, jwt

from app.core.exceptions import Unauthorized
from app.infrastructure.auth.trust_auth import TrustRelayAuthProvider
from app.models.relay import HASURA_USER_ID_VAR, RelayRequest

HASURA_CLAIMS_NAMESPACE = "https://hasura.io/jwt/claims"


class HasuraJwtRelayAuthProvider(TrustRelayAuthProvider):
    """
    Requires the forwarded bearer token to belong to the requested user.

    The backend action forwards client headers, so the end user's session JWT
    reaches the relay and can be checked against the user id in the body.
    """

    def __init__(self, jwt_secret: str, algorithm: str = "HS256", shared_secret: str = ""):
        super().__init__(shared_secret=shared_secret)
        if not jwt_secret:
            raise ValueError("HASURA_JWT_SECRET must be set for jwt relay auth")
        self._jwt_secret = jwt_secret
        self._algorithm = algorithm

    def _decode_token(self, token: str) -> dict[str, Any]:
        return jwt.decode(
            token,
            self._jwt_secret,
            algorithms=[self._algorithm],
            options={"verify_aud": False},
        )

    @staticmethod
    def _extract_token(authorization: Optional[str]) -> str:
        if not authorization:
            raise Unauthorized("Authorization header required")
        try:
            scheme, token = authorization.split()
        except ValueError:
            raise Unauthorized("Invalid authorization header format")
        if scheme.lower() != "bearer":
            raise Unauthorized("Invalid authorization header format")
        return token

    def user_id_from_token(self, token: str) -> str:
        try:
            claims = self._decode_token(token)
        except JWTError as e:
            raise Unauthorized(f"Invalid session token: {e}") from e

        hasura_claims = claims.get(HASURA_CLAIMS_NAMESPACE) or {}
        user_id = hasura_claims.get(HASURA_USER_ID_VAR) or claims.get("sub")
        if not user_id:
            raise Unauthorized("Session token carries no user id")
        return str(user_id)

    async def authorize(
        self,
        request: RelayRequest,
        authorization: Optional[str] = None,
        relay_secret: Optional[str] = None,
    ) -> None:
        self.check_shared_secret(relay_secret)
        token_user_id = self.user_id_from_token(self._extract_token(authorization))
        if request.user_id is None:
            request.user_id = token_user_id
            return
        if request.user_id != token_user_id:
            raise Unauthorized(
                f"Session user {token_user_id} may not act for user {request.user_id}"
            )
