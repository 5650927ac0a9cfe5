"""
Authentication session models.
"""

from typing import Optional

from pydantic import BaseModel, Field


class AuthSession(BaseModel):
    """Signed-in session returned by the auth service."""

    access_token: str = Field(..., description="Bearer token for GraphQL calls")
    refresh_token: Optional[str] = Field(None, description="Token for sign-out / refresh")
    user_id: str = Field(..., description="Authenticated user ID")
    email: Optional[str] = None
    display_name: Optional[str] = None

    @property
    def authorization(self) -> str:
        return f"Bearer {self.access_token}"
