"""
Relay request/result models.

Both are ephemeral: built per webhook invocation and discarded once the
HTTP response is sent.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import ValidationFailed

HASURA_USER_ID_VAR = "x-hasura-user-id"


class RelayRequest(BaseModel):
    """Inbound chatbot request: which chat, what text, on whose behalf."""

    model_config = ConfigDict(populate_by_name=True)

    chat_id: str = Field(..., alias="chatId", description="Target chat ID")
    message: str = Field(..., description="Latest user message text")
    user_id: Optional[str] = Field(None, alias="userId", description="Requesting user ID")

    @classmethod
    def from_payload(cls, payload: Any) -> "RelayRequest":
        """
        Build a request from a webhook body.

        Accepts the flat body {chatId, message, userId} produced by an action
        request transform, and the native action envelope
        {action, input: {chatId, message}, session_variables}.
        """
        if not isinstance(payload, dict):
            raise ValidationFailed("Relay payload must be a JSON object")

        data = payload
        action_input = payload.get("input")
        if isinstance(action_input, dict):
            session_vars = payload.get("session_variables") or {}
            data = dict(action_input)
            if data.get("userId") is None and isinstance(session_vars, dict):
                data["userId"] = session_vars.get(HASURA_USER_ID_VAR)

        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationFailed(
                "Invalid relay payload",
                details=e.errors(include_url=False),
            ) from e


class RelayResult(BaseModel):
    """Outcome of a successful relay invocation."""

    reply: str = Field(..., description="Bot reply text")
    message_id: Optional[str] = Field(None, description="Stored bot message ID")
    created_at: Optional[datetime] = Field(None, description="Stored bot message timestamp")
