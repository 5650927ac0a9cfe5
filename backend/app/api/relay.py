"""
Chatbot relay webhook.

Invoked by the backend's `sendChatbotMessage` action. Responds with the bare
reply string on success; every failure collapses into one generic 500 whose
cause only appears in the logs.
"""

import json
from typing import Annotated, Optional

from fastapi import APIRouter, Header, Request, status
from fastapi.responses import JSONResponse

from app.api.deps import Relay, RelayAuth
from app.core.exceptions import ChatbotError, ValidationFailed
from app.core.logger import logger
from app.models.relay import RelayRequest

router = APIRouter()

RELAY_FAILURE_MESSAGE = "Error processing chatbot request"


def _failure() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=RELAY_FAILURE_MESSAGE,
    )


@router.post("/chatbot")
async def chatbot_webhook(
    request: Request,
    relay: Relay,
    auth: RelayAuth,
    authorization: Annotated[Optional[str], Header()] = None,
    x_relay_secret: Annotated[Optional[str], Header()] = None,
):
    """Relay one user message to the completion API and store the reply."""
    try:
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationFailed("Request body is not valid JSON") from e

        relay_request = RelayRequest.from_payload(body)
        logger.info(
            f"Received chatbot request: chat={relay_request.chat_id} user={relay_request.user_id}"
        )

        await auth.authorize(
            relay_request,
            authorization=authorization,
            relay_secret=x_relay_secret,
        )
        result = await relay.relay(relay_request)

    except ChatbotError as e:
        logger.error(f"Error processing chatbot request ({type(e).__name__}): {e.message}")
        if e.details:
            logger.error(f"Details: {e.details}")
        return _failure()
    except Exception as e:
        logger.exception(f"Unexpected error processing chatbot request: {e}")
        return _failure()

    return JSONResponse(content=result.reply)
