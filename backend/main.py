"""
Chatbot Relay - Main Application Entry Point

Webhook server bridging the backend's chatbot action to a chat-completion API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import get_settings
from app.core.logger import logger
from app.utils.datetime_utils import now_utc, to_iso_z


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    logger.info(f"Starting Chatbot Relay in {settings.ENVIRONMENT} mode...")

    # Build the process-wide clients once, before the first request
    from app.api.deps import (
        get_completion_provider,
        get_message_repository,
        get_relay_auth_provider,
    )

    provider = get_completion_provider()
    get_message_repository()
    get_relay_auth_provider()
    logger.info(
        f"Relay ready: completion={provider.get_model_name()} "
        f"auth_mode={settings.RELAY_AUTH_MODE} backend={settings.HASURA_ENDPOINT or '(unset)'}"
    )

    yield

    logger.info("Shutting down Chatbot Relay...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Chatbot Relay",
        description="Relays chatbot action calls to a completion API and stores the replies",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials="*" not in settings.ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    from app.api import relay

    app.include_router(relay.router, prefix="/webhook", tags=["relay"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "OK",
            "timestamp": to_iso_z(now_utc()),
        }

    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
