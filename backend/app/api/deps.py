"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
Instances are cached for the life of the process.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from app.core.config import get_settings
from app.infrastructure.hasura.graphql_client import GraphQLClient
from app.interfaces.auth_provider import IRelayAuthProvider
from app.interfaces.completion_provider import ICompletionProvider
from app.interfaces.message_repository import IMessageRepository
from app.services.relay_service import RelayService

ADMIN_SECRET_HEADER = "x-hasura-admin-secret"


# ===========================================
# Backend Dependencies
# ===========================================


@lru_cache()
def get_admin_graphql_client() -> GraphQLClient:
    """Get GraphQL client authenticated with the admin secret."""
    settings = get_settings()
    return GraphQLClient(
        settings.HASURA_ENDPOINT,
        headers={ADMIN_SECRET_HEADER: settings.HASURA_ADMIN_SECRET},
        timeout=settings.GRAPHQL_TIMEOUT_SECONDS,
    )


@lru_cache()
def get_message_repository() -> IMessageRepository:
    """Get privileged message repository instance."""
    from app.infrastructure.hasura.message_repository import HasuraMessageRepository

    return HasuraMessageRepository(get_admin_graphql_client())


# ===========================================
# Provider Dependencies
# ===========================================


@lru_cache()
def get_completion_provider() -> ICompletionProvider:
    """
    Get completion provider instance based on COMPLETION_PROVIDER setting.

    Supports:
    - openrouter: direct OpenAI-compatible HTTP call
    - litellm: LiteLLM (OpenRouter, OpenAI, Bedrock, etc. with optional custom endpoint)
    """
    settings = get_settings()

    if settings.COMPLETION_PROVIDER == "openrouter":
        from app.infrastructure.openrouter.openrouter_provider import OpenRouterCompletionProvider

        return OpenRouterCompletionProvider(
            api_key=settings.OPENROUTER_API_KEY,
            model=settings.COMPLETION_MODEL,
            system_prompt=settings.COMPLETION_SYSTEM_PROMPT,
            api_url=settings.COMPLETION_API_URL,
            max_tokens=settings.COMPLETION_MAX_TOKENS,
            temperature=settings.COMPLETION_TEMPERATURE,
            timeout=settings.COMPLETION_TIMEOUT_SECONDS,
            referer=settings.COMPLETION_REFERER,
            app_title=settings.COMPLETION_APP_TITLE,
        )

    elif settings.COMPLETION_PROVIDER == "litellm":
        from app.infrastructure.local.litellm_provider import LiteLLMCompletionProvider

        return LiteLLMCompletionProvider(settings.COMPLETION_MODEL)

    else:
        raise ValueError(f"Unknown COMPLETION_PROVIDER: {settings.COMPLETION_PROVIDER}")


@lru_cache()
def get_relay_auth_provider() -> IRelayAuthProvider:
    """Get relay caller check based on RELAY_AUTH_MODE."""
    settings = get_settings()
    if settings.RELAY_AUTH_MODE == "jwt":
        from app.infrastructure.auth.hasura_jwt_auth import HasuraJwtRelayAuthProvider

        return HasuraJwtRelayAuthProvider(
            settings.HASURA_JWT_SECRET,
            algorithm=settings.HASURA_JWT_ALGORITHM,
            shared_secret=settings.RELAY_SHARED_SECRET,
        )

    from app.infrastructure.auth.trust_auth import TrustRelayAuthProvider

    return TrustRelayAuthProvider(shared_secret=settings.RELAY_SHARED_SECRET)


# ===========================================
# Service Dependencies
# ===========================================


def get_relay_service(
    completion_provider: ICompletionProvider = Depends(get_completion_provider),
    message_repo: IMessageRepository = Depends(get_message_repository),
) -> RelayService:
    """Get relay service wired to the configured providers."""
    return RelayService(completion_provider, message_repo)


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

RelayAuth = Annotated[IRelayAuthProvider, Depends(get_relay_auth_provider)]
Relay = Annotated[RelayService, Depends(get_relay_service)]
