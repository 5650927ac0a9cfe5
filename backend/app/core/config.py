"""
Application configuration using Pydantic Settings.

Both the relay server and the chat client read the same settings, so a single
.env file can drive a local setup end to end.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "production", "test"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    ALLOWED_ORIGINS: List[str] = Field(default=["*"])

    # ===========================================
    # GraphQL backend (Hasura)
    # ===========================================
    HASURA_ENDPOINT: str = ""
    HASURA_WS_ENDPOINT: str = ""
    HASURA_ADMIN_SECRET: str = ""
    GRAPHQL_TIMEOUT_SECONDS: float = 10.0

    # Subprotocol for live subscriptions:
    # - graphql-transport-ws: current protocol (graphql-ws library)
    # - graphql-ws: legacy subscriptions-transport-ws protocol
    SUBSCRIPTION_PROTOCOL: Literal["graphql-transport-ws", "graphql-ws"] = "graphql-transport-ws"

    # ===========================================
    # Completion API
    # ===========================================
    # Completion provider: "openrouter" | "litellm"
    # - openrouter: direct OpenAI-compatible HTTP call (OpenRouter by default)
    # - litellm: LiteLLM routing (OpenAI, OpenRouter, Bedrock, etc.)
    COMPLETION_PROVIDER: Literal["openrouter", "litellm"] = "openrouter"
    COMPLETION_API_URL: str = "https://openrouter.ai/api/v1/chat/completions"
    OPENROUTER_API_KEY: str = ""
    COMPLETION_MODEL: str = "mistralai/mistral-7b-instruct:free"
    COMPLETION_MAX_TOKENS: int = 500
    COMPLETION_TEMPERATURE: float = 0.7
    COMPLETION_TIMEOUT_SECONDS: float = 30.0
    COMPLETION_SYSTEM_PROMPT: str = (
        "You are a helpful AI assistant. Provide concise and helpful responses."
    )

    # OpenRouter attribution headers
    COMPLETION_REFERER: str = "http://localhost:3002"
    COMPLETION_APP_TITLE: str = "Subspace Chatbot"

    # LiteLLM custom endpoint / key (optional, for proxy servers)
    LITELLM_API_BASE: str = ""
    LITELLM_API_KEY: str = ""

    # ===========================================
    # Relay caller verification
    # ===========================================
    # trust: accept the user id supplied by the backend action
    # jwt: require the forwarded bearer token to belong to that user
    RELAY_AUTH_MODE: Literal["trust", "jwt"] = "trust"
    RELAY_SHARED_SECRET: str = ""
    HASURA_JWT_SECRET: str = ""
    HASURA_JWT_ALGORITHM: str = "HS256"

    # ===========================================
    # Chat client
    # ===========================================
    NHOST_AUTH_URL: str = ""
    CHAT_LIST_POLL_SECONDS: float = 2.0


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache ensures settings are loaded only once.
    """
    return Settings()
