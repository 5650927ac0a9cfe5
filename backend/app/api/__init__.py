"""API routers."""

from app.api import relay

__all__ = [
    "relay",
]
