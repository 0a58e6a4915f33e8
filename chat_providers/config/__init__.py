"""Configuration constants and environment helpers for chat_providers."""

from .env import get_env_api_key

__all__ = ["get_env_api_key"]
