"""Anthropic Messages API provider."""

from __future__ import annotations

from typing import Any

from ..base.chat_client import ChatClient, Option
from ..config.defaults import ANTHROPIC_DEFAULT_BASE_URL
from .codec import AnthropicCodec, strip_json_fence


def new_client(base_url: str, *options: Option, **client_kwargs: Any) -> ChatClient:
    """Return a client for Anthropic's Messages API.

    Both ``with_model`` and ``with_api_key`` are required.
    """
    return ChatClient(AnthropicCodec(), base_url, *options, **client_kwargs)


__all__ = ["AnthropicCodec", "new_client", "strip_json_fence", "ANTHROPIC_DEFAULT_BASE_URL"]
