"""OpenAI-compatible provider (OpenAI, Ollama, Gemini's OpenAI endpoint...)."""

from __future__ import annotations

from typing import Any

from ..base.chat_client import ChatClient, Option
from ..config.defaults import GEMINI_DEFAULT_BASE_URL, OLLAMA_DEFAULT_BASE_URL, OPENAI_DEFAULT_BASE_URL
from .codec import OpenAICodec


def new_client(base_url: str, *options: Option, **client_kwargs: Any) -> ChatClient:
    """Return a client for any server speaking the OpenAI chat completion API.

    ``with_model`` is required; ``with_api_key`` is optional.
    """
    return ChatClient(OpenAICodec(), base_url, *options, **client_kwargs)


__all__ = [
    "OpenAICodec",
    "new_client",
    "OPENAI_DEFAULT_BASE_URL",
    "OLLAMA_DEFAULT_BASE_URL",
    "GEMINI_DEFAULT_BASE_URL",
]
