"""Provider factory.

Purpose
-------
Create a :class:`ChatClient` from a canonical provider name. The factory
resolves the codec class lazily with ``importlib`` and fills in the
provider's default base URL and, when the caller supplied no
``with_api_key`` option, the API key from the environment.

Supported providers: ``openai``, ``ollama`` and ``gemini`` (all speaking
the OpenAI-compatible protocol) and ``anthropic``.

No retries or fallbacks happen here; the factory either returns a client or
raises.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any, Dict, Optional, Tuple, Type

from ..config.defaults import (
    ANTHROPIC_DEFAULT_BASE_URL,
    GEMINI_DEFAULT_BASE_URL,
    OLLAMA_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_BASE_URL,
)
from ..config.env import get_env_api_key
from .chat_client import ChatClient, Option, PendingConfig, with_api_key
from .codec import ProviderCodec


class UnknownProviderError(Exception):
    """Raised when a provider name cannot be resolved to a codec.

    Failure modes include:
    - The provider name is not registered in the factory mapping.
    - The codec module cannot be imported or the codec class is missing.
    """


class ProviderFactory:
    """Create chat clients based on a canonical provider name."""

    _PROVIDERS: Dict[str, Dict[str, str]] = {
        "openai": {
            "module": "chat_providers.openai.codec",
            "class": "OpenAICodec",
            "provider_name": "openai",
            "base_url": OPENAI_DEFAULT_BASE_URL,
        },
        "ollama": {
            "module": "chat_providers.openai.codec",
            "class": "OpenAICodec",
            "provider_name": "ollama",
            "base_url": OLLAMA_DEFAULT_BASE_URL,
        },
        "gemini": {
            "module": "chat_providers.openai.codec",
            "class": "OpenAICodec",
            "provider_name": "gemini",
            "base_url": GEMINI_DEFAULT_BASE_URL,
        },
        "anthropic": {
            "module": "chat_providers.anthropic.codec",
            "class": "AnthropicCodec",
            "provider_name": "anthropic",
            "base_url": ANTHROPIC_DEFAULT_BASE_URL,
        },
    }

    @classmethod
    def _entry(cls, provider: str) -> Tuple[str, Dict[str, str]]:
        name = (provider or "").lower().strip()
        entry = cls._PROVIDERS.get(name)
        if not entry:
            raise UnknownProviderError(f"Unknown provider '{provider}'")
        return name, entry

    @classmethod
    def codec(cls, provider: str) -> ProviderCodec:
        """Instantiate the codec registered for ``provider``."""
        _, entry = cls._entry(provider)
        module_path, class_name = entry["module"], entry["class"]
        try:
            mod = import_module(module_path)
        except ImportError as exc:  # pragma: no cover - import failure path
            raise UnknownProviderError(
                f"Failed to import module '{module_path}' for provider '{provider}': {exc}"
            ) from exc
        try:
            klass: Type[ProviderCodec] = getattr(mod, class_name)
        except AttributeError as exc:
            raise UnknownProviderError(
                f"Codec class '{class_name}' not found in '{module_path}' for provider '{provider}'"
            ) from exc
        return klass(provider_name=entry["provider_name"])

    @classmethod
    def default_base_url(cls, provider: str) -> str:
        return cls._entry(provider)[1]["base_url"]

    @classmethod
    def create(
        cls,
        provider: str,
        *options: Option,
        base_url: Optional[str] = None,
        **client_kwargs: Any,
    ) -> ChatClient:
        """Create a :class:`ChatClient` for ``provider``.

        Parameters
        ----------
        provider:
            Canonical provider name (e.g. ``"anthropic"``).
        *options:
            Client options. When none of them sets an API key, the key is
            looked up in the provider's environment variables.
        base_url:
            Override for the provider's default base URL.
        **client_kwargs:
            Forwarded to :class:`ChatClient` (``http_client``,
            ``retry_config``...).

        Raises
        ------
        UnknownProviderError
            Unknown provider name.
        ConfigError
            Invalid configuration (see :class:`ChatClient`).
        """
        name, entry = cls._entry(provider)
        codec = cls.codec(name)
        pending = PendingConfig(base_url="")
        for option in options:
            option(pending)
        if not pending.api_key:
            env_key = get_env_api_key(name)
            if env_key:
                options = (with_api_key(env_key),) + tuple(options)
        return ChatClient(codec, base_url or entry["base_url"], *options, **client_kwargs)

    @classmethod
    def supported(cls) -> Tuple[str, ...]:
        """Return the supported canonical provider names in deterministic order."""
        return tuple(cls._PROVIDERS.keys())


def create_client(provider: str, *options: Option, base_url: Optional[str] = None, **client_kwargs: Any) -> ChatClient:
    """Shorthand for :meth:`ProviderFactory.create`."""
    return ProviderFactory.create(provider, *options, base_url=base_url, **client_kwargs)


__all__ = ["ProviderFactory", "UnknownProviderError", "create_client"]
