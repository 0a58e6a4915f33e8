"""Chat client: validated configuration plus a session factory.

A client is built from a provider codec, a base URL and a list of options.
Options only mutate a pending configuration; a single validation pass then
produces the immutable :class:`ClientConfig`. An invalid configuration raises
:class:`ConfigError` before any transport exists, so it can never reach the
network.

Example::

    client = ChatClient(
        AnthropicCodec(),
        ANTHROPIC_DEFAULT_BASE_URL,
        with_model("claude-sonnet-4-5"),
        with_api_key(key),
    )
    session = client.new_session("You are terse.")
    reply = session.exchange("hello")
"""

from __future__ import annotations

import logging
import random
from dataclasses import asdict, dataclass
from typing import Callable, Iterable, Optional

import httpx
from pydantic import ValidationError

from .chat_session import ChatSession
from .codec import ProviderCodec
from .errors import ConfigError
from .logging import LogContext, get_logger, log_event
from .models import ClientConfig, Message
from .resilience.retry import DEFAULT_RETRY_CONFIG, RetryConfig
from .timeouts import TimeoutConfig
from .transport import SleepFn, Transport


@dataclass
class PendingConfig:
    """Mutable configuration that options write into before validation."""

    base_url: str
    model_name: str = ""
    api_key: str = ""
    debug: bool = False


Option = Callable[[PendingConfig], None]


def with_model(model_name: str) -> Option:
    """Set the (required) model name; surrounding whitespace is trimmed."""

    def _apply(cfg: PendingConfig) -> None:
        cfg.model_name = (model_name or "").strip()

    return _apply


def with_api_key(api_key: str) -> Option:
    """Set the API key; surrounding whitespace is trimmed."""

    def _apply(cfg: PendingConfig) -> None:
        cfg.api_key = (api_key or "").strip()

    return _apply


def with_debug(debug: bool = True) -> Option:
    """Enable debug mode: log client setup and echo streamed text to stderr."""

    def _apply(cfg: PendingConfig) -> None:
        cfg.debug = bool(debug)

    return _apply


def _validate(codec: ProviderCodec, pending: PendingConfig) -> ClientConfig:
    if not pending.model_name.strip():
        raise ConfigError("with_model is a required option", provider=codec.provider_name)
    if codec.requires_api_key and not pending.api_key.strip():
        raise ConfigError(
            f"with_api_key is a required option for {codec.provider_name}",
            provider=codec.provider_name,
            model=pending.model_name,
        )
    try:
        return ClientConfig(**asdict(pending))
    except ValidationError as e:
        raise ConfigError(
            f"invalid client configuration: {e}",
            provider=codec.provider_name,
            model=pending.model_name,
            raw=e,
        ) from e


class ChatClient:
    """Reusable, otherwise stateless factory of :class:`ChatSession` objects.

    Parameters:
        codec: Provider codec selecting the wire protocol.
        base_url: Vendor API base URL (e.g. ``https://api.openai.com/v1``).
        *options: ``with_model`` / ``with_api_key`` / ``with_debug`` options.
        http_client: Optional ``httpx.Client`` (tests inject a mock transport
            here); defaults to the shared pool.
        retry_config: Retry/backoff policy for the transport.
        timeout_config: Timeout values; defaults to the process configuration.
        sleep: Backoff sleep hook, forwarded to the transport.
        rng: Random source for the backoff jitter.

    Raises:
        ConfigError: Missing model name, missing key for a provider that
            requires one, or otherwise invalid configuration.
    """

    def __init__(
        self,
        codec: ProviderCodec,
        base_url: str,
        *options: Option,
        http_client: Optional[httpx.Client] = None,
        retry_config: RetryConfig = DEFAULT_RETRY_CONFIG,
        timeout_config: Optional[TimeoutConfig] = None,
        sleep: Optional[SleepFn] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        pending = PendingConfig(base_url=base_url or "")
        for option in options:
            option(pending)
        self._config = _validate(codec, pending)
        self._codec = codec
        ctx = LogContext(provider=codec.provider_name, model=self._config.model_name)
        self._transport = Transport(
            codec.endpoint_url(self._config.base_url),
            codec.headers(self._config.api_key),
            ctx=ctx,
            http_client=http_client,
            retry_config=retry_config,
            timeout_config=timeout_config,
            sleep=sleep,
            rng=rng,
        )
        if self._config.debug:
            log_event(
                get_logger("chat_providers.client"),
                "client.init",
                ctx,
                level=logging.INFO,
                url=self._transport.url,
            )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def codec(self) -> ProviderCodec:
        return self._codec

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def provider_name(self) -> str:
        return self._codec.provider_name

    def new_session(self, system_prompt: str = "", initial_history: Iterable[Message] = ()) -> ChatSession:
        """Start a conversation; ``initial_history`` is copied, never aliased."""
        return ChatSession(self, system_prompt, initial_history)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"ChatClient(provider={self.provider_name!r}, model={self._config.model_name!r})"


__all__ = [
    "ChatClient",
    "Option",
    "PendingConfig",
    "with_model",
    "with_api_key",
    "with_debug",
]
