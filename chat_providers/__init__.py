"""chat_providers package

Uniform conversational interface over several LLM vendor APIs.

Purpose:
    Hide each vendor's wire format behind one client/session abstraction.
    Callers send a message into an ongoing conversation and get the
    assembled assistant reply back, while the package handles transient
    network failures (retry with jittered backoff), token-by-token
    server-sent-event streaming, and conversation history bookkeeping.

Public API (re-exported):
    - Version: ``__version__``
    - Clients: :class:`ChatClient`, :func:`create_client`, options
      ``with_model`` / ``with_api_key`` / ``with_debug``
    - Sessions: :class:`ChatSession`, :class:`Message`, :class:`ExchangeOptions`,
      :class:`JsonSchema`
    - Codecs: :class:`OpenAICodec`, :class:`AnthropicCodec`
    - Cancellation: :class:`CancellationToken`
    - Errors: :class:`ProviderError` and its subclasses, :class:`ErrorCode`
"""

from .anthropic import AnthropicCodec
from .base.cancellation import CancellationToken
from .base.chat_client import ChatClient, with_api_key, with_debug, with_model
from .base.chat_session import ChatSession, ExchangeState
from .base.errors import (
    CancelledError,
    ConfigError,
    ErrorCode,
    ProtocolError,
    ProviderError,
    StreamError,
    TransportError,
)
from .base.factory import ProviderFactory, UnknownProviderError, create_client
from .base.models import ClientConfig, ExchangeOptions, JsonSchema, Message, Role
from .openai import OpenAICodec

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Clients
    "ChatClient",
    "create_client",
    "ProviderFactory",
    "UnknownProviderError",
    "with_model",
    "with_api_key",
    "with_debug",
    # Sessions and values
    "ChatSession",
    "ExchangeState",
    "ClientConfig",
    "ExchangeOptions",
    "JsonSchema",
    "Message",
    "Role",
    # Codecs
    "OpenAICodec",
    "AnthropicCodec",
    # Cancellation
    "CancellationToken",
    # Errors
    "ProviderError",
    "ErrorCode",
    "ConfigError",
    "TransportError",
    "StreamError",
    "ProtocolError",
    "CancelledError",
]
