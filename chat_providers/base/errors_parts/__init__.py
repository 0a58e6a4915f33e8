"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `chat_providers.base.errors` for the stable surface.
"""

from .error_code import ErrorCode
from .provider_error import (
    CancelledError,
    ConfigError,
    ProtocolError,
    ProviderError,
    StreamError,
    TransportError,
)
from .classification import classify_exception, classify_status

__all__ = [
    "ErrorCode",
    "ProviderError",
    "ConfigError",
    "TransportError",
    "StreamError",
    "ProtocolError",
    "CancelledError",
    "classify_exception",
    "classify_status",
]
