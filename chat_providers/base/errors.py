"""Unified chat error taxonomy public surface.

This module re-exports the implementations under
``chat_providers.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import (
    CancelledError,
    ConfigError,
    ProtocolError,
    ProviderError,
    StreamError,
    TransportError,
)
from .errors_parts.classification import classify_exception, classify_status

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
