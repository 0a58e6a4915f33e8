"""Provider-agnostic core: errors, cancellation, transport, streaming and sessions."""

from .cancellation import CancellationToken, CancelledError
from .errors import (
    ConfigError,
    ErrorCode,
    ProtocolError,
    ProviderError,
    StreamError,
    TransportError,
)

__all__ = [
    "CancellationToken",
    "CancelledError",
    "ConfigError",
    "ErrorCode",
    "ProtocolError",
    "ProviderError",
    "StreamError",
    "TransportError",
]
