"""
Structured chat error exception types.

`ProviderError` is the root of the taxonomy. Each subclass pins its default
`ErrorCode` so call sites only pass the message and context they know.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class ProviderError(Exception):
    """Represents a structured chat error with a normalized error code.

    Attributes:
        message: Human-readable error message suitable for logging.
        code: Normalized :class:`ErrorCode` classification for the failure.
        provider: Provider key where the error originated (e.g., ``"openai"``).
        model: Optional model name associated with the failure.
        retryable: Whether the transport would have retried this failure.
        raw: Optional original exception for diagnostics.
    """

    message: str
    code: ErrorCode = ErrorCode.UNKNOWN
    provider: Optional[str] = None
    model: Optional[str] = None
    retryable: bool = False
    raw: Optional[BaseException] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return a compact string combining provider, model, code, and message."""
        return f"{self.provider or '-'}:{self.model or '-'} {self.code.value}: {self.message}"


@dataclass
class ConfigError(ProviderError):
    """A required client option is missing or invalid.

    Raised at construction time only; never reaches the network layer.
    """

    code: ErrorCode = ErrorCode.CONFIG


@dataclass
class TransportError(ProviderError):
    """Network failure or terminal HTTP status.

    ``status_code`` and ``body`` are populated when the failure was an HTTP
    response rather than a connection-level error.
    """

    code: ErrorCode = ErrorCode.TRANSIENT
    status_code: Optional[int] = None
    body: Optional[str] = None


@dataclass
class StreamError(ProviderError):
    """The response body could not be read to completion."""

    code: ErrorCode = ErrorCode.STREAM


@dataclass
class ProtocolError(ProviderError):
    """A request could not be serialized to the provider wire schema."""

    code: ErrorCode = ErrorCode.PROTOCOL


@dataclass
class CancelledError(ProviderError):
    """Raised when an operation observes a cancellation request or expired deadline.

    Distinguishes cooperative cancellation from other failures so the
    transport never retries it.
    """

    code: ErrorCode = ErrorCode.CANCELLED


__all__ = [
    "ProviderError",
    "ConfigError",
    "TransportError",
    "StreamError",
    "ProtocolError",
    "CancelledError",
]
