"""Resilience policies (retry/backoff)."""

from .retry import DEFAULT_RETRY_CONFIG, RetryConfig

__all__ = ["RetryConfig", "DEFAULT_RETRY_CONFIG"]
