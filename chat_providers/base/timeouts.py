"""Unified timeout configuration for the chat transport.

This module centralizes the timeout values used to build ``httpx`` clients and
per-attempt request timeouts. Values are parsed from the environment once and
cached for the life of the process.

Key Components
--------------
TimeoutConfig
    Dataclass capturing normalized timeout values.

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use only. Supported environment variables (all optional):
        CHAT_PROVIDERS_TIMEOUT_CONNECT_SECONDS
        CHAT_PROVIDERS_TIMEOUT_READ_SECONDS
        CHAT_PROVIDERS_TIMEOUT_POOL_SECONDS

to_httpx_timeout(config, remaining)
    Builds an ``httpx.Timeout`` for one attempt, bounded by the time left on
    the caller's cancellation deadline.

Failure Modes
-------------
Invalid or non-positive environment values fall back to defaults.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import httpx


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Timeout for establishing a connection.
        read_timeout_seconds: Idle timeout while waiting for the next chunk of
            a streamed response. Generous by default because reasoning models
            can stay silent for a long time before the first token.
        pool_timeout_seconds: Timeout for acquiring a pooled connection.
    """

    connect_timeout_seconds: float = 10.0
    read_timeout_seconds: float = 300.0
    pool_timeout_seconds: float = 30.0


_CACHED: TimeoutConfig | None = None


def _parse_env_float(name: str, default: float) -> float:
    """Parse an environment variable as a positive float with a fallback default."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
        return val if val > 0 else default
    except ValueError:
        return default


def get_timeout_config() -> TimeoutConfig:
    """Return process-cached `TimeoutConfig` instance."""
    global _CACHED  # noqa: PLW0603 - intentional, documented module cache
    if _CACHED is not None:
        return _CACHED
    _CACHED = TimeoutConfig(
        connect_timeout_seconds=_parse_env_float("CHAT_PROVIDERS_TIMEOUT_CONNECT_SECONDS", 10.0),
        read_timeout_seconds=_parse_env_float("CHAT_PROVIDERS_TIMEOUT_READ_SECONDS", 300.0),
        pool_timeout_seconds=_parse_env_float("CHAT_PROVIDERS_TIMEOUT_POOL_SECONDS", 30.0),
    )
    return _CACHED


def reset_timeout_config() -> None:
    """Drop the cached configuration so the next call re-reads the environment."""
    global _CACHED  # noqa: PLW0603
    _CACHED = None


def to_httpx_timeout(config: TimeoutConfig, remaining: Optional[float] = None) -> httpx.Timeout:
    """Build an ``httpx.Timeout`` from ``config``, capped by ``remaining`` seconds."""

    def _cap(value: float) -> float:
        return value if remaining is None else max(0.001, min(value, remaining))

    return httpx.Timeout(
        connect=_cap(config.connect_timeout_seconds),
        read=_cap(config.read_timeout_seconds),
        write=_cap(config.connect_timeout_seconds),
        pool=_cap(config.pool_timeout_seconds),
    )


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
    "reset_timeout_config",
    "to_httpx_timeout",
]
