"""Pytest configuration for the chat_providers test suite.

Network and time are both faked:

- HTTP goes through ``httpx.MockTransport``; the client is injected via the
  ``http_client`` parameter of :class:`ChatClient`, so nothing touches the
  shared pool or the network. The only exception is the loopback server in
  ``test_cancellation_network.py``, which needs real sockets.
- Backoff sleeps go through an injected sleep hook that records the drawn
  duration and returns immediately.
"""

from __future__ import annotations

import io
import logging
from typing import Callable, Iterator, List

import httpx
import pytest

from chat_providers.base.cancellation import CancellationToken
from chat_providers.base.http import close_all_clients
from chat_providers.base.logging import get_logger
from chat_providers.base.timeouts import reset_timeout_config

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture()
def mock_http() -> Iterator[Callable[[Handler], httpx.Client]]:
    """Yield a factory building ``httpx.Client`` objects backed by a handler."""
    clients: List[httpx.Client] = []

    def _make(handler: Handler) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()


@pytest.fixture()
def sleeps() -> List[float]:
    """Durations requested by the transport's backoff, in order."""
    return []


@pytest.fixture()
def record_sleep(sleeps: List[float]) -> Callable[[float, CancellationToken], bool]:
    """Sleep hook that records the duration and never blocks."""

    def _sleep(seconds: float, token: CancellationToken) -> bool:
        sleeps.append(seconds)
        return token.cancelled

    return _sleep


@pytest.fixture()
def captured() -> Iterator[io.StringIO]:
    """Swap the base handler for an in-memory one emitting raw messages."""
    base = get_logger()
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    saved_handlers, saved_level = base.handlers[:], base.level
    base.handlers[:] = [handler]
    yield stream
    base.handlers[:] = saved_handlers
    base.setLevel(saved_level)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep provider keys and timeout overrides from the host out of every test."""
    for name in (
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
        "GEMINI_API_KEY",
        "GOOGLE_API_KEY",
        "CHAT_PROVIDERS_TIMEOUT_CONNECT_SECONDS",
        "CHAT_PROVIDERS_TIMEOUT_READ_SECONDS",
        "CHAT_PROVIDERS_TIMEOUT_POOL_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_timeout_config()
    yield
    reset_timeout_config()


@pytest.fixture(scope="session", autouse=True)
def _close_pool_after_session() -> Iterator[None]:
    """Close pooled clients created by tests that exercise the default pool."""
    yield
    close_all_clients()
