"""Pooled ``httpx.Client`` instances for the streaming transport.

A transport without an injected client borrows one from this pool, keyed by
``(base_url, purpose)``. Reusing the client keeps connections alive between
exchanges. Cookies are not kept here: each transport call carries its own
jar, so clients and sessions sharing a pooled client never see each other's.

The pooled client's default timeout comes from :func:`get_timeout_config`;
the transport narrows it per request to the caller's remaining deadline.
Every pooled client is closed at interpreter exit.
"""

from __future__ import annotations

import atexit
import contextlib
import threading
from typing import Dict, Optional, Tuple

import httpx

from ..timeouts import get_timeout_config, to_httpx_timeout

PoolKey = Tuple[Optional[str], str]

_MAX_CONNECTIONS = 100
_pool: Dict[PoolKey, httpx.Client] = {}
_pool_lock = threading.Lock()


def _build_client() -> httpx.Client:
    return httpx.Client(
        timeout=to_httpx_timeout(get_timeout_config()),
        limits=httpx.Limits(max_connections=_MAX_CONNECTIONS, max_keepalive_connections=_MAX_CONNECTIONS),
        trust_env=True,
    )


def get_httpx_client(base_url: Optional[str], purpose: str) -> httpx.Client:
    """Return the shared client for ``(base_url, purpose)``, creating it once.

    ``base_url`` only discriminates pools; requests are always sent with
    absolute URLs. Safe to call from several threads.
    """
    key: PoolKey = (base_url, purpose)
    with _pool_lock:
        client = _pool.get(key)
        if client is None or client.is_closed:
            client = _pool[key] = _build_client()
        return client


def close_all_clients() -> None:
    """Close every pooled client and empty the pool."""
    with _pool_lock:
        clients = list(_pool.values())
        _pool.clear()
    for client in clients:
        # nothing useful to do with a failure while tearing down
        with contextlib.suppress(Exception):
            client.close()


atexit.register(close_all_clients)

__all__ = ["get_httpx_client", "close_all_clients"]
