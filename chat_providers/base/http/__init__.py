"""HTTP infrastructure helpers (pooled ``httpx`` clients)."""

from .client import close_all_clients, get_httpx_client

__all__ = ["get_httpx_client", "close_all_clients"]
