"""
Validated, immutable client configuration.

A ``ClientConfig`` is produced exactly once per ``ChatClient`` after all
options have been applied, and is shared read-only by every session spawned
from that client.
"""
from __future__ import annotations

from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class ClientConfig(BaseModel):
    """Client-wide configuration.

    Attributes:
        base_url: Absolute http(s) vendor API base URL; a trailing ``/`` is
            removed.
        model_name: Required, non-empty model identifier.
        api_key: Credential; required only by providers that demand one
            (enforced by the client, which knows the provider).
        debug: Echo streamed deltas to stderr and log client setup.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    base_url: str = Field(min_length=1)
    model_name: str = Field(min_length=1)
    api_key: str = ""
    debug: bool = False

    @field_validator("base_url", "model_name", "api_key", mode="before")
    @classmethod
    def _strip(cls, value: object, info: ValidationInfo) -> object:
        if not isinstance(value, str):
            return value
        value = value.strip()
        if info.field_name == "base_url":
            value = value.rstrip("/")
        return value

    @field_validator("base_url")
    @classmethod
    def _absolute_http_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"base_url must be an absolute http(s) URL, got {value!r}")
        return value


__all__ = ["ClientConfig"]
