"""Structured logging for the chat layer.

Every module logs through a child of the single ``chat_providers`` logger,
which owns exactly one stderr handler (JSON lines by default) and does not
propagate to the root logger. The level is taken from
``CHAT_PROVIDERS_LOG_LEVEL`` (default ``INFO``) and re-read whenever a logger
is requested, so tests and long-lived processes can adjust it at runtime.

Events are emitted as one JSON object per record:

    {"event": "transport.retry", "provider": "openai", "model": "...", ...}

``normalized_log_event`` additionally guarantees ``phase``, ``attempt`` and
``emitted`` (even when ``None``) plus ``error_code`` when an error occurred,
so transport, stream and session events can be filtered uniformly.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Dict, Mapping

from .log_support import JsonFormatter, LogContext

BASE_LOGGER_NAME = "chat_providers"
LOG_LEVEL_ENV = "CHAT_PROVIDERS_LOG_LEVEL"
REQUIRED_NORMALIZED_KEYS = ("phase", "attempt", "emitted")

_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_LEVELS: Mapping[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}
_configured = False


def _env_level(default: int) -> int:
    raw = (os.getenv(LOG_LEVEL_ENV) or "").strip().upper()
    return _LEVELS.get(raw, default)


def _base_logger(json_mode: bool, level: int) -> logging.Logger:
    """Return the shared base logger, installing its handler on first use."""
    global _configured  # noqa: PLW0603 - one-time handler installation
    base = logging.getLogger(BASE_LOGGER_NAME)
    wanted = _env_level(level)
    if base.level != wanted:
        base.setLevel(wanted)
    if not _configured:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter() if json_mode else logging.Formatter(_PLAIN_FORMAT))
        base.handlers[:] = [handler]
        base.propagate = False
        _configured = True
    return base


def get_logger(name: str = BASE_LOGGER_NAME, json_mode: bool = True, level: int = logging.INFO) -> logging.Logger:
    """Return a logger under the ``chat_providers`` hierarchy.

    Names outside the hierarchy are prefixed (``"transport"`` becomes
    ``"chat_providers.transport"``). Child loggers carry no handler or level
    of their own; the base logger decides both.
    """
    base = _base_logger(json_mode, level)
    if name == BASE_LOGGER_NAME:
        return base
    if not name.startswith(f"{BASE_LOGGER_NAME}."):
        name = f"{BASE_LOGGER_NAME}.{name}"
    child = logging.getLogger(name)
    child.setLevel(logging.NOTSET)
    child.propagate = True
    return child


def _payload(event: str, ctx: LogContext | None, fields: Mapping[str, Any], keep_none: bool) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"event": event, **(ctx.to_dict() if ctx else {})}
    for key, value in fields.items():
        if value is None and not keep_none:
            continue
        payload[key] = value
    return payload


def log_event(
    logger: logging.Logger,
    event: str,
    ctx: LogContext | None = None,
    *,
    level: int = logging.INFO,
    keep_none: bool = False,
    **fields: Any,
) -> None:
    """Emit ``event`` with ``ctx`` and ``fields`` as a single JSON message.

    ``None`` values are dropped unless ``keep_none`` is set. Nothing is
    serialized when ``level`` is disabled. Values that are not JSON-native
    are rendered with ``str``.
    """
    if logger.isEnabledFor(level):
        message = json.dumps(_payload(event, ctx, fields, keep_none), ensure_ascii=False, default=str)
        logger.log(level, message)


def normalized_log_event(
    logger: logging.Logger,
    event: str,
    ctx: LogContext | None = None,
    *,
    phase: str,
    attempt: int | None = None,
    error_code: str | None = None,
    emitted: bool | None = None,
    level: int = logging.INFO,
    **extra_fields: Any,
) -> None:
    """Like :func:`log_event`, with the normalized keys always present.

    Extra fields equal to ``None`` are dropped; they never replace a
    normalized key.
    """
    fields: Dict[str, Any] = {k: v for k, v in extra_fields.items() if v is not None}
    fields.update(phase=phase, attempt=attempt, emitted=emitted)
    if error_code is not None:
        fields["error_code"] = error_code
    log_event(logger, event, ctx, level=level, keep_none=True, **fields)


__all__ = [
    "BASE_LOGGER_NAME",
    "LOG_LEVEL_ENV",
    "REQUIRED_NORMALIZED_KEYS",
    "LogContext",
    "get_logger",
    "log_event",
    "normalized_log_event",
]
