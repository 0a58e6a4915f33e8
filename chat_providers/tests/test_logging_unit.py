"""Unit coverage for structured logging utilities and helpers."""

from __future__ import annotations

import io
import json
import logging

from chat_providers.base.log_support import JsonFormatter
from chat_providers.base.logging import (
    BASE_LOGGER_NAME,
    REQUIRED_NORMALIZED_KEYS,
    LogContext,
    get_logger,
    log_event,
    normalized_log_event,
)


def _events(stream: io.StringIO) -> list:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


def test_child_names_are_prefixed():
    assert get_logger("transport").name == f"{BASE_LOGGER_NAME}.transport"  # nosec B101 - asserts are appropriate in unit tests
    assert get_logger("chat_providers.session").name == "chat_providers.session"  # nosec B101
    assert get_logger().name == BASE_LOGGER_NAME  # nosec B101


def test_env_level_applies_to_base_logger(monkeypatch):
    base = logging.getLogger(BASE_LOGGER_NAME)
    saved = base.level
    monkeypatch.setenv("CHAT_PROVIDERS_LOG_LEVEL", "ERROR")
    try:
        get_logger("levels")
        assert base.level == logging.ERROR  # nosec B101
    finally:
        base.setLevel(saved)


def test_log_event_merges_context_and_drops_none(captured):
    logger = get_logger("test.events")
    log_event(logger, "transport.retry", LogContext(provider="openai", model="m"), status=503, body=None)
    (event,) = _events(captured)
    assert event == {"event": "transport.retry", "provider": "openai", "model": "m", "status": 503}  # nosec B101


def test_log_event_respects_level(captured):
    logger = get_logger("test.levels2")
    get_logger().setLevel(logging.WARNING)
    log_event(logger, "quiet", level=logging.DEBUG)
    log_event(logger, "loud", level=logging.WARNING)
    assert [e["event"] for e in _events(captured)] == ["loud"]  # nosec B101


def test_normalized_log_event_includes_required_keys(captured):
    logger = get_logger("test.normalized")
    normalized_log_event(
        logger,
        "stream.finalize",
        LogContext(provider="anthropic", session_id="abc"),
        phase="finalize",
        emitted=True,
        attempt=None,
        chars=5,
    )
    (event,) = _events(captured)
    for key in REQUIRED_NORMALIZED_KEYS:
        assert key in event  # nosec B101
    assert event["attempt"] is None  # nosec B101 - normalized keys survive even when None
    assert "error_code" not in event  # nosec B101
    assert event["chars"] == 5  # nosec B101
    assert event["session_id"] == "abc"  # nosec B101


def test_normalized_error_code_included_when_set(captured):
    normalized_log_event(get_logger("test.override"), "x", phase="start", error_code="stream", emitted=False)
    (event,) = _events(captured)
    assert event["error_code"] == "stream"  # nosec B101
    assert event["phase"] == "start"  # nosec B101


def test_json_formatter_hoists_json_message() -> None:
    record = logging.LogRecord(
        name="chat_providers.test.json",
        level=logging.INFO,
        pathname=__file__,
        lineno=0,
        msg=json.dumps({"provider": "ollama", "event": "client.init"}),
        args=(),
        exc_info=None,
    )
    payload = json.loads(JsonFormatter().format(record))
    assert payload["provider"] == "ollama"  # nosec B101
    assert payload["level"] == "INFO"  # nosec B101
    assert "msg" not in payload  # nosec B101


def test_json_formatter_keeps_plain_message() -> None:
    record = logging.LogRecord("chat_providers.t", logging.WARNING, __file__, 0, "plain %s", ("text",), None)
    payload = json.loads(JsonFormatter().format(record))
    assert payload["msg"] == "plain text"  # nosec B101


def test_log_context_to_dict_flattens_extra():
    ctx = LogContext(provider="openai", extra={"request_id": "r1", "unset": None})
    assert ctx.to_dict() == {"provider": "openai", "request_id": "r1"}  # nosec B101
