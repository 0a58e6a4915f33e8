"""Anthropic Messages API codec.

Wire format (``POST {base_url}/messages``):
    - ``messages``: the history followed by the new message. The system
      prompt travels in the top-level ``system`` field instead.
    - ``max_tokens`` is mandatory; defaults to 4096 unless overridden.
    - ``temperature`` when set, ``stream: true`` always.
    - The protocol has no structured-output field. When a schema is
      requested its *name* is appended to the system prompt as an
      instruction; the schema body is not sent.
    - Auth: ``x-api-key`` plus a fixed ``anthropic-version`` header.

Stream events: ``content_block_delta`` events whose delta type is
``text_delta`` carry text; ``message_stop`` marks the end. Other event types
(``message_start``, ``content_block_start``, ``ping``...) carry no text. An
``error`` event (e.g. ``overloaded_error``) is logged at WARNING and otherwise
ignored; the stream then ends without ``message_stop``.

Post-processing strips a leading ```` ```json ```` and a trailing ```` ``` ````
fence, since the model tends to wrap structured replies in a code block.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from ..base.codec import ProviderCodec
from ..base.logging import get_logger, log_event
from ..base.models import ExchangeOptions, Message
from ..base.streaming import StreamEvent
from ..config.defaults import (
    ANTHROPIC_DEFAULT_MAX_TOKENS,
    ANTHROPIC_MESSAGES_PATH,
    ANTHROPIC_SCHEMA_INSTRUCTION,
    ANTHROPIC_USER_AGENT,
    ANTHROPIC_VERSION,
)

JSON_FENCE_OPEN = "```json"
FENCE_CLOSE = "```"

_logger = get_logger("chat_providers.anthropic")


def strip_json_fence(text: str) -> str:
    """Remove a leading ```` ```json ```` and trailing ```` ``` ```` fence.

    Whitespace just inside the fences is trimmed. Text without either fence is
    returned unchanged.
    """
    body = text.strip()
    fenced = False
    if body.startswith(JSON_FENCE_OPEN):
        body = body[len(JSON_FENCE_OPEN):]
        fenced = True
    if body.endswith(FENCE_CLOSE):
        body = body[: -len(FENCE_CLOSE)]
        fenced = True
    return body.strip() if fenced else text


class AnthropicCodec(ProviderCodec):
    """Codec for Anthropic's Messages streaming protocol."""

    provider_name = "anthropic"
    endpoint_path = ANTHROPIC_MESSAGES_PATH
    requires_api_key = True
    user_agent = ANTHROPIC_USER_AGENT

    def headers(self, api_key: str) -> Dict[str, str]:
        headers = super().headers(api_key)
        headers["x-api-key"] = api_key
        headers["anthropic-version"] = ANTHROPIC_VERSION
        return headers

    def build_request(
        self,
        *,
        model: str,
        system_prompt: str,
        history: Sequence[Message],
        message: Message,
        options: ExchangeOptions,
    ) -> Dict[str, Any]:
        system = system_prompt
        if options.response_format is not None:
            instruction = ANTHROPIC_SCHEMA_INSTRUCTION.format(name=options.response_format.name)
            system = f"{system}\n\n{instruction}" if system else instruction

        request: Dict[str, Any] = {
            "model": model,
            "messages": [m.to_wire() for m in history] + [message.to_wire()],
            "max_tokens": options.max_tokens or ANTHROPIC_DEFAULT_MAX_TOKENS,
        }
        if system:
            request["system"] = system
        if options.temperature is not None:
            request["temperature"] = options.temperature
        request["stream"] = True
        return request

    def decode_event(self, payload: str) -> Optional[StreamEvent]:
        data = self.load_event(payload)
        kind = data.get("type")
        if kind == "content_block_delta":
            delta = data.get("delta") or {}
            if not isinstance(delta, dict):
                raise ValueError("delta is not an object")
            if delta.get("type") != "text_delta":
                return None
            text = delta.get("text")
            return StreamEvent(delta=text) if isinstance(text, str) and text else None
        if kind == "message_stop":
            return StreamEvent(finish=True)
        if kind == "error":
            err = data.get("error")
            err = err if isinstance(err, dict) else {}
            log_event(
                _logger,
                "stream.provider_error",
                level=logging.WARNING,
                provider=self.provider_name,
                error_type=err.get("type"),
                error=err.get("message"),
            )
        return None

    def post_process(self, text: str) -> str:
        return strip_json_fence(text)


__all__ = ["AnthropicCodec", "strip_json_fence"]
