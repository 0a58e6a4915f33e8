"""OpenAI-compatible chat completions codec.

Wire format (``POST {base_url}/chat/completions``):
    - ``messages``: optional leading system message carrying the session's
      system prompt, then the full history, then the new message.
    - ``model``, ``stream: true``, and when set ``temperature``,
      ``reasoning_effort``, ``max_tokens``.
    - ``response_format: {"type": "json_schema", "json_schema": {...}}``
      when a schema was requested.
    - Auth: ``Authorization: Bearer <key>``, only when a key is configured
      (local servers such as Ollama accept anonymous requests).

Stream events: ``choices[0].delta.content`` carries the text fragment; a
non-null ``choices[0].finish_reason`` marks the end. The ``[DONE]`` sentinel
is handled by the decoder.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..base.codec import ProviderCodec
from ..base.models import ExchangeOptions, Message
from ..base.streaming import StreamEvent
from ..config.defaults import OPENAI_CHAT_PATH, OPENAI_USER_AGENT


class OpenAICodec(ProviderCodec):
    """Codec for any server speaking the OpenAI chat completion protocol."""

    provider_name = "openai"
    endpoint_path = OPENAI_CHAT_PATH
    requires_api_key = False
    user_agent = OPENAI_USER_AGENT

    def headers(self, api_key: str) -> Dict[str, str]:
        headers = super().headers(api_key)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
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
        messages = []
        if system_prompt:
            messages.append(Message.system(system_prompt).to_wire())
        messages.extend(m.to_wire() for m in history)
        messages.append(message.to_wire())

        request: Dict[str, Any] = {"messages": messages, "model": model}
        if options.response_format is not None:
            request["response_format"] = {
                "type": "json_schema",
                "json_schema": options.response_format.to_wire(),
            }
        if options.temperature is not None:
            request["temperature"] = options.temperature
        if options.reasoning_effort:
            request["reasoning_effort"] = options.reasoning_effort
        if options.max_tokens is not None:
            request["max_tokens"] = options.max_tokens
        request["stream"] = True
        return request

    def decode_event(self, payload: str) -> Optional[StreamEvent]:
        data = self.load_event(payload)
        choices = data.get("choices") or []
        if not isinstance(choices, list):
            raise ValueError("choices is not a list")
        if not choices:
            # usage-only or keep-alive chunk
            return None
        choice = choices[0]
        if not isinstance(choice, dict):
            raise ValueError("choice is not an object")
        delta = choice.get("delta") or {}
        content = delta.get("content") if isinstance(delta, dict) else None
        text = content if isinstance(content, str) and content else None
        finish = choice.get("finish_reason") is not None
        if text is None and not finish:
            return None
        return StreamEvent(delta=text, finish=finish)


__all__ = ["OpenAICodec"]
