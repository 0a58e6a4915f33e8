"""Provider codec capability set.

A codec translates between the provider-agnostic session model (system
prompt, history, new message, options) and one vendor's wire schema. The
codec is selected once when a client is constructed; the transport, the
stream decoder and the session never branch on the provider.

Capabilities:
    - ``endpoint_path``: path appended to the client's base URL.
    - ``headers(api_key)``: content type, user agent and auth headers.
    - ``build_request(...)``: JSON-ready request mapping.
    - ``encode(...)``: request bytes (two-space indented JSON).
    - ``decode_event(payload)``: parse one SSE payload into a ``StreamEvent``.
    - ``post_process(text)``: final clean-up of the assembled reply.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

from .errors import ProtocolError
from .models import ExchangeOptions, Message
from .streaming import StreamEvent


class ProviderCodec(ABC):
    """Abstract encode/decode pair for one provider wire protocol."""

    #: Canonical provider name used in logs and errors.
    provider_name: str = "unknown"
    #: Path appended to the base URL (e.g. ``/chat/completions``).
    endpoint_path: str = ""
    #: Whether client construction must fail without an API key.
    requires_api_key: bool = False
    user_agent: str = "chat-providers"

    def __init__(self, provider_name: Optional[str] = None) -> None:
        # servers sharing one wire protocol (openai, ollama, gemini) differ only by name
        if provider_name:
            self.provider_name = provider_name

    def endpoint_url(self, base_url: str) -> str:
        return base_url.rstrip("/") + self.endpoint_path

    def headers(self, api_key: str) -> Dict[str, str]:
        """Return request headers; subclasses add their auth scheme."""
        return {
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
            "User-Agent": self.user_agent,
        }

    @abstractmethod
    def build_request(
        self,
        *,
        model: str,
        system_prompt: str,
        history: Sequence[Message],
        message: Message,
        options: ExchangeOptions,
    ) -> Dict[str, Any]:
        """Return the JSON-ready wire request for one exchange."""

    def encode(
        self,
        *,
        model: str,
        system_prompt: str,
        history: Sequence[Message],
        message: Message,
        options: ExchangeOptions,
    ) -> bytes:
        """Serialize the wire request to bytes.

        Raises:
            ProtocolError: The request could not be serialized.
        """
        request = self.build_request(
            model=model,
            system_prompt=system_prompt,
            history=history,
            message=message,
            options=options,
        )
        try:
            return json.dumps(request, indent=2, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise ProtocolError(
                f"json.dumps: {e}", provider=self.provider_name, model=model, raw=e
            ) from e

    @abstractmethod
    def decode_event(self, payload: str) -> Optional[StreamEvent]:
        """Parse one SSE payload.

        Returns a ``StreamEvent`` carrying a text fragment and/or the terminal
        flag, ``None`` for a well-formed event without text, and raises
        ``ValueError`` for a malformed payload.
        """

    def post_process(self, text: str) -> str:
        """Return the final assistant text; identity by default."""
        return text

    @staticmethod
    def load_event(payload: str) -> Dict[str, Any]:
        """Decode a JSON object payload, raising ``ValueError`` for anything else."""
        data = json.loads(payload)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return data


__all__ = ["ProviderCodec"]
