"""Shared builders for fake provider responses.

Purpose:
    Produce server-sent-event bodies in each vendor's wire shape so test
    modules describe scenarios ("stream 'Hel' then 'lo'") rather than JSON
    boilerplate.

Exports:
    - openai_chunk(content, finish_reason) -> str
    - openai_sse(*fragments) -> bytes
    - anthropic_sse(*fragments) -> bytes
    - sse_response(body, status) -> httpx.Response
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx


def openai_chunk(content: Optional[str] = None, finish_reason: Optional[str] = None) -> str:
    """Return one OpenAI-compatible streaming chunk as an SSE ``data:`` line."""
    delta: Dict[str, Any] = {} if content is None else {"content": content}
    payload = {"choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}]}
    return "data: " + json.dumps(payload)


def openai_sse(*fragments: str) -> bytes:
    """Build a complete OpenAI-compatible SSE body streaming ``fragments``."""
    lines = [openai_chunk(f) for f in fragments]
    lines.append(openai_chunk(finish_reason="stop"))
    lines.append("data: [DONE]")
    return ("\n\n".join(lines) + "\n\n").encode("utf-8")


def anthropic_sse(*fragments: str) -> bytes:
    """Build a complete Anthropic Messages SSE body streaming ``fragments``."""
    events: List[Tuple[str, Dict[str, Any]]] = [
        ("message_start", {"type": "message_start", "message": {"id": "msg_1", "role": "assistant"}}),
        ("content_block_start", {"type": "content_block_start", "index": 0}),
        ("ping", {"type": "ping"}),
    ]
    events.extend(
        (
            "content_block_delta",
            {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": f}},
        )
        for f in fragments
    )
    events.append(("content_block_stop", {"type": "content_block_stop", "index": 0}))
    events.append(("message_stop", {"type": "message_stop"}))
    body = "".join(f"event: {name}\ndata: {json.dumps(data)}\n\n" for name, data in events)
    return body.encode("utf-8")


def sse_response(body: bytes, status: int = 200) -> httpx.Response:
    return httpx.Response(status, content=body, headers={"Content-Type": "text/event-stream"})


__all__ = ["openai_chunk", "openai_sse", "anthropic_sse", "sse_response"]
