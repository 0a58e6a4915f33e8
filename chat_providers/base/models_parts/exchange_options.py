"""
Per-exchange generation options.

Options apply to one ``ChatSession.exchange`` call only. Every field is
optional; codecs omit unset fields from the wire request.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .json_schema import JsonSchema


class ExchangeOptions(BaseModel):
    """Generation parameters and diagnostics settings for one exchange.

    Attributes:
        temperature: Sampling temperature.
        reasoning_effort: Reasoning-effort hint (OpenAI-compatible only).
        max_tokens: Output ceiling; the Anthropic codec falls back to its
            default when unset.
        response_format: Optional named JSON schema for structured output.
        diagnostics_dir: When set, the outbound request and the raw captured
            event stream are written to ``request.json`` / ``response.json``
            in this directory.
    """

    model_config = ConfigDict(frozen=True)

    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    reasoning_effort: Optional[str] = None
    max_tokens: Optional[int] = Field(default=None, gt=0)
    response_format: Optional[JsonSchema] = None
    diagnostics_dir: Optional[Path] = None


__all__ = ["ExchangeOptions"]
