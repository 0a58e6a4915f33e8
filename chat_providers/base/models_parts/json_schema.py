"""
Named JSON-schema descriptor requested as a structured response format.

External dependencies
---------------------
- Pydantic v2 ``BaseModel``. The schema body is stored under ``schema_``
  because ``schema`` shadows a ``BaseModel`` attribute; it is serialized under
  its wire name ``schema`` via the field alias.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class JsonSchema(BaseModel):
    """Structured-output descriptor.

    Attributes:
        name: Schema name; the only part the Anthropic codec can use.
        description: Optional human-readable description.
        schema_: JSON Schema document (wire name ``schema``).
        strict: Optional strict-adherence flag (OpenAI-compatible only).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1)
    description: Optional[str] = None
    schema_: Dict[str, Any] = Field(default_factory=dict, alias="schema")
    strict: Optional[bool] = None

    def to_wire(self) -> Dict[str, Any]:
        """Return the JSON-ready mapping, dropping unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


__all__ = ["JsonSchema"]
