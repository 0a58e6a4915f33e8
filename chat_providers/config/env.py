"""chat_providers.config.env
=========================

Centralized environment variable mapping for provider credentials.

Design Notes
------------
- Canonical mapping is defined in ``ENV_MAP``. Providers that historically
  accept several variable names list them in ``ENV_ALIASES`` with the
  canonical name first to establish precedence.
- Providers absent from both maps (e.g. ``ollama``) need no credential.

Failure Modes
-------------
- Functions return ``None`` when a provider is unknown or no value is present;
  they never raise. The client decides whether a missing key is fatal.
"""

from __future__ import annotations

import os
from typing import Dict, Optional, Tuple

ENV_MAP: Dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "gemini": "GEMINI_API_KEY",
}

ENV_ALIASES: Dict[str, Tuple[str, ...]] = {
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
}


def get_env_var_names(provider: str) -> Tuple[str, ...]:
    """Return the ordered environment variable names holding ``provider``'s key."""
    key = provider.strip().lower()
    if key in ENV_ALIASES:
        return ENV_ALIASES[key]
    if key in ENV_MAP:
        return (ENV_MAP[key],)
    return ()


def get_env_api_key(provider: str) -> Optional[str]:
    """Return the first non-empty API key found for ``provider``, else ``None``."""
    for name in get_env_var_names(provider):
        value = os.getenv(name, "").strip()
        if value:
            return value
    return None


__all__ = ["ENV_MAP", "ENV_ALIASES", "get_env_var_names", "get_env_api_key"]
