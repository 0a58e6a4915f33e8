"""chat_providers.config.defaults
==============================

Central place for the stable constants used across the chat_providers package:
vendor base URLs, wire headers, generation defaults and the retry policy.

This module intentionally avoids importing from other chat_providers packages
to prevent circular dependencies. Only plain constants live here.
"""

from __future__ import annotations

# ---- Vendor endpoints ----
OPENAI_DEFAULT_BASE_URL = "https://api.openai.com/v1"
# Ollama and Gemini both expose OpenAI-compatible chat completion endpoints.
OLLAMA_DEFAULT_BASE_URL = "http://localhost:11434/v1"
GEMINI_DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai"
ANTHROPIC_DEFAULT_BASE_URL = "https://api.anthropic.com/v1"

OPENAI_CHAT_PATH = "/chat/completions"
ANTHROPIC_MESSAGES_PATH = "/messages"

# ---- Wire headers ----
OPENAI_USER_AGENT = "chat-providers/openai"
ANTHROPIC_USER_AGENT = "chat-providers/anthropic"
ANTHROPIC_VERSION = "2023-06-01"

# ---- Generation defaults ----
# The Messages API requires an explicit output ceiling.
ANTHROPIC_DEFAULT_MAX_TOKENS = 4096
ANTHROPIC_SCHEMA_INSTRUCTION = (
    "You must respond with valid JSON that conforms to the following schema: {name}"
)

# ---- SSE wire markers ----
SSE_DATA_PREFIX = "data:"
SSE_DONE_SENTINEL = "[DONE]"

# ---- Retry policy ----
RETRY_MAX_ATTEMPTS = 5
RETRY_INITIAL_DELAY_SECONDS = 1.0
RETRY_MAX_DELAY_SECONDS = 8.0
# 400 is retried on purpose: some upstream gateways return it transiently
# under load. It can also mask a genuinely malformed request.
RETRY_STATUS_CODES = frozenset({400, 500, 502, 503, 504})

# ---- Diagnostics side channel ----
DIAGNOSTICS_REQUEST_FILE = "request.json"
DIAGNOSTICS_RESPONSE_FILE = "response.json"
