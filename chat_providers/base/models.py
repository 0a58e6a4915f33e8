"""Public facade for chat value types.

Re-exports the implementations under ``chat_providers.base.models_parts``.
"""

from .models_parts import ROLES, ClientConfig, ExchangeOptions, JsonSchema, Message, Role

__all__ = ["ClientConfig", "ExchangeOptions", "JsonSchema", "Message", "Role", "ROLES"]
