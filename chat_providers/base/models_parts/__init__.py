"""Model parts package (one public type per module)."""

from .client_config import ClientConfig
from .exchange_options import ExchangeOptions
from .json_schema import JsonSchema
from .message import ROLES, Message, Role

__all__ = ["ClientConfig", "ExchangeOptions", "JsonSchema", "Message", "Role", "ROLES"]
