"""
Message value type used by sessions and codecs.

Defines the immutable `Message` dataclass and the `Role` literal. Messages are
created during an exchange and never mutated after being appended to a
session's history.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple, get_args

Role = Literal["system", "user", "assistant"]

ROLES: Tuple[str, ...] = get_args(Role)


@dataclass(frozen=True)
class Message:
    """A single chat message.

    Attributes:
        role: The role of the message author (``"system"``, ``"user"`` or
            ``"assistant"``).
        content: Plain text content.

    Raises:
        ValueError: If ``role`` is not one of :data:`ROLES`.
    """

    role: Role
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"unknown message role {self.role!r}; expected one of {ROLES}")

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(role="assistant", content=content)

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role="system", content=content)

    def to_wire(self) -> dict:
        """Return the ``{"role", "content"}`` mapping shared by both wire formats."""
        return {"role": self.role, "content": self.content}


__all__ = ["Message", "Role", "ROLES"]
