"""
Unified chat message format.

Every adapter translates ``ChatMessage`` lists into its provider's wire shape;
callers never see provider-specific message fields.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal

Role = Literal["user", "assistant", "system"]


@dataclass(frozen=True)
class Attachment:
    """A file attached to a message; ``data`` is a base64 payload."""

    mime_type: str
    file_name: str
    data: str

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


@dataclass
class ChatMessage:
    """A chat message in the unified request format.

    Attributes:
        role: ``"user"``, ``"assistant"`` or ``"system"``.
        content: Plain text content.
        attachments: Optional attached files.
    """

    role: Role
    content: str
    attachments: List[Attachment] = field(default_factory=list)


__all__ = ["Role", "Attachment", "ChatMessage"]
