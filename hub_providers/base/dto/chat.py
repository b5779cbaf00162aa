"""
Pydantic DTOs and validators for inbound chat requests.

Purpose
-------
Validate chat payloads before they reach the fallback orchestrator: roles,
non-empty content and well-formed attachments. Validation either succeeds or
raises ``pydantic.ValidationError``; callers at the edge (CLI, UI bridge)
decide how to report it.
"""

from __future__ import annotations

import base64
import binascii
from typing import Any, Iterable, List, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from ..models import Attachment, ChatMessage

Role = Literal["user", "assistant", "system"]


class AttachmentDTO(BaseModel):
    """A base64 attachment; ``data`` must decode."""

    mime_type: str = Field(min_length=1)
    file_name: str = Field(min_length=1)
    data: str

    @field_validator("data")
    @classmethod
    def _validate_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("attachment data must be base64") from exc
        return value


class ChatMessageDTO(BaseModel):
    """A chat message in the unified format.

    Rules:
        - ``role`` is one of user/assistant/system.
        - A message needs text or at least one attachment.
    """

    role: Role
    content: str = ""
    attachments: List[AttachmentDTO] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_content(self) -> "ChatMessageDTO":
        if not self.content.strip() and not self.attachments:
            raise ValueError("message content must not be empty")
        return self

    def to_domain(self) -> ChatMessage:
        return ChatMessage(
            role=self.role,
            content=self.content,
            attachments=[Attachment(a.mime_type, a.file_name, a.data) for a in self.attachments],
        )


class ChatRequestDTO(BaseModel):
    messages: List[ChatMessageDTO] = Field(min_length=1)


def _as_payload(message: Any) -> Any:
    if isinstance(message, ChatMessage):
        return {
            "role": message.role,
            "content": message.content,
            "attachments": [
                {"mime_type": a.mime_type, "file_name": a.file_name, "data": a.data} for a in message.attachments
            ],
        }
    return message


def validate_messages(messages: Iterable[Any]) -> List[ChatMessage]:
    """Validate dicts or :class:`ChatMessage` objects and return domain messages.

    Raises:
        pydantic.ValidationError: when any message is invalid or the list is empty.
    """
    request = ChatRequestDTO(messages=[_as_payload(m) for m in messages])
    return [m.to_domain() for m in request.messages]


__all__ = ["AttachmentDTO", "ChatMessageDTO", "ChatRequestDTO", "validate_messages"]
