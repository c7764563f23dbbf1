"""Schemas for Discord HTTP interactions and outgoing messages."""

from __future__ import annotations

from datetime import datetime
from enum import IntEnum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

EPHEMERAL_FLAG = 1 << 6


class InteractionType(IntEnum):
    PING = 1
    APPLICATION_COMMAND = 2


class InteractionResponseType(IntEnum):
    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4


class InteractionUser(BaseModel):
    id: str
    username: Optional[str] = None


class InteractionMember(BaseModel):
    user: InteractionUser


class InteractionData(BaseModel):
    name: str


class Interaction(BaseModel):
    """Incoming interaction; guild invocations carry ``member``, DMs ``user``."""

    id: Optional[str] = None
    type: int
    channel_id: Optional[str] = None
    data: Optional[InteractionData] = None
    member: Optional[InteractionMember] = None
    user: Optional[InteractionUser] = None

    @property
    def invoking_user_id(self) -> Optional[str]:
        if self.member:
            return self.member.user.id
        if self.user:
            return self.user.id
        return None


class EmbedField(BaseModel):
    name: str
    value: str
    inline: bool = True


class Embed(BaseModel):
    """Rich message embed, serialized with ``to_payload``."""

    title: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    color: Optional[int] = None
    timestamp: Optional[datetime] = None
    footer: Optional[str] = None
    image_url: Optional[str] = None
    fields: List[EmbedField] = Field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = self.model_dump(
            exclude_none=True, exclude={"footer", "image_url", "timestamp", "fields"}
        )
        if self.timestamp:
            payload["timestamp"] = self.timestamp.isoformat()
        if self.footer:
            payload["footer"] = {"text": self.footer}
        if self.image_url:
            payload["image"] = {"url": self.image_url}
        if self.fields:
            payload["fields"] = [field.model_dump() for field in self.fields]
        return payload


def link_button_row(label: str, url: str) -> Dict[str, Any]:
    """A single action row holding one link-style button."""
    return {
        "type": 1,
        "components": [{"type": 2, "style": 5, "label": label, "url": url}],
    }


__all__ = [
    "EPHEMERAL_FLAG",
    "Embed",
    "EmbedField",
    "Interaction",
    "InteractionResponseType",
    "InteractionType",
    "link_button_row",
]
