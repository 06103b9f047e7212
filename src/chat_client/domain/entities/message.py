from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from chat_client.domain.value_objects.enums import MessageType
from chat_client.domain.value_objects.ids import MessageSid


@dataclass(frozen=True, slots=True)
class MediaRef:
    id: MessageSid  # sid of the owning message
    content_type: str
    filename: str | None = None


@dataclass(frozen=True, slots=True)
class ResolvedMediaUrl:
    url: str
    expires_approximately: datetime


@dataclass(frozen=True, slots=True)
class Message:
    sid: MessageSid
    author: str | None
    body: str | None
    type: MessageType
    media: MediaRef | None
    date_created: datetime | None
    index: int | None = None
