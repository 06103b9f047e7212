from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from chat_client.domain.value_objects.ids import ConversationSid


@dataclass(frozen=True, slots=True)
class LastMessage:
    body: str
    author: str | None
    date_created: datetime | None


@dataclass(frozen=True, slots=True)
class Conversation:
    sid: ConversationSid
    unique_name: str
    is_group: bool
    display_name: str
    participants: tuple[str, ...]
    friendly_name: str | None
    last_message: LastMessage | None
    unread_count: int
    date_created: datetime | None

    @property
    def activity_at(self) -> datetime | None:
        """Timestamp the inbox orders by: last message, else creation."""
        if self.last_message is not None and self.last_message.date_created is not None:
            return self.last_message.date_created
        return self.date_created
