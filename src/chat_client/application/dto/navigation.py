from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from chat_client.config import settings


def placeholder_avatar_url(name: str) -> str:
    return settings.AVATAR_URL_TEMPLATE.format(name=quote(name, safe=""))


@dataclass(frozen=True, slots=True)
class ChatRoute:
    """Parameters of the conversation screen."""

    conversation_sid: str
    is_group: bool
    group_name: str | None = None
    participants: list[str] = field(default_factory=list)
    recipient_username: str | None = None
    recipient_avatar: str | None = None

    @classmethod
    def direct(cls, conversation_sid: str, recipient: str) -> ChatRoute:
        return cls(
            conversation_sid=conversation_sid,
            is_group=False,
            recipient_username=recipient,
            recipient_avatar=placeholder_avatar_url(recipient),
        )

    @classmethod
    def group(cls, conversation_sid: str, name: str | None, participants: list[str]) -> ChatRoute:
        return cls(
            conversation_sid=conversation_sid,
            is_group=True,
            group_name=name,
            participants=list(participants),
        )

    def to_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {
            "conversationSid": self.conversation_sid,
            "isGroup": self.is_group,
        }
        if self.is_group:
            if self.group_name is not None:
                params["groupName"] = self.group_name
            params["participants"] = list(self.participants)
        else:
            if self.recipient_username is not None:
                params["recipientUsername"] = self.recipient_username
            if self.recipient_avatar is not None:
                params["recipientAvatar"] = self.recipient_avatar
        return params
