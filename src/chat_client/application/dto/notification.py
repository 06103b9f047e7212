"""Push notification ``data`` map, normalized at the ingestion boundary."""
from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from chat_client.application.dto.navigation import ChatRoute, placeholder_avatar_url


class NotificationPayload(BaseModel):
    conversation_sid: str = Field(alias="conversationSid", min_length=1)
    is_group: bool = Field(default=False, alias="isGroup")
    group_name: str | None = Field(default=None, alias="groupName")
    participants: list[str] = Field(default_factory=list)
    recipient_username: str | None = Field(default=None, alias="recipientUsername")
    recipient_avatar: str | None = Field(default=None, alias="recipientAvatar")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("is_group", mode="before")
    @classmethod
    def _truthy_flag(cls, value: Any) -> bool:
        # push data maps carry strings only; "true" is the sole truthy string
        return value is True or value == "true"

    @field_validator("participants", mode="before")
    @classmethod
    def _decode_participants(cls, value: Any) -> list[str]:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                return []
        if not isinstance(value, list):
            return []
        return [str(item) for item in value]

    @model_validator(mode="after")
    def _default_avatar(self) -> NotificationPayload:
        if self.recipient_avatar is None and self.recipient_username:
            self.recipient_avatar = placeholder_avatar_url(self.recipient_username)
        return self

    def to_route(self) -> ChatRoute:
        if self.is_group:
            return ChatRoute.group(self.conversation_sid, self.group_name, self.participants)
        return ChatRoute(
            conversation_sid=self.conversation_sid,
            is_group=False,
            recipient_username=self.recipient_username,
            recipient_avatar=self.recipient_avatar,
        )
