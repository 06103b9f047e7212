from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from chat_client.domain.entities.conversation import Conversation
from chat_client.domain.entities.directory_user import DirectoryUser
from chat_client.domain.value_objects.enums import ListEntryKind


@dataclass(frozen=True, slots=True)
class ConversationEntry:
    conversation: Conversation
    kind: ListEntryKind = ListEntryKind.CONVERSATION

    @property
    def key(self) -> str:
        return f"{self.kind}-{self.conversation.sid}"


@dataclass(frozen=True, slots=True)
class UserEntry:
    user: DirectoryUser
    kind: ListEntryKind = ListEntryKind.USER

    @property
    def key(self) -> str:
        return f"{self.kind}-{self.user.id or self.user.user_name}"


CombinedListEntry = Union[ConversationEntry, UserEntry]


@dataclass(frozen=True, slots=True)
class InboxSnapshot:
    """Result of one inbox fetch cycle.

    Either half may have failed independently; the failing half is empty and
    its error message is set.
    """

    entries: list[CombinedListEntry]
    users: list[DirectoryUser] = field(default_factory=list)
    conversations: list[Conversation] = field(default_factory=list)
    directory_error: str | None = None
    conversations_error: str | None = None

    @property
    def has_errors(self) -> bool:
        return self.directory_error is not None or self.conversations_error is not None
