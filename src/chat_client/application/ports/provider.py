"""Messaging provider collaborator, as seen by the engine.

The transport behind these objects is out of scope; adapters flatten the
provider's paginators into plain sequences.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Protocol, Sequence

from chat_client.application.dto.message import MediaUpload

Listener = Callable[[Any], Any]


class ProviderUser(Protocol):
    identity: str


class ProviderMedia(Protocol):
    sid: str
    content_type: str
    filename: str | None

    async def get_content_temporary_url(self) -> str: ...


class ProviderParticipant(Protocol):
    identity: str


class ProviderMessage(Protocol):
    sid: str
    index: int | None
    author: str | None
    body: str | None
    type: str
    media: ProviderMedia | None
    date_created: datetime | None


class ProviderConversation(Protocol):
    sid: str
    unique_name: str | None
    friendly_name: str | None
    status: str
    date_created: datetime | None

    async def get_messages(self, page_size: int | None = None) -> Sequence[ProviderMessage]: ...
    async def get_participants(self) -> Sequence[ProviderParticipant]: ...
    async def add(self, identity: str) -> None: ...
    async def remove_participant(self, identity: str) -> None: ...
    async def update_friendly_name(self, name: str) -> None: ...
    async def leave(self) -> None: ...
    async def set_all_messages_read(self) -> None: ...
    async def get_unread_messages_count(self) -> int | None: ...
    async def send_message(self, content: str | MediaUpload) -> Any: ...

    def on(self, event: str, listener: Listener) -> None: ...
    def off(self, event: str, listener: Listener) -> None: ...


class ConversationUpdate(Protocol):
    """Payload of the ``conversationUpdated`` event."""

    conversation: ProviderConversation


class ProviderClient(Protocol):
    user: ProviderUser

    async def get_conversation_by_sid(self, sid: str) -> ProviderConversation: ...

    async def create_conversation(
        self, *, friendly_name: str, unique_name: str,
    ) -> ProviderConversation: ...

    async def get_subscribed_conversations(self) -> Sequence[ProviderConversation]: ...

    async def update_token(self, token: str) -> None: ...
    async def shutdown(self) -> None: ...

    def on(self, event: str, listener: Listener) -> None: ...
    def off(self, event: str, listener: Listener) -> None: ...


ClientFactory = Callable[[str], ProviderClient]
