"""Live message thread for one open conversation.

``ConversationThread`` loads the conversation and its first history page,
then applies the provider's live events in arrival order until closed::

    async with ConversationThread(client, route) as thread:
        await thread.send_text("hi")

The visible message list is only ever extended by ``messageAdded`` events,
including the echo of our own sends, so it always mirrors provider order.
"""
from __future__ import annotations

import logging
from types import TracebackType
from typing import Callable, Iterable

from chat_client.application.dto.message import MediaUpload
from chat_client.application.dto.navigation import ChatRoute
from chat_client.application.exceptions import (
    ActionFailedError,
    InvalidStateError,
    MediaResolutionError,
    ThreadSetupError,
    ValidationError,
)
from chat_client.application.ports.provider import (
    ProviderClient,
    ProviderConversation,
    ProviderMessage,
)
from chat_client.config import settings
from chat_client.domain.entities.message import Message
from chat_client.domain.events.conversation_renamed import ConversationRenamed
from chat_client.domain.events.message_added import MessageAdded
from chat_client.domain.events.participant_changed import (
    ParticipantJoined,
    ParticipantLeft,
)
from chat_client.domain.events.thread_event import ThreadEvent
from chat_client.domain.value_objects.enums import ProviderEvent, ThreadState
from chat_client.infrastructure.provider.event_channel import EventChannel
from chat_client.infrastructure.provider.mappers import message_to_entity
from chat_client.services.media_cache import (
    MediaUrlCache,
    get_media_cache,
    resolve_message_media,
)

logger = logging.getLogger(__name__)

ThreadObserver = Callable[["ConversationThread"], None]

_DIRECT_EVENTS = [ProviderEvent.MESSAGE_ADDED]
_GROUP_EVENTS = [
    ProviderEvent.MESSAGE_ADDED,
    ProviderEvent.PARTICIPANT_JOINED,
    ProviderEvent.PARTICIPANT_LEFT,
    ProviderEvent.CONVERSATION_UPDATED,
]


class ConversationThread:
    def __init__(
        self,
        client: ProviderClient,
        route: ChatRoute,
        *,
        page_size: int | None = settings.MESSAGE_PAGE_SIZE,
        media_cache: MediaUrlCache | None = None,
    ) -> None:
        self._client = client
        self._route = route
        self._page_size = page_size
        self._media_cache = media_cache if media_cache is not None else get_media_cache()

        self._state = ThreadState.IDLE
        self._conversation: ProviderConversation | None = None
        self._channel: EventChannel | None = None
        self._messages: list[Message] = []
        self._raw_messages: dict[str, ProviderMessage] = {}
        self._participants: list[str] = list(route.participants)
        self._group_name = route.group_name or ""
        self._observers: list[ThreadObserver] = []

    @property
    def sid(self) -> str:
        return self._route.conversation_sid

    @property
    def is_group(self) -> bool:
        return self._route.is_group

    @property
    def state(self) -> ThreadState:
        return self._state

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    @property
    def participants(self) -> list[str]:
        return list(self._participants)

    @property
    def group_name(self) -> str:
        return self._group_name

    @property
    def title(self) -> str:
        if self.is_group:
            return self._group_name
        return self._route.recipient_username or ""

    @property
    def self_identity(self) -> str:
        return self._client.user.identity

    def is_own(self, message: Message) -> bool:
        return message.author == self.self_identity

    def add_observer(self, observer: ThreadObserver) -> Callable[[], None]:
        self._observers.append(observer)

        def _remove() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _remove

    # -- lifecycle ---------------------------------------------------------

    async def open(self) -> None:
        if self._state != ThreadState.IDLE:
            raise InvalidStateError(f"Cannot open thread in state {self._state}")

        self._state = ThreadState.BOOTSTRAPPING
        try:
            conversation = await self._client.get_conversation_by_sid(self.sid)
            history = await conversation.get_messages(self._page_size)
            participants = None
            if self.is_group:
                participants = [p.identity for p in await conversation.get_participants()]
        except Exception as exc:
            if self._state == ThreadState.BOOTSTRAPPING:
                self._state = ThreadState.IDLE
            logger.error("Error setting up conversation %s: %s", self.sid, exc)
            raise ThreadSetupError("Failed to load conversation") from exc

        if self._state == ThreadState.CLOSED:
            # closed while bootstrapping; never subscribe
            return

        self._conversation = conversation
        self._messages = []
        self._raw_messages = {}
        for raw in history:
            self._remember(message_to_entity(raw), raw)
        if participants is not None:
            self._participants = participants
            self._group_name = conversation.friendly_name or self._group_name

        self._channel = EventChannel(
            conversation,
            _GROUP_EVENTS if self.is_group else _DIRECT_EVENTS,
            self._apply,
        )
        self._channel.start()
        self._state = ThreadState.LIVE
        logger.info(
            "Thread %s live with %d messages", self.sid, len(self._messages),
        )
        self._notify()
        await self.mark_read()

    async def close(self) -> None:
        if self._state == ThreadState.CLOSED:
            return
        self._state = ThreadState.CLOSED
        if self._channel is not None:
            await self._channel.close()
            self._channel = None
        self._observers.clear()
        logger.info("Thread %s closed", self.sid)

    async def wait_idle(self) -> None:
        """Wait until every live event received so far has been applied."""
        if self._channel is not None:
            await self._channel.drain()

    async def __aenter__(self) -> ConversationThread:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # -- live events -------------------------------------------------------

    async def _apply(self, event: ThreadEvent) -> None:
        if self._state != ThreadState.LIVE:
            return

        if isinstance(event, MessageAdded):
            self._remember(event.message, event.source)
        elif isinstance(event, ParticipantJoined):
            if event.identity not in self._participants:
                self._participants.append(event.identity)
        elif isinstance(event, ParticipantLeft):
            if event.identity in self._participants:
                self._participants.remove(event.identity)
        elif isinstance(event, ConversationRenamed):
            if not event.friendly_name:
                return
            self._group_name = event.friendly_name
        else:
            logger.debug("Ignoring unknown thread event %r", event)
            return
        self._notify()

    def _remember(self, message: Message, raw: ProviderMessage | None) -> None:
        # provider handles are only needed to resolve attachment URLs
        if message.media is not None and raw is not None:
            self._raw_messages[message.sid] = raw
        self._messages.append(message)

    def _notify(self) -> None:
        for observer in list(self._observers):
            try:
                observer(self)
            except Exception:
                logger.exception("Thread observer failed")

    # -- actions -----------------------------------------------------------

    def _require_live(self) -> ProviderConversation:
        if self._state != ThreadState.LIVE or self._conversation is None:
            raise InvalidStateError(f"Thread {self.sid} is not live ({self._state})")
        return self._conversation

    async def mark_read(self) -> None:
        if self._conversation is None:
            return
        try:
            await self._conversation.set_all_messages_read()
        except Exception as exc:
            logger.warning("Failed to mark messages as read in %s: %s", self.sid, exc)

    async def send_text(self, text: str) -> bool:
        """Send a text message. Blank input is ignored and returns False."""
        if not text.strip():
            return False
        conversation = self._require_live()
        try:
            await conversation.send_message(text)
        except Exception as exc:
            logger.error("Error sending message to %s: %s", self.sid, exc)
            raise ActionFailedError("Failed to send message") from exc
        await self.mark_read()
        return True

    async def send_media(self, content_type: str, filename: str, payload: bytes) -> None:
        conversation = self._require_live()
        upload = MediaUpload(content_type=content_type, filename=filename, media=payload)
        try:
            await conversation.send_message(upload)
        except Exception as exc:
            logger.error("Error sending media to %s: %s", self.sid, exc)
            raise ActionFailedError("Failed to send file") from exc

    async def add_participants(self, identities: Iterable[str]) -> None:
        conversation = self._require_live()
        try:
            for identity in identities:
                await conversation.add(identity)
        except Exception as exc:
            logger.error("Error adding participants to %s: %s", self.sid, exc)
            raise ActionFailedError("Failed to add some participants") from exc

    async def remove_participant(self, identity: str) -> None:
        conversation = self._require_live()
        try:
            await conversation.remove_participant(identity)
        except Exception as exc:
            logger.error("Error removing %s from %s: %s", identity, self.sid, exc)
            raise ActionFailedError("Failed to remove participant") from exc

    async def rename(self, name: str) -> None:
        name = name.strip()
        if not name:
            raise ValidationError("Group name cannot be empty")
        conversation = self._require_live()
        try:
            await conversation.update_friendly_name(name)
        except Exception as exc:
            logger.error("Error updating group name of %s: %s", self.sid, exc)
            raise ActionFailedError("Failed to update group name") from exc
        self._group_name = name
        self._notify()

    async def leave(self) -> None:
        conversation = self._require_live()
        try:
            await conversation.leave()
        except Exception as exc:
            logger.error("Error leaving %s: %s", self.sid, exc)
            raise ActionFailedError("Failed to leave group") from exc
        await self.close()

    # -- media -------------------------------------------------------------

    async def media_url(self, message: Message) -> str:
        """Temporary URL of a media message's attachment, via the shared cache."""
        if message.media is None:
            raise ValidationError(f"Message {message.sid} has no media")
        raw = self._raw_messages.get(message.sid)
        if raw is None:
            raise MediaResolutionError(f"Message {message.sid} is not part of this thread")
        return await resolve_message_media(raw, self._media_cache)
