"""Typed live-event channel for one open conversation.

Provider listener callbacks are translated into ``ThreadEvent`` values and
queued; a single dispatch task drains the queue in arrival order. Closing
the channel detaches every listener and stops the task.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine

from chat_client.application.ports.provider import Listener, ProviderConversation
from chat_client.domain.events.conversation_renamed import ConversationRenamed
from chat_client.domain.events.message_added import MessageAdded
from chat_client.domain.events.participant_changed import (
    ParticipantJoined,
    ParticipantLeft,
)
from chat_client.domain.events.thread_event import ThreadEvent
from chat_client.domain.value_objects.enums import ProviderEvent
from chat_client.infrastructure.provider.mappers import message_to_entity

logger = logging.getLogger(__name__)

OnThreadEventCallback = Callable[[ThreadEvent], Coroutine[Any, Any, None]]

_CLOSED = object()


def _translate(event: ProviderEvent, payload: Any) -> ThreadEvent:
    if event == ProviderEvent.MESSAGE_ADDED:
        return MessageAdded(message=message_to_entity(payload), source=payload)
    if event == ProviderEvent.PARTICIPANT_JOINED:
        return ParticipantJoined(identity=payload.identity)
    if event == ProviderEvent.PARTICIPANT_LEFT:
        return ParticipantLeft(identity=payload.identity)
    if event == ProviderEvent.CONVERSATION_UPDATED:
        conversation = getattr(payload, "conversation", payload)
        return ConversationRenamed(friendly_name=getattr(conversation, "friendly_name", None))
    raise ValueError(f"Unsupported provider event: {event}")


class EventChannel:
    """Single-consumer queue bridging provider listeners to a dispatch task."""

    def __init__(
        self,
        conversation: ProviderConversation,
        events: list[ProviderEvent],
        callback: OnThreadEventCallback,
    ) -> None:
        self._conversation = conversation
        self._events = events
        self._callback = callback
        self._queue: asyncio.Queue[Any] = asyncio.Queue()
        self._listeners: list[tuple[ProviderEvent, Listener]] = []
        self._task: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        for event in self._events:
            listener = self._make_listener(event)
            self._conversation.on(event, listener)
            self._listeners.append((event, listener))
        self._task = asyncio.create_task(
            self._dispatch(), name=f"thread-events-{self._conversation.sid}",
        )
        logger.debug(
            "Event channel started for %s (%s)",
            self._conversation.sid, ", ".join(self._events),
        )

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for event, listener in self._listeners:
            try:
                self._conversation.off(event, listener)
            except Exception:
                logger.exception("Failed to detach %s listener", event)
        self._listeners.clear()
        self._queue.put_nowait(_CLOSED)
        if self._task:
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.debug("Event channel closed for %s", self._conversation.sid)

    async def drain(self) -> None:
        """Wait until every queued event has been dispatched."""
        await self._queue.join()

    def _make_listener(self, event: ProviderEvent) -> Listener:
        def _listener(payload: Any) -> None:
            if self._closed:
                return
            try:
                self._queue.put_nowait(_translate(event, payload))
            except Exception:
                logger.exception("Dropping malformed %s event", event)

        return _listener

    async def _dispatch(self) -> None:
        while True:
            item = await self._queue.get()
            try:
                if item is _CLOSED:
                    return
                if self._closed:
                    continue
                try:
                    await self._callback(item)
                except Exception:
                    logger.exception("Error applying %s", type(item).__name__)
            finally:
                self._queue.task_done()
