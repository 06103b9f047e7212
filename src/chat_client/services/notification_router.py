"""Routes push notifications to the conversation screen.

Warm starts navigate as soon as a notification is tapped. On a cold start the
navigator may not be mounted yet, so the target is held as pending and a
single consumer task waits on the readiness event, then delivers it once. A
failed navigation keeps the target pending until readiness is signalled again.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

import pydantic

from chat_client.application.dto.notification import NotificationPayload
from chat_client.application.exceptions import InvalidStateError
from chat_client.application.ports.navigation import Navigator
from chat_client.application.ports.push import (
    PushNotificationSource,
    RemoteMessage,
    Unsubscribe,
)
from chat_client.config import settings

logger = logging.getLogger(__name__)


def parse_payload(data: Mapping[str, Any] | None) -> NotificationPayload | None:
    """Normalize a raw push ``data`` map; ``None`` if it names no conversation."""
    if not data:
        return None
    try:
        return NotificationPayload.model_validate(dict(data))
    except pydantic.ValidationError:
        logger.debug("Dropping notification without conversationSid: %s", dict(data))
        return None


class NotificationRouter:
    def __init__(
        self,
        navigator: Navigator | None = None,
        *,
        screen: str = settings.CHAT_SCREEN,
    ) -> None:
        self._navigator = navigator
        self._screen = screen
        self._ready = asyncio.Event()
        self._pending: NotificationPayload | None = None
        self._consumer: asyncio.Task[None] | None = None
        self._unsubscribers: list[Unsubscribe] = []

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    @property
    def pending(self) -> NotificationPayload | None:
        return self._pending

    # -- readiness ---------------------------------------------------------

    def mark_navigation_ready(self, navigator: Navigator | None = None) -> None:
        """Signal that the navigator finished mounting. No-op while already ready."""
        if navigator is not None and self._navigator is None:
            self._navigator = navigator
        if self._ready.is_set():
            return
        if self._navigator is None:
            raise InvalidStateError("Navigation ready without a navigator")
        self._ready.set()
        logger.info("Navigation ready")

    async def drain(self) -> None:
        """Wait for the pending-target consumer, if one is running."""
        if self._consumer is not None and not self._consumer.done():
            await self._consumer

    # -- routing -----------------------------------------------------------

    def route_to_conversation(self, data: Mapping[str, Any] | None) -> bool:
        """Route a notification's data map. Returns False if it was dropped."""
        payload = parse_payload(data)
        if payload is None:
            return False

        if self._ready.is_set():
            # newer tap supersedes anything still waiting
            self._pending = None
            if not self._deliver(payload):
                self._requeue(payload)
        else:
            self._hold(payload)
        return True

    def set_pending(self, data: Mapping[str, Any] | None) -> bool:
        """Hold a target for delivery once navigation is ready. Last writer wins."""
        payload = parse_payload(data)
        if payload is None:
            return False
        self._hold(payload)
        return True

    def _hold(self, payload: NotificationPayload) -> None:
        self._pending = payload
        self._ensure_consumer()
        logger.debug("Holding notification for %s until navigation is ready",
                     payload.conversation_sid)

    async def handle_initial_notification(self, push: PushNotificationSource) -> bool:
        """Cold start: route the notification that launched the app, if any."""
        message = await push.get_initial_notification()
        if message is None:
            return False
        logger.info("App opened from notification")
        return self.set_pending(message.data)

    def _ensure_consumer(self) -> None:
        if self._consumer is None or self._consumer.done():
            self._consumer = asyncio.create_task(
                self._deliver_when_ready(), name="pending-notification",
            )

    async def _deliver_when_ready(self) -> None:
        while True:
            await self._ready.wait()
            payload, self._pending = self._pending, None
            if payload is None or self._deliver(payload):
                return
            if self._pending is None:
                self._pending = payload
            # wait for the navigator to report ready again
            self._ready.clear()

    def _requeue(self, payload: NotificationPayload) -> None:
        self._ready.clear()
        self._hold(payload)

    def _deliver(self, payload: NotificationPayload) -> bool:
        assert self._navigator is not None
        params = payload.to_route().to_params()
        try:
            self._navigator.navigate(self._screen, params)
        except Exception:
            logger.exception("Navigation to %s failed; keeping it pending", payload.conversation_sid)
            return False
        logger.info("Routed notification to %s", payload.conversation_sid)
        return True

    # -- push wiring -------------------------------------------------------

    def attach(self, push: PushNotificationSource) -> None:
        async def _on_foreground(message: RemoteMessage) -> None:
            try:
                await push.display_notification(message.title, message.body)
            except Exception:
                logger.exception("Failed to display foreground notification")

        async def _on_opened(message: RemoteMessage) -> None:
            self.route_to_conversation(message.data)

        self._unsubscribers.append(push.on_message(_on_foreground))
        self._unsubscribers.append(push.on_notification_opened_app(_on_opened))

    async def close(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        if self._consumer is not None and not self._consumer.done():
            self._consumer.cancel()
            try:
                await self._consumer
            except asyncio.CancelledError:
                pass
        self._consumer = None


_router: NotificationRouter | None = None


def get_router() -> NotificationRouter:
    global _router  # noqa: PLW0603
    if _router is None:
        _router = NotificationRouter()
    return _router
