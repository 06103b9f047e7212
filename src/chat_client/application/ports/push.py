from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Protocol


class RemoteMessage(Protocol):
    data: Mapping[str, Any] | None
    title: str | None
    body: str | None


RemoteMessageHandler = Callable[[RemoteMessage], Awaitable[None]]
Unsubscribe = Callable[[], None]


class PushNotificationSource(Protocol):
    def on_message(self, handler: RemoteMessageHandler) -> Unsubscribe:
        """Messages delivered while the app is in the foreground."""
        ...

    def on_notification_opened_app(self, handler: RemoteMessageHandler) -> Unsubscribe:
        """Notification tapped while the app was in the background."""
        ...

    async def get_initial_notification(self) -> RemoteMessage | None:
        """Notification that launched the app, if any."""
        ...

    async def display_notification(self, title: str | None, body: str | None) -> None: ...
