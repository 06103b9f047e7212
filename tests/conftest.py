"""Shared test fixtures."""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

from chat_client.application.dto.message import MediaUpload
from chat_client.domain.entities.conversation import Conversation, LastMessage
from chat_client.domain.entities.directory_user import DirectoryUser
from chat_client.domain.value_objects.enums import ProviderEvent

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

_sids = itertools.count(1)


def at(minutes: int) -> datetime:
    return T0 + timedelta(minutes=minutes)


class ProviderFailure(RuntimeError):
    pass


@dataclass
class FakeUser:
    identity: str


@dataclass
class FakeMedia:
    sid: str
    content_type: str
    filename: str | None = None
    url: str = "https://media.example/tmp"
    fail: bool = False
    calls: int = 0

    async def get_content_temporary_url(self) -> str:
        self.calls += 1
        if self.fail:
            raise ProviderFailure("media unavailable")
        return self.url


@dataclass
class FakeParticipant:
    identity: str


@dataclass
class FakeMessage:
    sid: str
    author: str | None = "bob"
    body: str | None = "hello"
    type: str = "text"
    media: FakeMedia | None = None
    date_created: datetime | None = T0
    index: int | None = None


def make_message(
    sid: str | None = None,
    *,
    author: str = "bob",
    body: str | None = "hello",
    minutes: int = 0,
) -> FakeMessage:
    return FakeMessage(
        sid=sid or f"IM{next(_sids)}",
        author=author,
        body=body,
        date_created=at(minutes),
    )


def make_media_message(
    sid: str | None = None,
    *,
    author: str = "bob",
    content_type: str = "image/png",
    url: str = "https://media.example/tmp",
) -> FakeMessage:
    sid = sid or f"IM{next(_sids)}"
    return FakeMessage(
        sid=sid,
        author=author,
        body=None,
        type="media",
        media=FakeMedia(sid=f"ME{sid}", content_type=content_type, url=url),
    )


@dataclass
class FakeConversation:
    sid: str
    unique_name: str | None = None
    friendly_name: str | None = None
    status: str = "joined"
    date_created: datetime | None = T0
    messages: list[FakeMessage] = field(default_factory=list)
    participants: list[str] = field(default_factory=list)
    unread: int | None = 0
    fail: set[str] = field(default_factory=set)
    echo_author: str = "alice"
    listeners: dict[str, list[Callable[[Any], Any]]] = field(default_factory=dict)
    sent: list[Any] = field(default_factory=list)
    read_calls: int = 0
    left: bool = False

    def _check(self, name: str) -> None:
        if name in self.fail:
            raise ProviderFailure(f"{name} failed")

    async def get_messages(self, page_size: int | None = None) -> list[FakeMessage]:
        self._check("get_messages")
        if page_size is None:
            return list(self.messages)
        return self.messages[-page_size:] if page_size else []

    async def get_participants(self) -> list[FakeParticipant]:
        self._check("get_participants")
        return [FakeParticipant(identity=i) for i in self.participants]

    async def add(self, identity: str) -> None:
        self._check("add")
        if identity not in self.participants:
            self.participants.append(identity)

    async def remove_participant(self, identity: str) -> None:
        self._check("remove_participant")
        if identity in self.participants:
            self.participants.remove(identity)

    async def update_friendly_name(self, name: str) -> None:
        self._check("update_friendly_name")
        self.friendly_name = name

    async def leave(self) -> None:
        self._check("leave")
        self.left = True

    async def set_all_messages_read(self) -> None:
        self.read_calls += 1
        self._check("set_all_messages_read")

    async def get_unread_messages_count(self) -> int | None:
        self._check("get_unread_messages_count")
        return self.unread

    async def send_message(self, content: str | MediaUpload) -> str:
        self._check("send_message")
        self.sent.append(content)
        if isinstance(content, MediaUpload):
            sid = f"IM{next(_sids)}"
            echo = FakeMessage(
                sid=sid,
                author=self.echo_author,
                body=None,
                type="media",
                media=FakeMedia(sid=f"ME{sid}", content_type=content.content_type,
                                filename=content.filename),
            )
        else:
            echo = make_message(author=self.echo_author, body=content)
        self.emit(ProviderEvent.MESSAGE_ADDED, echo)
        return echo.sid

    def on(self, event: str, listener: Callable[[Any], Any]) -> None:
        self.listeners.setdefault(event, []).append(listener)

    def off(self, event: str, listener: Callable[[Any], Any]) -> None:
        if listener in self.listeners.get(event, []):
            self.listeners[event].remove(listener)

    def listener_count(self) -> int:
        return sum(len(v) for v in self.listeners.values())

    def emit(self, event: str, payload: Any) -> None:
        for listener in list(self.listeners.get(event, [])):
            listener(payload)


@dataclass
class FakeConversationUpdate:
    conversation: FakeConversation


@dataclass
class FakeProviderClient:
    user: FakeUser = field(default_factory=lambda: FakeUser("alice"))
    conversations: dict[str, FakeConversation] = field(default_factory=dict)
    fail: set[str] = field(default_factory=set)
    token: str | None = None
    listeners: dict[str, list[Callable[[Any], Any]]] = field(default_factory=dict)
    created: list[FakeConversation] = field(default_factory=list)
    is_shut_down: bool = False

    def add_conversation(self, conversation: FakeConversation) -> FakeConversation:
        self.conversations[conversation.sid] = conversation
        return conversation

    async def get_conversation_by_sid(self, sid: str) -> FakeConversation:
        if "get_conversation_by_sid" in self.fail or sid not in self.conversations:
            raise ProviderFailure(f"conversation {sid} not found")
        return self.conversations[sid]

    async def create_conversation(self, *, friendly_name: str, unique_name: str) -> FakeConversation:
        if "create_conversation" in self.fail:
            raise ProviderFailure("create failed")
        conv = FakeConversation(
            sid=f"CH{next(_sids)}",
            unique_name=unique_name,
            friendly_name=friendly_name,
        )
        self.created.append(conv)
        return self.add_conversation(conv)

    async def get_subscribed_conversations(self) -> list[FakeConversation]:
        if "get_subscribed_conversations" in self.fail:
            raise ProviderFailure("subscribed conversations unavailable")
        return list(self.conversations.values())

    async def update_token(self, token: str) -> None:
        self.token = token

    async def shutdown(self) -> None:
        self.is_shut_down = True

    def on(self, event: str, listener: Callable[[Any], Any]) -> None:
        self.listeners.setdefault(event, []).append(listener)

    def off(self, event: str, listener: Callable[[Any], Any]) -> None:
        if listener in self.listeners.get(event, []):
            self.listeners[event].remove(listener)

    def emit(self, event: str, payload: Any = None) -> None:
        for listener in list(self.listeners.get(event, [])):
            listener(payload)


@dataclass
class FakeDirectory:
    users: list[DirectoryUser] = field(default_factory=list)
    error: Exception | None = None

    async def list_users(self) -> list[DirectoryUser]:
        if self.error is not None:
            raise self.error
        return list(self.users)


@dataclass
class FakeNavigator:
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    fail: bool = False

    def navigate(self, screen: str, params: dict[str, Any]) -> None:
        if self.fail:
            raise RuntimeError("navigator not mounted")
        self.calls.append((screen, params))


@dataclass
class FakeRemoteMessage:
    data: dict[str, Any] | None = None
    title: str | None = None
    body: str | None = None


@dataclass
class FakePush:
    initial: FakeRemoteMessage | None = None
    foreground_handlers: list[Any] = field(default_factory=list)
    opened_handlers: list[Any] = field(default_factory=list)
    displayed: list[tuple[str | None, str | None]] = field(default_factory=list)

    def on_message(self, handler: Any) -> Callable[[], None]:
        self.foreground_handlers.append(handler)
        return lambda: self.foreground_handlers.remove(handler)

    def on_notification_opened_app(self, handler: Any) -> Callable[[], None]:
        self.opened_handlers.append(handler)
        return lambda: self.opened_handlers.remove(handler)

    async def get_initial_notification(self) -> FakeRemoteMessage | None:
        return self.initial

    async def display_notification(self, title: str | None, body: str | None) -> None:
        self.displayed.append((title, body))


@dataclass
class FakeClock:
    current: datetime = T0

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@dataclass
class FakeCredentials:
    token: str | None = "jwt-token"

    async def get_token(self) -> str | None:
        return self.token


def make_conversation(
    sid: str,
    *,
    participants: tuple[str, ...] = ("alice", "bob"),
    is_group: bool = False,
    last_at: datetime | None = None,
    created_at: datetime = T0,
    friendly_name: str | None = None,
) -> Conversation:
    last = None
    if last_at is not None:
        last = LastMessage(body="hi", author=participants[-1], date_created=last_at)
    return Conversation(
        sid=sid,
        unique_name=f"group-{sid}" if is_group else f"chat-{sid}",
        is_group=is_group,
        display_name=friendly_name or ", ".join(p for p in participants if p != "alice"),
        participants=participants,
        friendly_name=friendly_name,
        last_message=last,
        unread_count=0,
        date_created=created_at,
    )


@pytest.fixture
def client() -> FakeProviderClient:
    return FakeProviderClient()


@pytest.fixture
def navigator() -> FakeNavigator:
    return FakeNavigator()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
