from __future__ import annotations

from enum import StrEnum


class MessageType(StrEnum):
    TEXT = "text"
    MEDIA = "media"


class ListEntryKind(StrEnum):
    CONVERSATION = "conversation"
    USER = "user"


class MediaKind(StrEnum):
    IMAGE = "image"
    DOCUMENT = "document"
    UNSUPPORTED = "unsupported"


class ThreadState(StrEnum):
    IDLE = "idle"
    BOOTSTRAPPING = "bootstrapping"
    LIVE = "live"
    CLOSED = "closed"


class ProviderEvent(StrEnum):
    """Event names emitted by the messaging provider."""

    MESSAGE_ADDED = "messageAdded"
    PARTICIPANT_JOINED = "participantJoined"
    PARTICIPANT_LEFT = "participantLeft"
    CONVERSATION_UPDATED = "conversationUpdated"
    TOKEN_ABOUT_TO_EXPIRE = "tokenAboutToExpire"
