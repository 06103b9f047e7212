from __future__ import annotations

from chat_client.application.ports.provider import ProviderMessage
from chat_client.domain.entities.message import MediaRef, Message
from chat_client.domain.value_objects.enums import MessageType


def message_to_entity(raw: ProviderMessage) -> Message:
    msg_type = MessageType.MEDIA if raw.type == MessageType.MEDIA else MessageType.TEXT
    media = None
    if msg_type == MessageType.MEDIA and raw.media is not None:
        media = MediaRef(
            id=raw.sid,
            content_type=raw.media.content_type or "",
            filename=raw.media.filename,
        )
    return Message(
        sid=raw.sid,
        author=raw.author,
        body=raw.body,
        type=msg_type,
        media=media,
        date_created=raw.date_created,
        index=raw.index,
    )
