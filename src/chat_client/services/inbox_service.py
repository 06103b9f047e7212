from __future__ import annotations

import asyncio
import logging
import secrets
import string
from datetime import datetime, timezone
from typing import Iterable

from chat_client.application.dto.inbox import (
    CombinedListEntry,
    ConversationEntry,
    InboxSnapshot,
    UserEntry,
)
from chat_client.application.dto.navigation import ChatRoute
from chat_client.application.exceptions import ActionFailedError, ValidationError
from chat_client.application.ports.clock import Clock, SystemClock, epoch_ms
from chat_client.application.ports.directory import DirectoryReader
from chat_client.application.ports.provider import ProviderClient, ProviderConversation
from chat_client.config import settings
from chat_client.domain.entities.conversation import Conversation, LastMessage
from chat_client.domain.entities.directory_user import DirectoryUser
from chat_client.domain.value_objects.enums import MessageType

logger = logging.getLogger(__name__)

MEDIA_PREVIEW = "📎 Media"
NO_MESSAGES_PREVIEW = "No messages yet"
JOINED_STATUS = "joined"

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)
_BASE36 = string.digits + string.ascii_lowercase


def is_group_unique_name(unique_name: str | None) -> bool:
    return bool(unique_name) and unique_name.startswith(settings.GROUP_UNIQUE_NAME_PREFIX)


def covered_identities(conversations: Iterable[Conversation], self_identity: str) -> set[str]:
    """Directory identities that already have a direct conversation with self."""
    covered: set[str] = set()
    for conv in conversations:
        if conv.is_group or len(conv.participants) != 2:
            continue
        if self_identity not in conv.participants:
            continue
        for identity in conv.participants:
            if identity != self_identity:
                covered.add(identity)
    return covered


def _sort_key(entry: CombinedListEntry) -> tuple:
    if isinstance(entry, ConversationEntry):
        ts = entry.conversation.activity_at or _EPOCH
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        # newest first; sid breaks ties so equal timestamps never flicker
        return (0, -ts.timestamp(), entry.conversation.sid)
    return (1, 0.0, entry.user.user_name)


def recompute(
    users: Iterable[DirectoryUser],
    conversations: Iterable[Conversation],
    self_identity: str,
) -> list[CombinedListEntry]:
    """Merge conversations and directory users into one ordered inbox list.

    Pure: the same inputs always give the same list.
    """
    conversations = list(conversations)
    covered = covered_identities(conversations, self_identity)

    combined: list[CombinedListEntry] = [ConversationEntry(conversation=c) for c in conversations]
    combined.extend(
        UserEntry(user=u)
        for u in users
        if u.user_name not in covered and u.user_name != self_identity
    )
    combined.sort(key=_sort_key)
    return combined


def _degraded(raw: ProviderConversation) -> Conversation:
    return Conversation(
        sid=raw.sid,
        unique_name=raw.unique_name or "",
        is_group=False,
        display_name=raw.friendly_name or "Unknown",
        participants=(),
        friendly_name=raw.friendly_name,
        last_message=None,
        unread_count=0,
        date_created=raw.date_created,
    )


async def _unread_count(raw: ProviderConversation) -> int:
    try:
        count = await raw.get_unread_messages_count()
    except Exception:
        logger.debug("Unread count unavailable for %s", raw.sid, exc_info=True)
        return 0
    return max(int(count or 0), 0)


async def enrich_conversation(raw: ProviderConversation, self_identity: str) -> Conversation:
    """Attach participants, last message and unread count to a conversation.

    Never raises: a failing fetch yields a degraded, direct-classified entry.
    """
    try:
        participants = tuple(p.identity for p in await raw.get_participants())
        messages = await raw.get_messages(1)
        unread = await _unread_count(raw)
    except Exception as exc:
        logger.warning("Error fetching conversation details for %s: %s", raw.sid, exc)
        return _degraded(raw)

    last_message = None
    if messages:
        latest = messages[-1]
        body = latest.body or (MEDIA_PREVIEW if latest.type == MessageType.MEDIA else "")
        last_message = LastMessage(
            body=body, author=latest.author, date_created=latest.date_created,
        )

    is_group = is_group_unique_name(raw.unique_name)
    if is_group:
        display_name = raw.friendly_name or ""
    else:
        display_name = ", ".join(p for p in participants if p != self_identity)

    return Conversation(
        sid=raw.sid,
        unique_name=raw.unique_name or "",
        is_group=is_group,
        display_name=display_name,
        participants=participants,
        friendly_name=raw.friendly_name,
        last_message=last_message,
        unread_count=unread,
        date_created=raw.date_created,
    )


async def fetch_conversations(client: ProviderClient) -> list[Conversation]:
    self_identity = client.user.identity
    subscribed = await client.get_subscribed_conversations()
    return list(
        await asyncio.gather(*(enrich_conversation(c, self_identity) for c in subscribed))
    )


async def load_inbox(client: ProviderClient, directory: DirectoryReader) -> InboxSnapshot:
    """Fetch both inbox sources concurrently and merge them.

    A failure in one source leaves the other's data intact.
    """
    users_result, convs_result = await asyncio.gather(
        directory.list_users(),
        fetch_conversations(client),
        return_exceptions=True,
    )

    directory_error = None
    if isinstance(users_result, BaseException):
        logger.error("Error fetching users: %s", users_result)
        directory_error = str(users_result) or type(users_result).__name__
        users_result = []

    conversations_error = None
    if isinstance(convs_result, BaseException):
        logger.error("Error fetching conversations: %s", convs_result)
        conversations_error = str(convs_result) or type(convs_result).__name__
        convs_result = []

    return InboxSnapshot(
        entries=recompute(users_result, convs_result, client.user.identity),
        users=list(users_result),
        conversations=list(convs_result),
        directory_error=directory_error,
        conversations_error=conversations_error,
    )


def route_for_conversation(conversation: Conversation, self_identity: str) -> ChatRoute:
    if conversation.is_group:
        return ChatRoute.group(
            conversation.sid,
            conversation.friendly_name or conversation.display_name,
            list(conversation.participants),
        )
    other = next((p for p in conversation.participants if p != self_identity), None)
    return ChatRoute.direct(conversation.sid, other or conversation.display_name)


def route_for_entry(entry: ConversationEntry, self_identity: str) -> ChatRoute:
    return route_for_conversation(entry.conversation, self_identity)


def preview_text(conversation: Conversation, self_identity: str) -> str:
    last = conversation.last_message
    if last is None:
        return NO_MESSAGES_PREVIEW
    if conversation.is_group and last.author != self_identity:
        return f"{last.author}: {last.body}"
    return last.body


async def find_direct_conversation(
    client: ProviderClient, user_name: str,
) -> ProviderConversation | None:
    """Scan subscribed conversations for a joined two-party chat with ``user_name``."""
    self_identity = client.user.identity
    for conv in await client.get_subscribed_conversations():
        if conv.status != JOINED_STATUS:
            continue
        try:
            identities = [p.identity for p in await conv.get_participants()]
        except Exception as exc:
            logger.warning("Error checking participants of %s: %s", conv.sid, exc)
            continue
        if len(identities) == 2 and self_identity in identities and user_name in identities:
            return conv
    return None


def direct_unique_name(self_identity: str, user_name: str, clock: Clock) -> str:
    low, high = sorted((self_identity, user_name))
    return f"{settings.DIRECT_UNIQUE_NAME_PREFIX}{low}-{high}-{epoch_ms(clock)}"


def group_unique_name(clock: Clock) -> str:
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"{settings.GROUP_UNIQUE_NAME_PREFIX}{epoch_ms(clock)}-{suffix}"


async def open_or_create_direct(
    client: ProviderClient,
    user_name: str,
    clock: Clock | None = None,
) -> ChatRoute:
    clock = clock or SystemClock()
    self_identity = client.user.identity
    try:
        conversation = await find_direct_conversation(client, user_name)
        if conversation is None:
            conversation = await client.create_conversation(
                friendly_name=user_name,
                unique_name=direct_unique_name(self_identity, user_name, clock),
            )
            await conversation.add(user_name)
            await conversation.add(self_identity)
            logger.info("Created direct conversation %s with %s", conversation.sid, user_name)
    except Exception as exc:
        logger.error("Error opening conversation with %s: %s", user_name, exc)
        raise ActionFailedError("Failed to open chat") from exc

    return ChatRoute.direct(conversation.sid, user_name)


async def create_group(
    client: ProviderClient,
    name: str,
    members: list[str],
    clock: Clock | None = None,
) -> ChatRoute:
    name = name.strip()
    if not name:
        raise ValidationError("Enter a group name")
    if len(members) < 2:
        raise ValidationError("Select at least 2 members")

    clock = clock or SystemClock()
    self_identity = client.user.identity
    try:
        conversation = await client.create_conversation(
            friendly_name=name, unique_name=group_unique_name(clock),
        )
        for user_name in members:
            try:
                await conversation.add(user_name)
            except Exception as exc:
                logger.warning("Error adding user %s: %s", user_name, exc)
        await conversation.add(self_identity)
    except Exception as exc:
        logger.error("Error creating group %r: %s", name, exc)
        raise ActionFailedError("Failed to create group") from exc

    logger.info("Created group %s (%s)", conversation.sid, name)
    return ChatRoute.group(conversation.sid, name, [*members, self_identity])
