from __future__ import annotations

from typing import Union

from chat_client.domain.events.conversation_renamed import ConversationRenamed
from chat_client.domain.events.message_added import MessageAdded
from chat_client.domain.events.participant_changed import (
    ParticipantJoined,
    ParticipantLeft,
)

ThreadEvent = Union[MessageAdded, ParticipantJoined, ParticipantLeft, ConversationRenamed]
