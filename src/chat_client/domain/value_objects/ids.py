from __future__ import annotations

from typing import NewType

Identity = NewType("Identity", str)
ConversationSid = NewType("ConversationSid", str)
MessageSid = NewType("MessageSid", str)
