from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from chat_client.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class MessageAdded:
    message: Message
    source: Any = field(default=None, compare=False, repr=False)  # provider message
