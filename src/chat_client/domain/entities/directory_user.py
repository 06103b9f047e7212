from __future__ import annotations

from dataclasses import dataclass

from chat_client.domain.value_objects.ids import Identity


@dataclass(frozen=True, slots=True)
class DirectoryUser:
    user_name: Identity  # provider identity
    email: str | None = None
    is_online: bool | None = None
    id: str | None = None
