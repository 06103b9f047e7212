from __future__ import annotations

from typing import Protocol

from chat_client.domain.entities.directory_user import DirectoryUser


class DirectoryReader(Protocol):
    async def list_users(self) -> list[DirectoryUser]: ...
