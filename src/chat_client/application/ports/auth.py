from __future__ import annotations

from typing import Protocol


class CredentialStore(Protocol):
    """Holds the backend auth token issued at login."""

    async def get_token(self) -> str | None: ...


class ProviderTokenSource(Protocol):
    async def fetch_token(self) -> str: ...
