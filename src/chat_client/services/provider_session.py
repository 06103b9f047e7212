"""Process-wide handle to the messaging provider client.

Built once after login from a freshly fetched provider token, refreshed when
the provider announces token expiry, and torn down on logout.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

from chat_client.application.exceptions import ClientNotInitializedError, TokenFetchError
from chat_client.application.ports.auth import ProviderTokenSource
from chat_client.application.ports.provider import ClientFactory, ProviderClient
from chat_client.domain.value_objects.enums import ProviderEvent

logger = logging.getLogger(__name__)


class ProviderSession:
    def __init__(self, tokens: ProviderTokenSource, client_factory: ClientFactory) -> None:
        self._tokens = tokens
        self._client_factory = client_factory
        self._client: ProviderClient | None = None
        self._lock = asyncio.Lock()
        self._refresh_task: asyncio.Task[None] | None = None

    @property
    def initialized(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> ProviderClient:
        if self._client is None:
            raise ClientNotInitializedError("Provider client not initialized")
        return self._client

    async def initialize(self) -> ProviderClient:
        async with self._lock:
            if self._client is not None:
                return self._client
            token = await self._tokens.fetch_token()
            if not token:
                raise TokenFetchError("Failed to fetch provider token")
            client = self._client_factory(token)
            client.on(ProviderEvent.TOKEN_ABOUT_TO_EXPIRE, self._on_token_expiring)
            self._client = client
            logger.info("Provider client initialized for %s", client.user.identity)
            return client

    async def refresh_token(self) -> None:
        client = self.client
        token = await self._tokens.fetch_token()
        await client.update_token(token)
        logger.info("Provider token refreshed")

    def _on_token_expiring(self, _payload: Any = None) -> None:
        if self._refresh_task is not None and not self._refresh_task.done():
            return
        self._refresh_task = asyncio.create_task(
            self._safe_refresh(), name="provider-token-refresh",
        )

    async def _safe_refresh(self) -> None:
        try:
            await self.refresh_token()
        except Exception:
            logger.exception("Provider token refresh failed")

    async def shutdown(self) -> None:
        async with self._lock:
            client, self._client = self._client, None
        if self._refresh_task is not None and not self._refresh_task.done():
            self._refresh_task.cancel()
        self._refresh_task = None
        if client is None:
            return
        client.off(ProviderEvent.TOKEN_ABOUT_TO_EXPIRE, self._on_token_expiring)
        try:
            await client.shutdown()
        finally:
            logger.info("Provider client shut down")


_session: ProviderSession | None = None


def configure_session(tokens: ProviderTokenSource, client_factory: ClientFactory) -> ProviderSession:
    global _session  # noqa: PLW0603
    _session = ProviderSession(tokens, client_factory)
    return _session


def get_session() -> ProviderSession:
    if _session is None:
        raise ClientNotInitializedError("Provider session not configured")
    return _session
