from __future__ import annotations

import httpx

from chat_client.application.ports.auth import CredentialStore
from chat_client.config import settings


class AuthorizedHttpClient:
    """Lazily built ``httpx.AsyncClient`` that sends the stored bearer token."""

    def __init__(
        self,
        credentials: CredentialStore,
        *,
        base_url: str = settings.API_BASE_URL,
        timeout: float = settings.HTTP_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._credentials = credentials
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
        return self._client

    async def _get(self, path: str) -> httpx.Response:
        token = await self._credentials.get_token()
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return await self._ensure_client().get(path, headers=headers)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
