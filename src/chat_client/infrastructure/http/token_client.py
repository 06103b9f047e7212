from __future__ import annotations

import logging

import httpx
import pydantic

from chat_client.application.exceptions import TokenFetchError
from chat_client.config import settings
from chat_client.infrastructure.http.base import AuthorizedHttpClient
from chat_client.infrastructure.http.schemas import ProviderTokenResponse

logger = logging.getLogger(__name__)


class HttpProviderTokenClient(AuthorizedHttpClient):
    """Implements application.ports.auth.ProviderTokenSource."""

    async def fetch_token(self) -> str:
        try:
            response = await self._get(settings.PROVIDER_TOKEN_PATH)
        except httpx.HTTPError as exc:
            raise TokenFetchError(f"Token request failed: {exc}") from exc
        if response.is_error:
            raise TokenFetchError(f"Failed to fetch provider token (HTTP {response.status_code})")
        try:
            body = ProviderTokenResponse.model_validate(response.json())
        except (ValueError, pydantic.ValidationError) as exc:
            raise TokenFetchError("Provider token missing from response") from exc
        logger.debug("Fetched provider token")
        return body.token
