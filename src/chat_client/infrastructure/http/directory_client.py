from __future__ import annotations

import logging
from typing import Any

import httpx
import pydantic

from chat_client.application.exceptions import DirectoryError
from chat_client.config import settings
from chat_client.domain.entities.directory_user import DirectoryUser
from chat_client.infrastructure.http.base import AuthorizedHttpClient
from chat_client.infrastructure.http.schemas import DirectoryUserSchema

logger = logging.getLogger(__name__)


def parse_directory(data: Any) -> list[DirectoryUser]:
    """Accept a bare array or ``{"users": [...]}``; skip entries without a userName."""
    if isinstance(data, dict):
        data = data.get("users") or []
    if not isinstance(data, list):
        return []

    users: list[DirectoryUser] = []
    for item in data:
        try:
            row = DirectoryUserSchema.model_validate(item)
        except pydantic.ValidationError:
            logger.debug("Skipping malformed directory entry: %r", item)
            continue
        users.append(
            DirectoryUser(
                user_name=row.user_name,
                email=row.email,
                is_online=row.is_online,
                id=row.id,
            )
        )
    return users


class HttpDirectoryClient(AuthorizedHttpClient):
    """Implements application.ports.directory.DirectoryReader."""

    async def list_users(self) -> list[DirectoryUser]:
        try:
            response = await self._get(settings.DIRECTORY_PATH)
        except httpx.HTTPError as exc:
            raise DirectoryError(f"Directory request failed: {exc}") from exc
        if response.is_error:
            raise DirectoryError(f"HTTP {response.status_code}: {response.reason_phrase}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise DirectoryError("Directory returned invalid JSON") from exc
        return parse_directory(payload)
