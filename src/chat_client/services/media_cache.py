"""Process-wide cache of temporary media URLs, keyed by owning message sid."""
from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from datetime import timedelta
from typing import Awaitable, Callable

from chat_client.application.exceptions import MediaResolutionError
from chat_client.application.ports.clock import Clock, SystemClock
from chat_client.application.ports.provider import ProviderMessage
from chat_client.config import settings
from chat_client.domain.entities.message import MediaRef, ResolvedMediaUrl
from chat_client.domain.value_objects.enums import MediaKind

logger = logging.getLogger(__name__)

UrlFetcher = Callable[[], Awaitable[str]]


def classify_media(content_type: str | None) -> MediaKind:
    if not content_type:
        return MediaKind.UNSUPPORTED
    if content_type.startswith("image/"):
        return MediaKind.IMAGE
    if content_type == "application/pdf":
        return MediaKind.DOCUMENT
    return MediaKind.UNSUPPORTED


class MediaUrlCache:
    """Bounded map of media id -> temporary URL.

    Eviction is FIFO on insertion order; reads do not refresh an entry's
    position. Entries past their approximate expiry count as misses.
    Concurrent misses on one key share a single in-flight fetch.
    """

    def __init__(
        self,
        capacity: int = settings.MEDIA_CACHE_CAPACITY,
        ttl_seconds: int = settings.MEDIA_URL_TTL_SECONDS,
        clock: Clock | None = None,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or SystemClock()
        self._entries: OrderedDict[str, ResolvedMediaUrl] = OrderedDict()
        self._in_flight: dict[str, asyncio.Task[str]] = {}

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, media_id: object) -> bool:
        return media_id in self._entries

    def keys(self) -> list[str]:
        return list(self._entries)

    def get(self, media_id: str) -> str | None:
        entry = self._entries.get(media_id)
        if entry is None:
            return None
        if entry.expires_approximately <= self._clock.now():
            del self._entries[media_id]
            return None
        return entry.url

    def put(self, media_id: str, url: str) -> None:
        # re-resolving an expired key re-inserts it at the tail
        self._entries.pop(media_id, None)
        self._entries[media_id] = ResolvedMediaUrl(
            url=url, expires_approximately=self._clock.now() + self._ttl,
        )
        self.evict_oldest_if_over_capacity()

    def evict_oldest_if_over_capacity(self) -> None:
        while len(self._entries) > self._capacity:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted media url %s", evicted)

    def clear(self) -> None:
        self._entries.clear()

    async def resolve(self, media_ref: MediaRef, fetch: UrlFetcher) -> str:
        cached = self.get(media_ref.id)
        if cached is not None:
            return cached

        task = self._in_flight.get(media_ref.id)
        if task is None:
            task = asyncio.create_task(
                self._fetch(media_ref.id, fetch), name=f"media-url-{media_ref.id}",
            )
            task.add_done_callback(_consume_result)
            self._in_flight[media_ref.id] = task
        # a cancelled caller must not cancel the fetch other callers share
        return await asyncio.shield(task)

    async def _fetch(self, media_id: str, fetch: UrlFetcher) -> str:
        try:
            url = await fetch()
        except Exception as exc:
            logger.warning("Failed to resolve media %s: %s", media_id, exc)
            raise MediaResolutionError(f"Failed to load media {media_id}") from exc
        else:
            self.put(media_id, url)
            return url
        finally:
            self._in_flight.pop(media_id, None)


def _consume_result(task: asyncio.Task[str]) -> None:
    # failures are logged in _fetch; every caller may already be gone
    if not task.cancelled():
        task.exception()


_cache: MediaUrlCache | None = None


def get_media_cache() -> MediaUrlCache:
    global _cache  # noqa: PLW0603
    if _cache is None:
        _cache = MediaUrlCache()
    return _cache


async def resolve_message_media(message: ProviderMessage, cache: MediaUrlCache | None = None) -> str:
    """Temporary URL of a provider message's attachment."""
    media = message.media
    if media is None:
        raise MediaResolutionError(f"Message {message.sid} has no media")
    ref = MediaRef(id=message.sid, content_type=media.content_type or "", filename=media.filename)
    if cache is None:
        cache = get_media_cache()
    return await cache.resolve(ref, media.get_content_temporary_url)
