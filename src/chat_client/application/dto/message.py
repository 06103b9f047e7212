from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MediaUpload:
    content_type: str
    filename: str
    media: bytes
