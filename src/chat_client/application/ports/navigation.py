from __future__ import annotations

from typing import Any, Protocol


class Navigator(Protocol):
    def navigate(self, screen: str, params: dict[str, Any]) -> None: ...
