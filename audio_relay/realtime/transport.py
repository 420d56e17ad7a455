"""Interface a relay session expects from its upstream peer."""

from __future__ import annotations

from typing import Any, Protocol
from collections.abc import AsyncIterator


class Upstream(Protocol):
    @property
    def is_open(self) -> bool: ...

    async def connect(self) -> None: ...

    async def send_event(self, event: dict[str, Any]) -> bool: ...

    def messages(self) -> AsyncIterator[str | bytes]: ...

    async def close(self) -> None: ...


__all__ = ["Upstream"]
