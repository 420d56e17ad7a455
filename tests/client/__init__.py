"""WebSocket client used by the runnable scripts under tests/."""

from __future__ import annotations

from .relay import RelayClient, StreamResult

__all__ = ["RelayClient", "StreamResult"]
