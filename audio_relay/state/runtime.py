"""Typed runtime state objects for dependency wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from audio_relay.state.settings import AppSettings
    from audio_relay.realtime.bridge import RelayBridge
    from audio_relay.handlers.sessions import SessionRegistry


@dataclass(slots=True)
class RuntimeDeps:
    sessions: SessionRegistry
    relay_bridge: RelayBridge
    settings: AppSettings

    async def shutdown(self) -> None:
        try:
            await self.sessions.close_all()
        except Exception:
            logger.exception("runtime shutdown failed")


__all__ = ["RuntimeDeps"]
