"""Response lifecycle tracking for one upstream connection."""

from __future__ import annotations

import logging

from .status import ResponseState

logger = logging.getLogger(__name__)


class ResponseTracker:
    """At most one ``response.create`` may be outstanding per upstream socket.

    ``begin`` is the only way into ACTIVE and reports whether the caller owns the
    new request. ``finish`` always lands in IDLE.
    """

    def __init__(self) -> None:
        self._state = ResponseState.IDLE

    @property
    def state(self) -> ResponseState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is ResponseState.ACTIVE

    def begin(self) -> bool:
        if self._state is ResponseState.ACTIVE:
            logger.debug("response tracker: request already in flight; skipping")
            return False
        self._state = ResponseState.ACTIVE
        return True

    def finish(self) -> None:
        self._state = ResponseState.IDLE


__all__ = ["ResponseTracker"]
