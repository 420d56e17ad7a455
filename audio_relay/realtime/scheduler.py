"""Periodic commit task owned by a relay session."""

from __future__ import annotations

import asyncio
import logging
import contextlib
from collections.abc import Callable, Awaitable

logger = logging.getLogger(__name__)

TickFn = Callable[[], Awaitable[None]]


class CommitScheduler:
    def __init__(self, tick: TickFn, *, interval_s: float) -> None:
        self._tick = tick
        self._interval_s = float(interval_s)
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None
        self.ticks: int = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self._loop())
        return self._task

    async def stop(self) -> None:
        self._stop_event.set()
        if self._task is None:
            return
        if self._task is asyncio.current_task():
            # Stopped from inside a tick; the loop exits on its own.
            return
        self._task.cancel()
        # A task cancelled before its first step never reaches the loop's handler.
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await self._task
        self._task = None

    async def _loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                await asyncio.sleep(self._interval_s)
                if self._stop_event.is_set():
                    break
                self.ticks += 1
                try:
                    await self._tick()
                except asyncio.CancelledError:
                    raise
                except Exception:
                    logger.exception("commit tick failed")
        except asyncio.CancelledError:
            return


__all__ = ["CommitScheduler"]
