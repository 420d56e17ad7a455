"""Pending downstream audio awaiting an open upstream socket."""

from __future__ import annotations

import logging
from collections import deque

from audio_relay.errors import AudioBacklogError

logger = logging.getLogger(__name__)


class FrameBuffer:
    """Ordered store of opaque audio chunks plus the pending-commit flag.

    Chunks accumulate while the upstream socket is not open and are drained as a
    single contiguous byte string once it is. ``mark_appended`` records that a
    drained segment reached the peer; ``take_commit`` hands that flag to the
    commit scheduler.

    ``max_pending_bytes`` bounds the accumulation (0 disables the bound).
    """

    def __init__(self, *, max_pending_bytes: int = 0) -> None:
        self._chunks: deque[bytes] = deque()
        self._pending_bytes: int = 0
        self._max_pending_bytes = max(0, int(max_pending_bytes))
        self._commit_pending: bool = False

    @property
    def pending_bytes(self) -> int:
        return self._pending_bytes

    @property
    def commit_pending(self) -> bool:
        return self._commit_pending

    def __len__(self) -> int:
        return len(self._chunks)

    def append(self, chunk: object) -> bool:
        if not isinstance(chunk, (bytes, bytearray)):
            logger.warning("frame buffer: ignoring non-binary chunk of type %s", type(chunk).__name__)
            return False

        size = len(chunk)
        if self._max_pending_bytes > 0 and self._pending_bytes + size > self._max_pending_bytes:
            raise AudioBacklogError(
                pending_bytes=self._pending_bytes,
                chunk_bytes=size,
                limit_bytes=self._max_pending_bytes,
            )

        self._chunks.append(bytes(chunk))
        self._pending_bytes += size
        return True

    def flush_if_ready(self, upstream_open: bool) -> bytes | None:
        if not upstream_open or not self._chunks:
            return None

        data = b"".join(self._chunks)
        self._chunks.clear()
        self._pending_bytes = 0
        return data

    def mark_appended(self) -> None:
        self._commit_pending = True

    def take_commit(self) -> bool:
        pending = self._commit_pending
        self._commit_pending = False
        return pending

    def clear(self) -> None:
        self._chunks.clear()
        self._pending_bytes = 0
        self._commit_pending = False


__all__ = ["FrameBuffer"]
