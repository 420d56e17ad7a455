"""Shared error types for the audio relay."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AudioBacklogError(Exception):
    """Raised when buffered audio would exceed the pending-bytes bound."""

    pending_bytes: int
    chunk_bytes: int
    limit_bytes: int


__all__ = ["AudioBacklogError"]
