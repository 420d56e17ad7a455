"""Per-session identifiers and relay counters."""

from __future__ import annotations

import time
import uuid
from dataclasses import field, dataclass


@dataclass(slots=True)
class SessionState:
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: float = field(default_factory=time.monotonic)
    frames_received: int = 0
    frames_rejected: int = 0
    bytes_forwarded: int = 0
    appends_sent: int = 0
    commits_sent: int = 0
    responses_requested: int = 0
    transcripts_forwarded: int = 0
    upstream_errors: int = 0

    def summary(self) -> dict[str, float | int | str]:
        return {
            "session_id": self.session_id,
            "duration_s": round(time.monotonic() - self.created_at, 3),
            "frames_received": self.frames_received,
            "frames_rejected": self.frames_rejected,
            "bytes_forwarded": self.bytes_forwarded,
            "appends_sent": self.appends_sent,
            "commits_sent": self.commits_sent,
            "responses_requested": self.responses_requested,
            "transcripts_forwarded": self.transcripts_forwarded,
            "upstream_errors": self.upstream_errors,
        }


__all__ = ["SessionState"]
