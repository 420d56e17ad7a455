"""Response lifecycle states."""

from __future__ import annotations

import enum


class ResponseState(enum.Enum):
    IDLE = "idle"
    ACTIVE = "active"


__all__ = ["ResponseState"]
