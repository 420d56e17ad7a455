from audio_relay.state import SessionState

from .bridge import RelayBridge
from .session import RelaySession

__all__ = ["RelayBridge", "RelaySession", "SessionState"]
