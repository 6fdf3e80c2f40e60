from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class SessionState(str, Enum):
    CREATED = "created"
    POLLING = "polling"
    READY = "ready"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionState.READY, SessionState.FAILED, SessionState.TIMED_OUT)


@dataclass(frozen=True)
class PlaybackSessionDTO:
    token: int                  # generation; stale tokens are never applied
    media_id: str
    state: SessionState = SessionState.CREATED
    stream_id: Optional[str] = None
    attempts: int = 0
    error_message: Optional[str] = None
    player_loaded: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    @property
    def severity(self) -> str:
        """How the UI should surface this session: info, warning or error."""
        if self.state is SessionState.FAILED:
            return "error"
        if self.state is SessionState.TIMED_OUT:
            return "warning"
        return "info"

    def advance(self, state: SessionState, **changes) -> "PlaybackSessionDTO":
        return replace(self, state=state, **changes)


@dataclass(frozen=True)
class LegacySessionDTO:
    media_id: str
    session_id: Optional[str]
    stream_url: Optional[str]
    playback_url: str
