from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from src.core.api.contracts.streams import StreamsAPIClient
from src.core.dto.media import MediaRecordDTO
from src.core.dto.session import LegacySessionDTO, PlaybackSessionDTO, SessionState
from src.core.errors import CreationFailed, PreparationError, PreparationTimeout

logger = logging.getLogger(__name__)

SessionListener = Callable[[PlaybackSessionDTO], None]

DEFAULT_MAX_ATTEMPTS = 30
DEFAULT_POLL_INTERVAL_S = 2.0


@dataclass(frozen=True)
class SessionConfig:
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    poll_interval: float = DEFAULT_POLL_INTERVAL_S    # seconds


def create_session_config_from_settings(db_manager) -> SessionConfig:
    try:
        max_attempts = int(db_manager.get_config("hls_poll_max_attempts", DEFAULT_MAX_ATTEMPTS))
    except (TypeError, ValueError):
        max_attempts = DEFAULT_MAX_ATTEMPTS

    try:
        interval_ms = int(db_manager.get_config("hls_poll_interval_ms", int(DEFAULT_POLL_INTERVAL_S * 1000)))
    except (TypeError, ValueError):
        interval_ms = int(DEFAULT_POLL_INTERVAL_S * 1000)

    return SessionConfig(max_attempts=max(1, max_attempts), poll_interval=max(0, interval_ms) / 1000)


class _LiveSession:
    """Bookkeeping for the one session allowed to make transitions."""

    def __init__(self, session: PlaybackSessionDTO):
        self.session = session
        self.cancelled = asyncio.Event()


class StreamSessionManager:
    """
    Drives HLS stream preparation for one playback request at a time.

    State machine:
        CREATED -> POLLING -> READY | FAILED | TIMED_OUT

    Starting a new playback supersedes the live session. The superseded
    loop notices after its next suspension point and exits without
    touching state; any response it was awaiting is discarded.
    """

    def __init__(
        self,
        client: StreamsAPIClient,
        player=None,
        *,
        config: Optional[SessionConfig] = None,
        server_port: Optional[int] = None,
    ):
        self._client = client
        self._player = player
        self.config = config or SessionConfig()
        self._server_port = server_port
        self._generation = 0
        self._live: Optional[_LiveSession] = None
        self._listeners: List[SessionListener] = []

    # ---------------------------------------------------------
    # Observation
    # ---------------------------------------------------------

    @property
    def current(self) -> Optional[PlaybackSessionDTO]:
        return self._live.session if self._live else None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _is_live(self, token: int) -> bool:
        return self._live is not None and self._live.session.token == token

    def _transition(self, token: int, session: PlaybackSessionDTO) -> bool:
        """Apply a new session value if its token is still live."""
        if not self._is_live(token):
            logger.debug(f"Discarding stale update for session {token}")
            return False
        self._live.session = session
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception:
                logger.exception("Session listener failed")
        return True

    # ---------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------

    def cancel(self) -> None:
        """Supersede the live session without starting a new one."""
        if self._live is not None and not self._live.session.is_terminal:
            logger.info(f"Cancelling session {self._live.session.token} ({self._live.session.media_id})")
            self._live.cancelled.set()
        self._generation += 1
        self._live = None

    async def start_playback(self, media: MediaRecordDTO) -> PlaybackSessionDTO:
        """
        Prepare and hand off a stream for ``media``.

        Returns the session in its final state. A superseded session is
        returned as it was when superseded (non-terminal).
        """
        # Supersession is linearized here, before the first await.
        self.cancel()
        token = self._generation
        live = _LiveSession(PlaybackSessionDTO(token=token, media_id=media.id))
        self._live = live
        self._transition(token, live.session)

        # 1. create
        try:
            created = await self._client.create_hls_stream(media.id)
        except Exception as e:
            logger.error(f"Stream creation request failed for {media.id}: {e}")
            created = {"success": False}

        if not self._is_live(token):
            return live.session

        if not created.get("success"):
            err = CreationFailed()
            self._transition(token, live.session.advance(SessionState.FAILED, error_message=str(err)))
            logger.error(f"Failed to create HLS stream for {media.id}")
            return live.session

        # 2. poll
        stream_id = created["stream_id"]
        self._transition(token, live.session.advance(SessionState.POLLING, stream_id=stream_id, attempts=0))
        logger.info(f"Preparing stream {stream_id} for {media.filename or media.id}")

        return await self._poll(token, live, stream_id)

    async def _poll(self, token: int, live: _LiveSession, stream_id: str) -> PlaybackSessionDTO:
        attempts = 0
        while attempts < self.config.max_attempts:
            if await self._wait_or_cancelled(live):
                return live.session
            if not self._is_live(token):
                return live.session

            try:
                status = await self._client.get_hls_status(stream_id)
            except Exception as e:
                if not self._is_live(token):
                    return live.session
                logger.error(f"Status poll failed for stream {stream_id}: {e}")
                self._transition(
                    token,
                    live.session.advance(SessionState.FAILED, attempts=attempts + 1, error_message=str(e)),
                )
                return live.session

            if not self._is_live(token):
                return live.session

            attempts += 1
            state = status.get("status")

            if state == "ready":
                logger.info(f"Stream {stream_id} ready after {attempts} poll(s)")
                loaded = self._handoff(stream_id)
                self._transition(
                    token,
                    live.session.advance(SessionState.READY, attempts=attempts, player_loaded=loaded),
                )
                return live.session

            if state == "error":
                err = PreparationError(status.get("error_message") or "stream preparation failed")
                self._transition(
                    token,
                    live.session.advance(SessionState.FAILED, attempts=attempts, error_message=err.message),
                )
                logger.error(f"Stream error: {err.message}")
                return live.session

            self._transition(token, live.session.advance(SessionState.POLLING, attempts=attempts))

        err = PreparationTimeout("Stream preparation taking longer than expected")
        self._transition(token, live.session.advance(SessionState.TIMED_OUT, error_message=str(err)))
        logger.warning(f"Stream {stream_id}: {err} ({attempts} polls)")
        return live.session

    async def _wait_or_cancelled(self, live: _LiveSession) -> bool:
        """Sleep one poll interval; True if the session was cancelled meanwhile."""
        if live.cancelled.is_set():
            return True
        try:
            await asyncio.wait_for(live.cancelled.wait(), timeout=self.config.poll_interval)
        except asyncio.TimeoutError:
            return False
        return True

    def _handoff(self, stream_id: str) -> bool:
        if self._player is None:
            return False
        loaded = bool(self._player.load(stream_id))
        if not loaded:
            logger.error(f"Player could not load stream {stream_id}: {self._player.last_error}")
        return loaded

    # ---------------------------------------------------------
    # Legacy direct session
    # ---------------------------------------------------------

    async def open_legacy_session(self, media: MediaRecordDTO) -> LegacySessionDTO:
        """
        Request a direct playback session (no HLS preparation).

        Raises CreationFailed if the server refuses; transport errors propagate.
        """
        data = await self._client.create_session(media.id, media.filename)
        if not data.get("success"):
            raise CreationFailed("Failed to create playback session")

        session_id = data.get("session_id")
        stream_url = data.get("stream_url")
        if stream_url:
            playback_url = stream_url
        else:
            base = self._client.base_url
            port = self._server_port or base.port
            playback_url = str(base.with_port(port).with_path(f"/stream/{session_id}"))

        logger.info(f"Playback session created: {playback_url}")
        return LegacySessionDTO(
            media_id=media.id,
            session_id=session_id,
            stream_url=stream_url,
            playback_url=playback_url,
        )
