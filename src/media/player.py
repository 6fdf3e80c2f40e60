"""
Streaming playback for prepared HLS streams.

PlayerAdapter exposes one load/play/pause/stop/destroy contract over two
kinds of engine:
- MpvEngine: libmpv embedded through python-mpv
- NativeProcessEngine: a system player executable (mpv / ffplay) run as a
  child process
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import signal
import subprocess
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence, Type

from yarl import URL

from src.core.dto.settings import SettingsDTO
from src.core.errors import CapabilityError

logger = logging.getLogger(__name__)

# libmpv may be missing even when python-mpv is installed (OSError on load)
try:
    import mpv  # noqa
    MPV_AVAILABLE = True
except (ImportError, OSError) as e:
    mpv = None
    MPV_AVAILABLE = False
    logger.info(f"libmpv unavailable, library playback disabled: {e}")


def _subprocess_kwargs() -> dict:
    """Get platform-specific subprocess kwargs to hide console windows on Windows."""
    kwargs = {}
    if sys.platform == 'win32':
        kwargs['creationflags'] = subprocess.CREATE_NO_WINDOW
    return kwargs


def hls_playlist_url(base_url: URL, stream_id: str, port: Optional[int] = None) -> str:
    """Playlist served by the media server for a prepared stream."""
    return str(base_url.with_port(port or base_url.port).with_path(f"/hls/{stream_id}/playlist.m3u8"))


@dataclass(frozen=True)
class PlayerOptions:
    autoplay: bool = True
    loop: bool = False
    volume: int = 80
    wid: Optional[int] = None       # native window handle to render into

    @classmethod
    def from_settings(cls, settings: SettingsDTO, wid: Optional[int] = None) -> "PlayerOptions":
        return cls(
            autoplay=settings.auto_play,
            loop=settings.loop_playback,
            volume=settings.default_volume,
            wid=wid,
        )


# --------------------------------------------------
# Engines
# --------------------------------------------------

class StreamingEngine(ABC):
    """One attached stream. Instances are single-use: release() ends them."""

    name = "engine"

    def __init__(self, options: PlayerOptions):
        self.options = options

    @classmethod
    @abstractmethod
    def is_supported(cls) -> bool:
        ...

    @abstractmethod
    def attach(self, url: str) -> None:
        ...

    @abstractmethod
    def play(self) -> None:
        ...

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        """Pause and rewind to the start."""

    @abstractmethod
    def release(self) -> None:
        ...


class MpvEngine(StreamingEngine):
    name = "mpv-library"

    @classmethod
    def is_supported(cls) -> bool:
        return MPV_AVAILABLE

    def __init__(self, options: PlayerOptions):
        super().__init__(options)
        kwargs = dict(
            osc="yes",
            input_default_bindings="yes",
            keep_open="yes",
            hwdec="auto-safe",
            msg_level="all=warn",
            cache="yes",
            demuxer_max_bytes=96 * 1024 * 1024,
            demuxer_max_back_bytes=16 * 1024 * 1024,
            loop_file="inf" if options.loop else "no",
        )
        if options.wid is not None:
            kwargs["wid"] = int(options.wid)
        self._player = mpv.MPV(**kwargs)
        self._player.volume = int(options.volume)  # type: ignore[attr-defined]

    def attach(self, url: str) -> None:
        self._player.play(url)
        # Start paused; the adapter decides on autoplay
        self._player.pause = True  # type: ignore[attr-defined]

    def play(self) -> None:
        self._player.pause = False  # type: ignore[attr-defined]

    def pause(self) -> None:
        self._player.pause = True  # type: ignore[attr-defined]

    def stop(self) -> None:
        self._player.pause = True  # type: ignore[attr-defined]
        try:
            self._player.seek(0, reference="absolute")
        except Exception as e:
            # Nothing demuxed yet, position is already at the start
            logger.debug(f"mpv seek to start skipped: {e}")

    def release(self) -> None:
        self._player.terminate()


class NativeProcessEngine(StreamingEngine):
    name = "native-process"
    CANDIDATES = ("mpv", "ffplay")
    TERMINATE_TIMEOUT_S = 5.0

    @classmethod
    def find_binary(cls) -> Optional[str]:
        for candidate in cls.CANDIDATES:
            path = shutil.which(candidate)
            if path:
                return path
        return None

    @classmethod
    def is_supported(cls) -> bool:
        return cls.find_binary() is not None

    def __init__(self, options: PlayerOptions):
        super().__init__(options)
        self._binary = self.find_binary()
        if self._binary is None:
            raise CapabilityError("No native player executable found")
        self._url: Optional[str] = None
        self._process: Optional[subprocess.Popen] = None
        self._suspended = False
        self._reaper: Optional[asyncio.Future] = None

    def _command(self) -> List[str]:
        if "ffplay" in self._binary.lower():
            cmd = [self._binary, "-hide_banner", "-loglevel", "warning",
                   "-volume", str(self.options.volume)]
            if self.options.loop:
                cmd += ["-loop", "0"]
            return cmd + [self._url]
        cmd = [self._binary, "--force-window=yes", f"--volume={self.options.volume}"]
        if self.options.loop:
            cmd.append("--loop-file=inf")
        if self.options.wid is not None:
            cmd.append(f"--wid={self.options.wid}")
        return cmd + [self._url]

    def _running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def attach(self, url: str) -> None:
        self._url = url

    def play(self) -> None:
        if self._running():
            if self._suspended and hasattr(signal, "SIGCONT"):
                self._process.send_signal(signal.SIGCONT)
                self._suspended = False
            return
        self._process = subprocess.Popen(
            self._command(),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            **_subprocess_kwargs(),
        )
        self._suspended = False
        logger.info(f"Started native player pid={self._process.pid}")

    def pause(self) -> None:
        if not self._running():
            return
        if hasattr(signal, "SIGSTOP"):
            self._process.send_signal(signal.SIGSTOP)
            self._suspended = True
        else:
            logger.warning("Pausing a native player process is not supported on this platform")

    def stop(self) -> None:
        # An external process cannot seek; ending it rewinds the next play()
        if not self._running():
            self._process = None
            return
        if self._suspended and hasattr(signal, "SIGCONT"):
            self._process.send_signal(signal.SIGCONT)
        process, self._process = self._process, None
        self._suspended = False
        process.terminate()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._reap(process)
            return
        # Reaping waits on the child; keep that off the event loop
        self._reaper = loop.run_in_executor(None, self._reap, process)

    def _reap(self, process: subprocess.Popen) -> None:
        try:
            process.wait(timeout=self.TERMINATE_TIMEOUT_S)
        except subprocess.TimeoutExpired:
            logger.warning(f"Native player pid={process.pid} did not exit, killing it")
            process.kill()
            process.wait()

    def release(self) -> None:
        self.stop()


DEFAULT_ENGINES: Sequence[Type[StreamingEngine]] = (MpvEngine, NativeProcessEngine)


# --------------------------------------------------
# Adapter
# --------------------------------------------------

class PlayerAdapter:
    """
    Uniform playback contract over whichever engine this system supports.

    At most one engine is attached at a time; load() releases the previous
    one before attaching the next. Capability problems are reported through
    the return value and ``last_error``, never raised.
    """

    def __init__(
        self,
        base_url: URL,
        *,
        options: Optional[PlayerOptions] = None,
        server_port: Optional[int] = None,
        engines: Sequence[Type[StreamingEngine]] = DEFAULT_ENGINES,
    ):
        self._base_url = base_url
        self._server_port = server_port
        self.options = options or PlayerOptions()
        self._engines = tuple(engines)
        self._engine: Optional[StreamingEngine] = None
        self._destroyed = False
        self.current_stream_id: Optional[str] = None
        self.source_url: Optional[str] = None
        self.last_error: Optional[Exception] = None

    @property
    def engine(self) -> Optional[StreamingEngine]:
        return self._engine

    def _select_engine(self) -> Optional[Type[StreamingEngine]]:
        for engine_cls in self._engines:
            try:
                if engine_cls.is_supported():
                    return engine_cls
            except Exception as e:
                logger.warning(f"Engine probe failed for {engine_cls.name}: {e}")
        return None

    def load(self, stream_id: str) -> bool:
        if self._destroyed:
            self.last_error = CapabilityError("Player has been destroyed")
            logger.error(str(self.last_error))
            return False
        if not stream_id:
            self.last_error = ValueError("Stream ID is required")
            logger.error(str(self.last_error))
            return False

        self._release_engine()

        engine_cls = self._select_engine()
        if engine_cls is None:
            self.last_error = CapabilityError("HLS is not supported on this system")
            logger.error(str(self.last_error))
            return False

        url = hls_playlist_url(self._base_url, stream_id, self._server_port)
        logger.info(f"Loading HLS stream: {url} via {engine_cls.name}")
        try:
            engine = engine_cls(self.options)
            engine.attach(url)
        except Exception as e:
            self.last_error = e
            logger.error(f"Failed to attach {engine_cls.name}: {e}")
            return False

        self._engine = engine
        self.current_stream_id = stream_id
        self.source_url = url
        self.last_error = None

        if self.options.autoplay:
            try:
                engine.play()
            except Exception as e:
                logger.warning(f"Autoplay failed: {e}")
        return True

    def play(self) -> None:
        if self._engine is None:
            logger.warning("play() called with no stream loaded")
            return
        self._engine.play()

    def pause(self) -> None:
        if self._engine is not None:
            self._engine.pause()

    def stop(self) -> None:
        if self._engine is None:
            return
        try:
            self._engine.stop()
        finally:
            self._release_engine()

    def destroy(self) -> None:
        self.stop()
        self.source_url = None
        self.current_stream_id = None
        self.options = PlayerOptions(
            autoplay=self.options.autoplay,
            loop=self.options.loop,
            volume=self.options.volume,
            wid=None,
        )
        self._destroyed = True

    def _release_engine(self) -> None:
        engine, self._engine = self._engine, None
        if engine is None:
            return
        try:
            engine.release()
        except Exception as e:
            logger.warning(f"Releasing {engine.name} failed: {e}")
