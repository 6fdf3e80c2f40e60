"""
Qt signal bridges for the client core.

The core publishes through plain subscriptions; these QObjects re-emit
those updates as Qt signals so widgets can connect to them directly.
"""
import logging

from PyQt6.QtCore import QObject, pyqtSignal

from src.core.catalog_manager import CatalogManager
from src.core.dto.session import PlaybackSessionDTO, SessionState
from src.core.session_manager import StreamSessionManager

logger = logging.getLogger(__name__)


class SessionSignals(QObject):
    changed = pyqtSignal(object)        # PlaybackSessionDTO, every update
    ready = pyqtSignal(str)             # stream_id
    failed = pyqtSignal(str)            # error message
    timed_out = pyqtSignal(str)         # warning message

    def __init__(self, sessions: StreamSessionManager, parent=None):
        super().__init__(parent)
        self._unsubscribe = sessions.subscribe(self._on_session)

    def _on_session(self, session: PlaybackSessionDTO) -> None:
        self.changed.emit(session)
        if session.state is SessionState.READY:
            self.ready.emit(session.stream_id or "")
        elif session.state is SessionState.FAILED:
            self.failed.emit(session.error_message or "")
        elif session.state is SessionState.TIMED_OUT:
            self.timed_out.emit(session.error_message or "")

    def disconnect_core(self) -> None:
        self._unsubscribe()


class CatalogSignals(QObject):
    snapshot_changed = pyqtSignal(object)  # CatalogSnapshotDTO

    def __init__(self, catalog: CatalogManager, parent=None):
        super().__init__(parent)
        self._unsubscribe = catalog.subscribe(self.snapshot_changed.emit)

    def disconnect_core(self) -> None:
        self._unsubscribe()
