from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Sequence, Type

from src.core.api import ApiTransport, MediaServerClient
from src.core.catalog_manager import CatalogManager
from src.core.database import DatabaseManager
from src.core.http_client import HttpClient, create_http_client_from_settings
from src.core.preferences import PreferenceStore
from src.core.session_manager import StreamSessionManager, create_session_config_from_settings
from src.media.player import DEFAULT_ENGINES, PlayerAdapter, PlayerOptions, StreamingEngine

logger = logging.getLogger(__name__)


class ClientContext:
    """
    Shared client dependencies (settings + transport + managers + player).

    Build one instance for the app lifetime and pass it to consumers;
    nothing here is reachable through a module global.
    """

    def __init__(
        self,
        *,
        db: Optional[DatabaseManager] = None,
        http_client: Optional[HttpClient] = None,
        wid: Optional[int] = None,
        engines: Sequence[Type[StreamingEngine]] = DEFAULT_ENGINES,
    ):
        self.db = db or DatabaseManager()
        if self.db.conn is None:
            self.db.connect()

        self.preferences = PreferenceStore(self.db)
        self.settings = self.preferences.load()

        self._http_client = http_client or create_http_client_from_settings(self.db)
        logger.info(f"Media server: {self._http_client.config.base_url}")

        self.transport = ApiTransport(self._http_client)
        self.client = MediaServerClient(self.transport)

        self.player = PlayerAdapter(
            self.transport.base_url,
            options=PlayerOptions.from_settings(self.settings, wid=wid),
            server_port=self.settings.server_port,
            engines=engines,
        )

        self.catalog = CatalogManager(self.client)
        self.sessions = StreamSessionManager(
            self.client,
            self.player,
            config=create_session_config_from_settings(self.db),
            server_port=self.settings.server_port,
        )

    @classmethod
    def from_path(cls, db_path: Path, **kwargs) -> "ClientContext":
        return cls(db=DatabaseManager(db_path), **kwargs)

    async def server_status(self) -> Any:
        return await self.client.get_status()

    async def close(self) -> None:
        self.catalog.stop_auto_refresh()
        self.sessions.cancel()
        self.player.destroy()
        await self.transport.close()
        self.db.close()
