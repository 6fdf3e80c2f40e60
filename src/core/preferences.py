from __future__ import annotations

import logging

from src.core.database import DatabaseManager
from src.core.dto.settings import SettingsDTO

logger = logging.getLogger(__name__)

KEY_PREFIX = "media_server_"


class PreferenceStore:
    """
    Typed access to the user's playback preferences.

    Values live as strings in the settings database under the
    ``media_server_`` prefix; reads fall back to SettingsDTO defaults.
    """

    def __init__(self, db: DatabaseManager):
        self._db = db
        if self._db.conn is None:
            self._db.connect()

    def _get(self, key: str, default: str) -> str:
        value = self._db.get_config(f"{KEY_PREFIX}{key}", None)
        return default if value in (None, "") else str(value)

    def load(self) -> SettingsDTO:
        defaults = SettingsDTO()

        try:
            port = int(self._get("server_port", str(defaults.server_port)))
        except ValueError:
            port = defaults.server_port

        try:
            volume = int(self._get("default_volume", str(defaults.default_volume)))
        except ValueError:
            volume = defaults.default_volume

        return SettingsDTO(
            server_port=port,
            auto_play=self._get("auto_play", "true") == "true",
            loop_playback=self._get("loop_playback", "false") == "true",
            default_volume=max(0, min(100, volume)),
        )

    def save(self, settings: SettingsDTO) -> None:
        self.save_setting("server_port", settings.server_port)
        self.save_setting("auto_play", settings.auto_play)
        self.save_setting("loop_playback", settings.loop_playback)
        self.save_setting("default_volume", settings.default_volume)

    def save_setting(self, key: str, value) -> None:
        if isinstance(value, bool):
            value = "true" if value else "false"
        self._db.set_config(f"{KEY_PREFIX}{key}", value)
        logger.info(f"Setting saved: {key}={value}")
