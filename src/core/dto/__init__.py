from src.core.dto.media import MediaRecordDTO
from src.core.dto.catalog import CatalogSnapshotDTO, CatalogStatsDTO
from src.core.dto.session import LegacySessionDTO, PlaybackSessionDTO, SessionState
from src.core.dto.settings import SettingsDTO

__all__ = [
    # Catalog
    "MediaRecordDTO",
    "CatalogSnapshotDTO",
    "CatalogStatsDTO",

    # Playback
    "PlaybackSessionDTO",
    "LegacySessionDTO",
    "SessionState",

    # Preferences
    "SettingsDTO",
]
