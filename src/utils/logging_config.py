"""
Centralized logging configuration with categorized loggers.

This module provides a flexible logging system with:
- Named categories for different subsystems
- Per-category log level control
- Persistent configuration via the settings database
"""
import logging
from typing import Dict, List, Optional
from pathlib import Path
from logging.handlers import TimedRotatingFileHandler


# Logger categories for different subsystems
class LoggerCategory:
    """Named categories for application loggers"""
    CORE = "core"                  # Context, catalog
    API = "api"                    # Media server client
    NETWORK = "network"            # HTTP session and transport
    SESSION = "session"            # Stream preparation sessions
    PLAYER = "player"              # Playback engines
    SETTINGS = "settings"          # Settings and preferences
    UI = "ui"                      # Qt bridges


# Default log levels for each category
DEFAULT_LOG_LEVELS = {
    LoggerCategory.CORE: logging.INFO,
    LoggerCategory.API: logging.INFO,
    LoggerCategory.NETWORK: logging.INFO,
    LoggerCategory.SESSION: logging.INFO,
    LoggerCategory.PLAYER: logging.INFO,
    LoggerCategory.SETTINGS: logging.WARNING,  # Reduce DB noise
    LoggerCategory.UI: logging.WARNING,
}


# Map module names to categories
MODULE_TO_CATEGORY = {
    # Core
    'src.core': LoggerCategory.CORE,
    'src.core.context': LoggerCategory.CORE,
    'src.core.catalog_manager': LoggerCategory.CORE,

    # API
    'src.core.api': LoggerCategory.API,
    'src.core.api.media_server': LoggerCategory.API,

    # Network
    'src.core.http_client': LoggerCategory.NETWORK,
    'src.core.api.base': LoggerCategory.NETWORK,

    # Sessions
    'src.core.session_manager': LoggerCategory.SESSION,

    # Player
    'src.media': LoggerCategory.PLAYER,
    'src.media.player': LoggerCategory.PLAYER,

    # Settings
    'src.core.database': LoggerCategory.SETTINGS,
    'src.core.preferences': LoggerCategory.SETTINGS,

    # UI
    'src.ui': LoggerCategory.UI,
    'src.ui.session_signals': LoggerCategory.UI,
}


LOG_FILE_NAME = "media_server_client.log"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Third-party loggers that only matter when something is wrong
QUIET_LOGGERS = ('aiohttp', 'asyncio', 'qasync')


def _level_key(category: str) -> str:
    return f'log_level_{category}'


def _parse_level(value, fallback: int) -> int:
    """Level name from the settings table -> logging level, or ``fallback``."""
    level = logging.getLevelName(str(value).upper())
    return level if isinstance(level, int) else fallback


class LoggingManager:
    """
    Per-category log levels on top of one root configuration.

    Levels start from DEFAULT_LOG_LEVELS and are overridden by
    ``log_level_<category>`` rows once a settings database is attached.
    """

    def __init__(self, log_dir: Optional[Path] = None, db_manager=None):
        self.log_dir = log_dir or (Path.home() / ".media-server-client" / "logs")
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.db_manager = db_manager
        self.levels: Dict[str, int] = self._read_levels()

    def _read_levels(self) -> Dict[str, int]:
        if not self.db_manager:
            return dict(DEFAULT_LOG_LEVELS)
        return {
            category: _parse_level(
                self.db_manager.get_config(_level_key(category), logging.getLevelName(default)),
                default,
            )
            for category, default in DEFAULT_LOG_LEVELS.items()
        }

    def _apply_levels(self) -> None:
        for module_name, category in MODULE_TO_CATEGORY.items():
            logging.getLogger(module_name).setLevel(self.levels.get(category, logging.INFO))

    def attach_database(self, db_manager):
        """Switch to the levels stored in ``db_manager`` and apply them"""
        self.db_manager = db_manager
        self.levels = self._read_levels()
        self._apply_levels()

    def set_category_level(self, category: str, level: int):
        """Change one category's level, persisting it when a database is attached"""
        self.levels[category] = level
        if self.db_manager:
            self.db_manager.set_config(_level_key(category), logging.getLevelName(level))
        self._apply_levels()

    def _build_handlers(self) -> List[logging.Handler]:
        formatter = logging.Formatter(LOG_FORMAT)

        # Rotated at midnight, one week kept
        file_handler = TimedRotatingFileHandler(
            self.log_dir / LOG_FILE_NAME,
            when="midnight",
            backupCount=7,
            encoding="utf-8",
        )
        console_handler = logging.StreamHandler()

        handlers: List[logging.Handler] = [file_handler, console_handler]
        for handler in handlers:
            handler.setFormatter(formatter)
        return handlers

    def setup_logging(self, root_level: int = logging.INFO):
        """Replace the root handlers and apply category levels"""
        root_logger = logging.getLogger()
        root_logger.setLevel(root_level)

        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
        for handler in self._build_handlers():
            root_logger.addHandler(handler)

        self._apply_levels()
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def setup_logging(db_manager=None, log_dir: Optional[Path] = None) -> LoggingManager:
    """Setup application logging (convenience function)"""
    manager = LoggingManager(log_dir=log_dir, db_manager=db_manager)
    manager.setup_logging()
    return manager
