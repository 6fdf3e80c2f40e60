"""
Settings database for the media server client.
Holds the key/value configuration table and its defaults.
"""
import sqlite3
import logging
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manages SQLite storage for client configuration"""

    VERSION = "1.0.0"

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize database manager

        Args:
            db_path: Path to SQLite database file. Defaults to user data directory.
                     Pass ":memory:" for a throwaway database.
        """
        if db_path is None:
            db_path = Path.home() / ".media-server-client" / "settings.db"

        if str(db_path) != ":memory:":
            db_path = Path(db_path)
            db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db_path = db_path
        self.conn: Optional[sqlite3.Connection] = None

    def connect(self):
        """Establish database connection"""
        self.conn = sqlite3.connect(
            str(self.db_path),
            check_same_thread=False,
            timeout=30.0
        )
        self.conn.row_factory = sqlite3.Row
        self._initialize_schema()

    def _initialize_schema(self):
        """Create database schema if not exists"""
        cursor = self.conn.cursor()

        cursor.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='config'")
        schema_exists = cursor.fetchone() is not None

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS config (
                key TEXT PRIMARY KEY,
                value TEXT,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        self._set_default_config()

        self.conn.commit()

        if not schema_exists:
            logger.info("Database schema initialized")
        else:
            logger.debug("Database schema verified")

    def _set_default_config(self):
        """Set default configuration values"""
        defaults = {
            'app_version': self.VERSION,
            'server_host': 'localhost',
            'media_server_server_port': '8080',
            'media_server_auto_play': 'true',
            'media_server_loop_playback': 'false',
            'media_server_default_volume': '80',
            'hls_poll_max_attempts': '30',
            'hls_poll_interval_ms': '2000',
            'catalog_auto_refresh_s': '300',
        }

        cursor = self.conn.cursor()
        for key, value in defaults.items():
            cursor.execute("""
                INSERT OR IGNORE INTO config (key, value)
                VALUES (?, ?)
            """, (key, value))
        self.conn.commit()

    def get_config(self, key: str, default: Any = None) -> Any:
        """
        Retrieve configuration value

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        cursor = self.conn.cursor()
        cursor.execute("SELECT value FROM config WHERE key = ?", (key,))

        row = cursor.fetchone()
        if row:
            return row['value']
        return default

    def set_config(self, key: str, value: Any):
        """Set configuration value"""
        cursor = self.conn.cursor()
        cursor.execute("""
            INSERT OR REPLACE INTO config (key, value, updated_at)
            VALUES (?, ?, CURRENT_TIMESTAMP)
        """, (key, str(value)))
        self.conn.commit()

    def close(self):
        """Close database connection"""
        if self.conn:
            self.conn.close()
            self.conn = None
