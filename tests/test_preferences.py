"""
Tests for settings storage and the configuration derived from it.

Tests cover:
- Defaults on a fresh database
- Save/load round trip and persistence across connections
- Fallback for malformed values
- Session and HTTP configuration read from the same table
"""

from src.core.catalog_manager import auto_refresh_interval_from_settings
from src.core.database import DatabaseManager
from src.core.dto.settings import SettingsDTO
from src.core.http_client import create_http_client_from_settings
from src.core.preferences import PreferenceStore
from src.core.session_manager import create_session_config_from_settings


def _store(tmp_path):
    db = DatabaseManager(tmp_path / "settings.db")
    return db, PreferenceStore(db)


def test_fresh_database_yields_defaults(tmp_path) -> None:
    _, store = _store(tmp_path)

    assert store.load() == SettingsDTO()


def test_saved_settings_survive_reconnect(tmp_path) -> None:
    db, store = _store(tmp_path)
    store.save(SettingsDTO(server_port=9000, auto_play=False, loop_playback=True, default_volume=25))
    db.close()

    reopened = PreferenceStore(DatabaseManager(tmp_path / "settings.db"))

    assert reopened.load() == SettingsDTO(
        server_port=9000, auto_play=False, loop_playback=True, default_volume=25,
    )


def test_booleans_are_stored_as_words(tmp_path) -> None:
    db, store = _store(tmp_path)

    store.save_setting("auto_play", False)

    assert db.get_config("media_server_auto_play") == "false"


def test_malformed_values_fall_back(tmp_path) -> None:
    db, store = _store(tmp_path)
    db.set_config("media_server_server_port", "not-a-port")
    db.set_config("media_server_default_volume", "250")

    settings = store.load()

    assert settings.server_port == 8080
    assert settings.default_volume == 100


def test_in_memory_database_is_supported() -> None:
    store = PreferenceStore(DatabaseManager(":memory:"))

    assert store.load().default_volume == 80


def test_session_config_from_settings(tmp_path) -> None:
    db, _ = _store(tmp_path)
    db.set_config("hls_poll_max_attempts", "5")
    db.set_config("hls_poll_interval_ms", "250")

    config = create_session_config_from_settings(db)

    assert config.max_attempts == 5
    assert config.poll_interval == 0.25


def test_session_config_defaults(tmp_path) -> None:
    db, _ = _store(tmp_path)

    config = create_session_config_from_settings(db)

    assert config.max_attempts == 30
    assert config.poll_interval == 2.0


def test_http_client_from_settings(tmp_path) -> None:
    db, store = _store(tmp_path)
    db.set_config("server_host", "media.local")
    store.save_setting("server_port", 9090)

    client = create_http_client_from_settings(db)

    assert str(client.config.base_url) == "http://media.local:9090"


def test_auto_refresh_interval_from_settings(tmp_path) -> None:
    db, _ = _store(tmp_path)

    assert auto_refresh_interval_from_settings(db) == 300

    db.set_config("catalog_auto_refresh_s", "60")
    assert auto_refresh_interval_from_settings(db) == 60

    db.set_config("catalog_auto_refresh_s", "every five minutes")
    assert auto_refresh_interval_from_settings(db) == 300

    db.set_config("catalog_auto_refresh_s", "0")
    assert auto_refresh_interval_from_settings(db) == 300
