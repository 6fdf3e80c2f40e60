import logging

from src.core.database import DatabaseManager
from src.utils.logging_config import DEFAULT_LOG_LEVELS, LOG_FILE_NAME, LoggerCategory, LoggingManager


def _db() -> DatabaseManager:
    db = DatabaseManager(":memory:")
    db.connect()
    return db


def test_defaults_without_database(tmp_path) -> None:
    manager = LoggingManager(log_dir=tmp_path)

    assert manager.levels == DEFAULT_LOG_LEVELS


def test_category_level_is_persisted_and_applied(tmp_path) -> None:
    db = _db()
    manager = LoggingManager(log_dir=tmp_path, db_manager=db)

    manager.set_category_level(LoggerCategory.SESSION, logging.DEBUG)

    assert db.get_config("log_level_session") == "DEBUG"
    assert logging.getLogger("src.core.session_manager").level == logging.DEBUG
    assert LoggingManager(log_dir=tmp_path, db_manager=db).levels[LoggerCategory.SESSION] == logging.DEBUG


def test_attach_database_reloads_levels(tmp_path) -> None:
    db = _db()
    db.set_config("log_level_player", "ERROR")
    manager = LoggingManager(log_dir=tmp_path)

    manager.attach_database(db)

    assert manager.levels[LoggerCategory.PLAYER] == logging.ERROR
    assert logging.getLogger("src.media.player").level == logging.ERROR


def test_unknown_level_name_falls_back(tmp_path) -> None:
    db = _db()
    db.set_config("log_level_api", "CHATTY")

    manager = LoggingManager(log_dir=tmp_path, db_manager=db)

    assert manager.levels[LoggerCategory.API] == DEFAULT_LOG_LEVELS[LoggerCategory.API]


def test_setup_installs_file_and_console_handlers(tmp_path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        LoggingManager(log_dir=tmp_path).setup_logging()

        assert len(root.handlers) == 2
        assert (tmp_path / LOG_FILE_NAME).exists()
        assert logging.getLogger("aiohttp").level == logging.WARNING
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            if handler not in saved_handlers:
                handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
