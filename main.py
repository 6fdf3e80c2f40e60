"""
Main application entry point for Media Server Client

Usage:
    python main.py                 load the catalog and keep it refreshed
    python main.py <media-id>      also prepare and play that media item
"""
import sys

import logging
import asyncio
from PyQt6.QtWidgets import QApplication
from PyQt6.QtCore import QtMsgType, qInstallMessageHandler
import qasync

from src.utils.formatting import format_file_size, format_uptime


# Qt message handler routes Qt's own diagnostics into logging
def qt_message_handler(mode, context, message):
    if mode == QtMsgType.QtDebugMsg:
        logging.debug(f"Qt: {message}")
    elif mode == QtMsgType.QtInfoMsg:
        logging.info(f"Qt: {message}")
    elif mode == QtMsgType.QtWarningMsg:
        logging.warning(f"Qt: {message}")
    elif mode == QtMsgType.QtCriticalMsg:
        logging.error(f"Qt: {message}")
    elif mode == QtMsgType.QtFatalMsg:
        logging.critical(f"Qt: {message}")


def setup_logging():
    """Configure application logging"""
    from src.utils.logging_config import setup_logging as setup_categorized_logging

    logging_manager = setup_categorized_logging()
    qInstallMessageHandler(qt_message_handler)

    logger = logging.getLogger(__name__)
    logger.info("="*50)
    logger.info("Media Server Client Starting")
    logger.info("="*50)

    return logging_manager


async def async_main(logging_manager, media_id=None):
    """Async main function with Qt event loop integration"""
    logger = logging.getLogger(__name__)

    from src.core.catalog_manager import auto_refresh_interval_from_settings
    from src.core.context import ClientContext
    from src.ui.session_signals import SessionSignals

    app = QApplication.instance()

    logger.info("Initializing client context...")
    core = ClientContext()
    logging_manager.attach_database(core.db)
    app._core_context = core

    try:
        status = await core.server_status()
        if isinstance(status, dict) and status.get("uptime") is not None:
            logger.info(f"Server status: {status.get('status')} (up {format_uptime(int(status['uptime']))})")
        else:
            logger.info(f"Server status: {status}")
    except Exception as e:
        logger.warning(f"Failed to load server status: {e}")

    try:
        snapshot = await core.catalog.refresh()
        stats = snapshot.stats
        logger.info(
            f"Media library loaded: {stats.total_files} files, "
            f"{format_file_size(stats.total_size_bytes)}, "
            f"{len(stats.distinct_formats)} formats"
        )
    except Exception as e:
        logger.error(f"Failed to load media library: {e}")

    core.catalog.start_auto_refresh(auto_refresh_interval_from_settings(core.db))

    if not media_id:
        return

    signals = SessionSignals(core.sessions, app)
    signals.ready.connect(lambda stream_id: logger.info(f"Now playing stream {stream_id}"))
    signals.failed.connect(lambda msg: logger.error(f"Stream error: {msg}"))
    signals.timed_out.connect(lambda msg: logger.warning(msg))
    app._session_signals = signals

    media = core.catalog.get_by_id(media_id)
    if media is None:
        try:
            media = await core.catalog.fetch_details(media_id)
        except Exception as e:
            logger.error(f"Failed to load media details for {media_id}: {e}")
            return

    if not media.is_playable:
        logger.warning(f"{media.filename} does not look like a streamable media file")
    details = [media.display_size, media.display_duration]
    if media.resolution:
        details.append(media.resolution)
    if media.display_bitrate:
        details.append(media.display_bitrate)
    logger.info(f"Preparing {media.filename} ({', '.join(details)})")
    started = asyncio.get_running_loop().time()
    session = await core.sessions.start_playback(media)
    elapsed = int(asyncio.get_running_loop().time() - started)
    logger.info(f"Session finished as {session.state.value} after {format_uptime(elapsed)}")


def main():
    """Main application entry point"""
    logging_manager = setup_logging()
    logger = logging.getLogger(__name__)

    media_id = sys.argv[1] if len(sys.argv) > 1 else None

    try:
        app = QApplication(sys.argv)
        app.setApplicationName("Media Server Client")
        app.setApplicationVersion("1.0.0")
        app.setQuitOnLastWindowClosed(False)

        loop = qasync.QEventLoop(app)
        asyncio.set_event_loop(loop)

        logger.info("Starting application with asyncio event loop integration")

        with loop:
            try:
                loop.run_until_complete(async_main(logging_manager, media_id))
                loop.run_forever()
            finally:
                logger.info("Shutting down...")
                if hasattr(app, '_core_context'):
                    loop.run_until_complete(app._core_context.close())

    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)
    logger.info("Application closed")


if __name__ == "__main__":
    main()
