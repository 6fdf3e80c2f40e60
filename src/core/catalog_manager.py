from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterable, List, Optional, Tuple

from src.core.api.contracts.catalog import CatalogAPIClient
from src.core.dto.catalog import CatalogSnapshotDTO, CatalogStatsDTO
from src.core.dto.media import MediaRecordDTO
from src.core.errors import RescanFailed

AUTO_REFRESH_INTERVAL_S = 5 * 60

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[CatalogSnapshotDTO], None]


def auto_refresh_interval_from_settings(db_manager) -> int:
    try:
        interval = int(db_manager.get_config("catalog_auto_refresh_s", AUTO_REFRESH_INTERVAL_S))
    except (TypeError, ValueError):
        interval = AUTO_REFRESH_INTERVAL_S
    return interval if interval > 0 else AUTO_REFRESH_INTERVAL_S


def compute_stats(records: Iterable[MediaRecordDTO]) -> CatalogStatsDTO:
    """Aggregate statistics, always computed from the full record list."""
    total_files = 0
    total_size = 0
    formats = set()
    durations: List[float] = []
    for record in records:
        total_files += 1
        total_size += record.size
        if record.format:
            formats.add(record.format.lower())
        if record.duration:
            durations.append(float(record.duration))
    return CatalogStatsDTO(
        total_files=total_files,
        total_size_bytes=total_size,
        distinct_formats=frozenset(formats),
        durations=tuple(durations),
    )


def filter_records(
    records: Tuple[MediaRecordDTO, ...],
    term: Optional[str],
) -> Tuple[MediaRecordDTO, ...]:
    """Case-insensitive substring match on filename or format, order preserved."""
    if not term:
        return tuple(records)
    needle = term.lower()
    return tuple(
        r for r in records
        if needle in r.filename.lower() or (r.format is not None and needle in r.format.lower())
    )


class CatalogManager:
    """
    Authoritative owner of the media catalog.

    Guarantees:
    - A snapshot is swapped in only once it is fully assembled
    - Stats are recomputed from the whole list, never patched
    - The filtered projection is always a subsequence of the list
    - A failed refresh leaves the last good snapshot in place
    """

    def __init__(self, client: CatalogAPIClient):
        self._client = client
        self._snapshot = CatalogSnapshotDTO()
        self._search_term: Optional[str] = None
        self._refresh_lock = asyncio.Lock()
        self._listeners: List[SnapshotListener] = []
        self._auto_refresh_task: Optional[asyncio.Task] = None

    # ---------------------------------------------------------
    # Read access
    # ---------------------------------------------------------

    @property
    def snapshot(self) -> CatalogSnapshotDTO:
        return self._snapshot

    @property
    def search_term(self) -> Optional[str]:
        return self._search_term

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, snapshot: CatalogSnapshotDTO) -> None:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Catalog listener failed")

    # ---------------------------------------------------------
    # Refresh
    # ---------------------------------------------------------

    async def refresh(self) -> CatalogSnapshotDTO:
        async with self._refresh_lock:
            try:
                raw_list = await self._client.get_media_list()
            except Exception as e:
                logger.error(f"Catalog refresh failed, keeping {self._snapshot.stats.total_files} records: {e}")
                raise

            records = tuple(self._record_from_raw(raw) for raw in raw_list)
            snapshot = CatalogSnapshotDTO(
                all=records,
                filtered=filter_records(records, self._search_term),
                stats=compute_stats(records),
                search_term=self._search_term,
            )
            self._publish(snapshot)
            logger.info(
                f"Catalog refreshed: {snapshot.stats.total_files} files, "
                f"{len(snapshot.stats.distinct_formats)} formats"
            )
            return snapshot

    async def rescan(self) -> CatalogSnapshotDTO:
        """Ask the server to rescan its library, then reload the catalog."""
        logger.info("Rescanning media library...")
        result = await self._client.rescan()
        if not result.get("success"):
            logger.error("Server refused media library rescan")
            raise RescanFailed("Failed to rescan media library")
        return await self.refresh()

    # ---------------------------------------------------------
    # Projection
    # ---------------------------------------------------------

    def set_search_term(self, term: Optional[str]) -> CatalogSnapshotDTO:
        self._search_term = term or None
        current = self._snapshot
        snapshot = CatalogSnapshotDTO(
            all=current.all,
            filtered=filter_records(current.all, self._search_term),
            stats=current.stats,
            search_term=self._search_term,
        )
        self._publish(snapshot)
        return snapshot

    # ---------------------------------------------------------
    # Lookup
    # ---------------------------------------------------------

    def get_by_id(self, media_id: str) -> Optional[MediaRecordDTO]:
        for record in self._snapshot.all:
            if record.id == media_id:
                return record
        return None

    async def fetch_details(self, media_id: str) -> MediaRecordDTO:
        """Full detail record, sourced from the server rather than the local list."""
        raw = await self._client.get_media(media_id)
        return self._record_from_raw(raw)

    # ---------------------------------------------------------
    # Auto refresh
    # ---------------------------------------------------------

    def start_auto_refresh(self, interval: float = AUTO_REFRESH_INTERVAL_S) -> asyncio.Task:
        self.stop_auto_refresh()
        self._auto_refresh_task = asyncio.get_running_loop().create_task(
            self._auto_refresh_loop(interval)
        )
        return self._auto_refresh_task

    def stop_auto_refresh(self) -> None:
        if self._auto_refresh_task is not None:
            self._auto_refresh_task.cancel()
            self._auto_refresh_task = None

    async def _auto_refresh_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await self.refresh()
            except Exception as e:
                logger.warning(f"Auto refresh failed: {e}")

    # ---------------------------------------------------------
    # Internal
    # ---------------------------------------------------------

    def _record_from_raw(self, raw: dict) -> MediaRecordDTO:
        return MediaRecordDTO(
            id=str(raw["id"]),
            filename=raw.get("filename") or "",
            format=raw.get("format"),
            size=int(raw.get("size") or 0),
            duration=float(raw.get("duration") or 0.0),
            created_time=raw.get("created_time"),
            width=raw.get("width"),
            height=raw.get("height"),
            bitrate=raw.get("bitrate"),
            video_codec=raw.get("video_codec"),
            audio_codec=raw.get("audio_codec"),
            audio_sample_rate=raw.get("audio_sample_rate"),
            path=raw.get("path"),
        )
