"""
Tests for CatalogManager.

Tests cover:
- Snapshot assembly and stats recomputation on refresh
- Search projection (exact subsequence, case-insensitive, order preserving)
- Last-good snapshot retention on failure
- Detail lookup, rescan and auto refresh
"""

import asyncio
from typing import List, Optional

import pytest

from src.core.catalog_manager import CatalogManager, compute_stats, filter_records
from src.core.errors import NetworkError, RescanFailed


def _raw(
    media_id: str,
    filename: str,
    *,
    fmt: Optional[str] = "mp4",
    size: int = 100,
    duration: float = 10.0,
) -> dict:
    return {
        "id": media_id,
        "filename": filename,
        "format": fmt,
        "size": size,
        "duration": duration,
        "created_time": "2024-01-01T00:00:00Z",
    }


class StubCatalogClient:
    def __init__(self, media: List[dict]) -> None:
        self.media = media
        self.fail_next = False
        self.rescan_success = True
        self.list_calls = 0
        self.detail_calls: List[str] = []

    async def get_media_list(self) -> List[dict]:
        self.list_calls += 1
        if self.fail_next:
            self.fail_next = False
            raise NetworkError("server unreachable")
        return list(self.media)

    async def get_media(self, media_id: str) -> dict:
        self.detail_calls.append(media_id)
        detail = dict(next(m for m in self.media if m["id"] == media_id))
        detail.update({"width": 1920, "height": 1080, "video_codec": "h264"})
        return detail

    async def rescan(self) -> dict:
        return {"success": self.rescan_success}


LIBRARY = [
    _raw("1", "Holiday.MP4", fmt="mp4", size=1000, duration=60.0),
    _raw("2", "concert.mkv", fmt="mkv", size=2000, duration=120.5),
    _raw("3", "podcast.mp3", fmt="MP3", size=300, duration=0.0),
    _raw("4", "notes", fmt=None, size=0, duration=5.0),
    _raw("5", "mp4_tutorial.webm", fmt="webm", size=50, duration=30.0),
]


def _refreshed(media: List[dict]):
    async def run():
        client = StubCatalogClient(media)
        manager = CatalogManager(client)
        snapshot = await manager.refresh()
        return manager, client, snapshot

    return asyncio.run(run())


def test_refresh_computes_stats_from_full_list() -> None:
    _, _, snapshot = _refreshed(LIBRARY)

    assert snapshot.stats.total_files == len(snapshot.all) == 5
    assert snapshot.stats.total_size_bytes == 3350
    assert snapshot.stats.distinct_formats == frozenset({"mp4", "mkv", "mp3", "webm"})
    assert snapshot.stats.durations == (60.0, 120.5, 5.0, 30.0)
    assert snapshot.filtered == snapshot.all


def test_refresh_of_empty_catalog() -> None:
    _, _, snapshot = _refreshed([])

    assert snapshot.all == ()
    assert snapshot.filtered == ()
    assert snapshot.stats.total_files == 0
    assert snapshot.stats.total_size_bytes == 0
    assert snapshot.stats.distinct_formats == frozenset()


def test_refresh_twice_yields_identical_snapshots() -> None:
    async def run():
        manager = CatalogManager(StubCatalogClient(LIBRARY))
        first = await manager.refresh()
        second = await manager.refresh()
        return first, second

    first, second = asyncio.run(run())

    assert first == second


@pytest.mark.parametrize("term", ["", "mp4", "MP4", "Concert", "mp3", "o", "zzz", "NOTES"])
def test_search_projection_is_exact_subsequence(term: str) -> None:
    manager, _, snapshot = _refreshed(LIBRARY)

    projected = manager.set_search_term(term)

    needle = term.lower()
    expected = tuple(
        r for r in snapshot.all
        if needle in r.filename.lower() or (r.format and needle in r.format.lower())
    )
    assert projected.filtered == expected
    # order-preserving subsequence of all
    positions = [snapshot.all.index(r) for r in projected.filtered]
    assert positions == sorted(positions)


def test_search_matches_filename_or_format() -> None:
    manager, _, _ = _refreshed(LIBRARY)

    ids = [r.id for r in manager.set_search_term("MP4").filtered]

    assert ids == ["1", "5"]


def test_empty_or_none_term_restores_everything() -> None:
    manager, _, snapshot = _refreshed(LIBRARY)
    manager.set_search_term("mkv")

    assert manager.set_search_term("").filtered == snapshot.all
    assert manager.set_search_term(None).filtered == snapshot.all


def test_search_leaves_list_and_stats_untouched() -> None:
    manager, client, snapshot = _refreshed(LIBRARY)

    projected = manager.set_search_term("mkv")

    assert projected.all is snapshot.all
    assert projected.stats is snapshot.stats
    assert client.list_calls == 1


def test_refresh_reapplies_active_search_term() -> None:
    async def run():
        client = StubCatalogClient(LIBRARY[:2])
        manager = CatalogManager(client)
        await manager.refresh()
        manager.set_search_term("holiday")
        client.media = LIBRARY
        return await manager.refresh()

    snapshot = asyncio.run(run())

    assert snapshot.search_term == "holiday"
    assert [r.id for r in snapshot.filtered] == ["1"]
    assert snapshot.stats.total_files == 5


def test_failed_refresh_keeps_last_good_snapshot() -> None:
    async def run():
        client = StubCatalogClient(LIBRARY)
        manager = CatalogManager(client)
        good = await manager.refresh()
        client.fail_next = True
        with pytest.raises(NetworkError):
            await manager.refresh()
        return manager, good

    manager, good = asyncio.run(run())

    assert manager.snapshot is good


def test_get_by_id_uses_local_snapshot() -> None:
    manager, client, _ = _refreshed(LIBRARY)

    assert manager.get_by_id("2").filename == "concert.mkv"
    assert manager.get_by_id("missing") is None
    assert client.detail_calls == []


def test_fetch_details_asks_the_server() -> None:
    async def run():
        client = StubCatalogClient(LIBRARY)
        manager = CatalogManager(client)
        return await manager.fetch_details("2"), client

    record, client = asyncio.run(run())

    assert client.detail_calls == ["2"]
    assert record.resolution == "1920 × 1080"
    assert record.video_codec == "h264"


def test_rescan_refreshes_on_success() -> None:
    async def run():
        client = StubCatalogClient(LIBRARY)
        manager = CatalogManager(client)
        snapshot = await manager.rescan()
        return snapshot, client

    snapshot, client = asyncio.run(run())

    assert client.list_calls == 1
    assert snapshot.stats.total_files == 5


def test_refused_rescan_keeps_catalog() -> None:
    async def run():
        client = StubCatalogClient(LIBRARY)
        manager = CatalogManager(client)
        good = await manager.refresh()
        client.rescan_success = False
        with pytest.raises(RescanFailed):
            await manager.rescan()
        return manager, good, client

    manager, good, client = asyncio.run(run())

    assert manager.snapshot is good
    assert client.list_calls == 1


def test_listeners_receive_published_snapshots() -> None:
    async def run():
        manager = CatalogManager(StubCatalogClient(LIBRARY))
        received = []
        unsubscribe = manager.subscribe(received.append)
        await manager.refresh()
        manager.set_search_term("mkv")
        unsubscribe()
        manager.set_search_term("")
        return received

    received = asyncio.run(run())

    assert len(received) == 2
    assert received[1].search_term == "mkv"


def test_auto_refresh_survives_failures() -> None:
    async def run():
        client = StubCatalogClient(LIBRARY)
        client.fail_next = True
        manager = CatalogManager(client)
        manager.start_auto_refresh(0.01)
        await asyncio.sleep(0.2)
        manager.stop_auto_refresh()
        return manager, client

    manager, client = asyncio.run(run())

    assert client.list_calls >= 2
    assert manager.snapshot.stats.total_files == 5


def test_compute_stats_skips_missing_formats_and_zero_durations() -> None:
    _, _, snapshot = _refreshed(LIBRARY)

    stats = compute_stats(snapshot.all)

    assert "None" not in stats.distinct_formats
    assert 0.0 not in stats.durations
    assert filter_records(snapshot.all, None) == snapshot.all
