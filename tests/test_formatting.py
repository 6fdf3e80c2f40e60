import pytest

from src.utils.formatting import (
    format_bitrate,
    format_duration,
    format_file_size,
    format_uptime,
    get_file_extension,
    is_valid_media_file,
)


@pytest.mark.parametrize("size, expected", [
    (0, "0 Bytes"),
    (500, "500 Bytes"),
    (1536, "1.5 KB"),
    (1572864, "1.5 MB"),
    (3 * 1024 ** 3 + 1024 ** 3 // 4, "3.25 GB"),
])
def test_format_file_size(size, expected) -> None:
    assert format_file_size(size) == expected


@pytest.mark.parametrize("seconds, expected", [
    (0, "0s"),
    (59.9, "59s"),
    (61, "1:01"),
    (3600, "1:00:00"),
    (3725, "1:02:05"),
])
def test_format_duration(seconds, expected) -> None:
    assert format_duration(seconds) == expected


def test_format_bitrate() -> None:
    assert format_bitrate(800) == "800 bps"
    assert format_bitrate(128_000) == "128 kbps"
    assert format_bitrate(4_500_000) == "4.5 Mbps"


def test_format_uptime() -> None:
    assert format_uptime(42) == "42s"
    assert format_uptime(125) == "2m 5s"
    assert format_uptime(7260) == "2h 1m"
    assert format_uptime(90000) == "1d 1h"


def test_file_extension_and_validity() -> None:
    assert get_file_extension("clip.final.mkv") == "MKV"
    assert get_file_extension(None) == ""
    assert is_valid_media_file("song.FLAC")
    assert not is_valid_media_file("notes.txt")
    assert not is_valid_media_file("README")


def test_media_record_display_properties() -> None:
    from src.core.dto.media import MediaRecordDTO

    record = MediaRecordDTO(
        id="1", filename="trip.mkv", format="mkv", size=1536, duration=125.0,
        created_time=None, width=1280, height=720, bitrate=2_500_000,
    )

    assert record.extension == "MKV"
    assert record.display_size == "1.5 KB"
    assert record.display_duration == "2:05"
    assert record.resolution == "1280 × 720"
    assert record.display_bitrate == "2.5 Mbps"
    assert record.is_playable
