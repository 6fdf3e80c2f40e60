"""
Human-readable formatting for catalog display and status output.
"""
import math
from typing import Optional

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")

VALID_MEDIA_EXTS = {
    ".mp4", ".mkv", ".avi", ".mov", ".flv", ".webm",
    ".mp3", ".wav", ".flac", ".aac", ".ogg", ".m4a",
}


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    i = min(int(math.floor(math.log(size, 1024))), len(_SIZE_UNITS) - 1)
    value = round(size / (1024 ** i), 2)
    # drop a trailing .0 the way a float repr would
    text = f"{value:g}" if value != int(value) else str(int(value))
    return f"{text} {_SIZE_UNITS[i]}"


def format_duration(seconds: float) -> str:
    if seconds < 60:
        return f"{int(seconds)}s"
    total = int(seconds)
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    return f"{h}:{m:02d}:{s:02d}" if h else f"{m}:{s:02d}"


def format_bitrate(bps: int) -> str:
    if bps < 1000:
        return f"{bps} bps"
    if bps < 1_000_000:
        return f"{bps / 1000:.0f} kbps"
    return f"{bps / 1_000_000:.1f} Mbps"


def format_uptime(seconds: int) -> str:
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m {seconds % 60}s"
    if seconds < 86400:
        return f"{seconds // 3600}h {(seconds % 3600) // 60}m"
    return f"{seconds // 86400}d {(seconds % 86400) // 3600}h"


def get_file_extension(filename: Optional[str]) -> str:
    if not filename:
        return ""
    return filename.rsplit(".", 1)[-1].upper()


def is_valid_media_file(filename: Optional[str]) -> bool:
    if not filename or "." not in filename:
        return False
    return "." + filename.rsplit(".", 1)[-1].lower() in VALID_MEDIA_EXTS
