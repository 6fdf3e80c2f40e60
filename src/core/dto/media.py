from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from src.utils.formatting import (
    format_bitrate,
    format_duration,
    format_file_size,
    get_file_extension,
    is_valid_media_file,
)


@dataclass(frozen=True)
class MediaRecordDTO:
    id: str                     # opaque, unique per server
    filename: str
    format: Optional[str]       # lowercased container/codec tag

    size: int                   # bytes
    duration: float             # seconds
    created_time: Optional[str]

    # technical attributes (full detail payload only)
    width: Optional[int] = None
    height: Optional[int] = None
    bitrate: Optional[int] = None
    video_codec: Optional[str] = None
    audio_codec: Optional[str] = None
    audio_sample_rate: Optional[int] = None
    path: Optional[str] = None

    @property
    def resolution(self) -> Optional[str]:
        if self.width and self.height:
            return f"{self.width} × {self.height}"
        return None

    @property
    def extension(self) -> str:
        return get_file_extension(self.filename)

    @property
    def display_size(self) -> str:
        return format_file_size(self.size)

    @property
    def display_duration(self) -> str:
        return format_duration(self.duration)

    @property
    def display_bitrate(self) -> Optional[str]:
        return format_bitrate(self.bitrate) if self.bitrate else None

    @property
    def is_playable(self) -> bool:
        """Whether the extension is one the server can stream."""
        return is_valid_media_file(self.filename)
