from __future__ import annotations

from typing import Any, Dict, List, Optional
import logging

from yarl import URL

from src.core.errors import DecodeError
from .base import ApiTransport


class MediaServerClient:
    """
    Endpoint-per-method client for the media server API.

    Returns normalized dicts; DTO creation belongs to managers.
    """

    _logger = logging.getLogger(__name__)

    def __init__(self, transport: ApiTransport):
        self._transport = transport

    @property
    def base_url(self) -> URL:
        return self._transport.base_url

    # --------------------------------------------------
    # Server
    # --------------------------------------------------

    async def get_status(self) -> Any:
        return await self._transport.request("GET", "/api/status")

    # --------------------------------------------------
    # Catalog
    # --------------------------------------------------

    async def get_media_list(self) -> List[dict]:
        data = await self._transport.request("GET", "/api/media/list")
        if not isinstance(data, dict):
            raise DecodeError("media list response not an object")
        files = data.get("media_files") or []
        if not isinstance(files, list):
            raise DecodeError("media_files is not a list")
        return [self.normalize_media(raw) for raw in files if isinstance(raw, dict)]

    async def get_media(self, media_id: str) -> dict:
        data = await self._transport.request("GET", f"/api/media/{media_id}")
        if not isinstance(data, dict):
            raise DecodeError("media response not an object")
        return self.normalize_media(data)

    async def rescan(self) -> Dict[str, Any]:
        data = await self._transport.request("GET", "/api/media/scan")
        if not isinstance(data, dict):
            return {"success": False}
        return {"success": bool(data.get("success"))}

    # --------------------------------------------------
    # Playback
    # --------------------------------------------------

    async def create_session(self, media_id: str, filename: str = "") -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if media_id:
            params["media_id"] = media_id
        if filename:
            params["filename"] = filename
        data = await self._transport.request("GET", "/api/session/create", params=params)
        if not isinstance(data, dict):
            return {"success": False}
        return {
            "success": bool(data.get("success")),
            "stream_url": data.get("stream_url"),
            "session_id": data.get("session_id"),
        }

    async def create_hls_stream(self, media_id: str) -> Dict[str, Any]:
        data = await self._transport.request("GET", "/api/hls/create", params={"media_id": media_id})
        if not isinstance(data, dict):
            return {"success": False, "stream_id": None}
        stream_id = data.get("stream_id")
        return {
            "success": bool(data.get("success")) and bool(stream_id),
            "stream_id": str(stream_id) if stream_id is not None else None,
        }

    async def get_hls_status(self, stream_id: str) -> Dict[str, Any]:
        data = await self._transport.request("GET", f"/api/hls/status/{stream_id}")
        if not isinstance(data, dict):
            return {"status": "unknown", "error_message": None}
        return {
            "status": str(data.get("status") or "unknown").lower(),
            "error_message": data.get("error_message"),
        }

    # --------------------------------------------------
    # Normalization
    # --------------------------------------------------

    def normalize_media(self, raw: dict) -> dict:
        """
        Convert a raw media object -> normalized dict.

        The server sends numbers as strings for some fields; sizes and
        durations are coerced and clamped so they are never negative.
        """
        fmt = raw.get("format")
        return {
            "id": str(raw.get("id", "")),
            "filename": str(raw.get("filename") or ""),
            "format": str(fmt).lower() if fmt else None,
            "size": max(0, _to_int(raw.get("size")) or 0),
            "duration": max(0.0, _to_float(raw.get("duration")) or 0.0),
            "created_time": raw.get("created_time"),
            "width": _to_int(raw.get("width")),
            "height": _to_int(raw.get("height")),
            "bitrate": _to_int(raw.get("bitrate")),
            "video_codec": raw.get("video_codec"),
            "audio_codec": raw.get("audio_codec"),
            "audio_sample_rate": _to_int(raw.get("audio_sample_rate")),
            "path": raw.get("path"),
        }


def _to_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _to_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
