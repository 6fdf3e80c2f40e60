from __future__ import annotations

from typing import Any, Dict, Protocol

from yarl import URL


class StreamsAPIClient(Protocol):
    base_url: URL

    # HLS preparation
    async def create_hls_stream(self, media_id: str) -> Dict[str, Any]:
        ...

    async def get_hls_status(self, stream_id: str) -> Dict[str, Any]:
        ...

    # Legacy direct session
    async def create_session(self, media_id: str, filename: str = "") -> Dict[str, Any]:
        ...
