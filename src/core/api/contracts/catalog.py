from __future__ import annotations

from typing import Any, Dict, List, Protocol


class CatalogAPIClient(Protocol):
    async def get_media_list(self) -> List[dict]:
        ...

    async def get_media(self, media_id: str) -> dict:
        ...

    async def rescan(self) -> Dict[str, Any]:
        ...
