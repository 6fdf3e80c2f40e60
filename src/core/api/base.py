"""
CORE API TRANSPORT

This module is intentionally UI-agnostic and DTO-agnostic.

Contract goals:
- One request primitive for every media server endpoint
- Non-2xx, network and decode failures are raised, never swallowed
- No retries (retry policy belongs to the caller)
- Returns plain dict/list/str payloads (DTO creation belongs to managers)
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp
from yarl import URL

from src.core.errors import DecodeError, HttpStatusError, NetworkError, TransportError
from src.core.http_client import API_HEADERS, HttpClient

logger = logging.getLogger(__name__)


class ApiTransport:
    """
    Authoritative request primitive.

    Managers must not talk to aiohttp directly; they go through a platform
    client built on top of this transport.
    """

    def __init__(
        self,
        http_client: Optional[HttpClient] = None,
        *,
        base_url: Optional[URL | str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self._http_client = http_client or HttpClient()
        self._session = session
        self.base_url = URL(str(base_url)) if base_url else self._http_client.config.base_url

    # ------------------------------------------------------------------
    # Session / URL helpers
    # ------------------------------------------------------------------

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is not None and not self._session.closed:
            return self._session
        return self._http_client.get_async_session()

    def resolve(self, path: str) -> URL:
        """Absolute URLs pass through, anything else is joined onto the base."""
        if path.startswith("http://") or path.startswith("https://"):
            return URL(path)
        return self.base_url.join(URL(path))

    # ------------------------------------------------------------------
    # Request
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        json_body: Any = None,
    ) -> Any:
        url = self.resolve(path)
        if params:
            url = url.update_query({k: str(v) for k, v in params.items() if v is not None})

        logger.info(f"API Request: {method.upper()} {url}")

        req_headers = dict(API_HEADERS)
        if headers:
            req_headers.update(headers)

        session = self._get_session()
        try:
            async with session.request(
                method.upper(),
                url,
                headers=req_headers,
                data=json.dumps(json_body) if json_body is not None else None,
            ) as resp:
                if not (200 <= resp.status < 300):
                    body = await resp.text(errors="replace")
                    logger.warning(f"  └─ HTTP {resp.status} for {url}")
                    raise HttpStatusError(resp.status, url=str(url), body=body)

                content_type = resp.headers.get("Content-Type", "")
                text = await resp.text()
        except TransportError:
            raise
        except UnicodeDecodeError as e:
            raise DecodeError(f"undecodable response body from {url}: {e}", url=str(url)) from e
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.warning(f"  └─ request failed: {e!r}")
            raise NetworkError(f"request failed: {e}", url=str(url)) from e

        if "application/json" in content_type.lower():
            try:
                return json.loads(text)
            except ValueError as e:
                raise DecodeError(f"malformed JSON from {url}: {e}", url=str(url)) from e
        return text

    async def close(self) -> None:
        await self._http_client.close_async_session()
