"""
Centralized HTTP client configuration.

Provides aiohttp session management for the media server API with:
- JSON request/response headers
- Connection pooling limits
- Connect/read timeouts
- Base URL derived from the configured server host and port
"""

from __future__ import annotations

import logging
import socket
from typing import Dict, Optional

import aiohttp
from aiohttp import ClientTimeout, TCPConnector
from yarl import URL

logger = logging.getLogger(__name__)


DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8080

# Headers for media server API requests (JSON expected)
API_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class HttpClientConfig:
    """Central HTTP client configuration."""

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        scheme: str = "http",
        max_connections_per_host: int = 10,
        max_total_connections: int = 100,
        connect_timeout: int = 10,
        read_timeout: int = 60,
    ):
        self.host = host
        self.port = port
        self.scheme = scheme
        self.max_connections_per_host = max_connections_per_host
        self.max_total_connections = max_total_connections
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout

    @property
    def base_url(self) -> URL:
        return URL.build(scheme=self.scheme, host=self.host, port=self.port)


class HttpClient:
    """
    HTTP session factory.

    Creates and owns the aiohttp session shared by every API call
    made through one ClientContext.
    """

    def __init__(self, config: Optional[HttpClientConfig] = None):
        self.config = config or HttpClientConfig()
        self._async_session: Optional[aiohttp.ClientSession] = None

    def create_async_session(
        self,
        headers: Optional[Dict[str, str]] = None,
        total_timeout: Optional[int] = None,
    ) -> aiohttp.ClientSession:
        """
        Create a configured aiohttp.ClientSession.

        Must be called from within a running event loop.

        Args:
            headers: Optional headers to use (defaults to API_HEADERS)
            total_timeout: Total request timeout (None for no limit)

        Returns:
            Configured aiohttp.ClientSession
        """
        connector = TCPConnector(
            limit=self.config.max_total_connections,
            limit_per_host=self.config.max_connections_per_host,
            ttl_dns_cache=300,
            family=socket.AF_INET,
            force_close=False,
        )

        timeout = ClientTimeout(
            total=total_timeout,
            connect=self.config.connect_timeout,
            sock_read=self.config.read_timeout,
        )

        session = aiohttp.ClientSession(
            connector=connector,
            timeout=timeout,
            headers=headers or API_HEADERS,
            raise_for_status=False,
        )
        logger.debug(f"Async session created for {self.config.base_url}")

        self._async_session = session
        return session

    def get_async_session(self) -> aiohttp.ClientSession:
        """Get existing session or create new one."""
        if self._async_session is None or self._async_session.closed:
            return self.create_async_session()
        return self._async_session

    async def close_async_session(self):
        if self._async_session and not self._async_session.closed:
            await self._async_session.close()
        self._async_session = None


def create_http_client_from_settings(db_manager) -> HttpClient:
    """
    Create HttpClient configured from database settings.

    Args:
        db_manager: DatabaseManager instance to read settings from

    Returns:
        Configured HttpClient instance
    """
    host = db_manager.get_config("server_host", DEFAULT_HOST) or DEFAULT_HOST
    try:
        port = int(db_manager.get_config("media_server_server_port", DEFAULT_PORT))
    except (TypeError, ValueError):
        port = DEFAULT_PORT

    try:
        connect_timeout = int(db_manager.get_config("http_connect_timeout", 10))
    except (TypeError, ValueError):
        connect_timeout = 10

    try:
        read_timeout = int(db_manager.get_config("http_read_timeout", 60))
    except (TypeError, ValueError):
        read_timeout = 60

    config = HttpClientConfig(
        host=host,
        port=port,
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
    )
    return HttpClient(config)
