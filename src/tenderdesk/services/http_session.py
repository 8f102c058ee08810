"""Async HTTP session manager.

Owns the aiohttp.ClientSession used for the dashboard HTTP API. One manager
belongs to one application container; it is closed when the container shuts
down.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiohttp

from tenderdesk import __version__
from tenderdesk.config.models.api_settings import APISettings

logger = logging.getLogger(__name__)


class HTTPSessionManager:
    """Manages the aiohttp.ClientSession lifecycle.

    The session is created lazily on first use and recreated if it was
    closed in between.
    """

    def __init__(self, settings: APISettings) -> None:
        self._settings = settings
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    async def get_session(self) -> aiohttp.ClientSession:
        async with self._session_lock:
            if self._session is None or self._session.closed:
                self._session = self._create_session()
            return self._session

    def _create_session(self) -> aiohttp.ClientSession:
        timeout = aiohttp.ClientTimeout(total=self._settings.request_timeout)
        headers = {
            "User-Agent": f"TenderDesk/{__version__}",
            "Accept": "application/json",
        }
        if self._settings.access_token:
            headers["Authorization"] = f"Bearer {self._settings.access_token}"

        session = aiohttp.ClientSession(
            base_url=self._settings.dashboard_url.rstrip("/") + "/",
            timeout=timeout,
            headers=headers,
        )
        logger.debug("aiohttp.ClientSession created for %s", self._settings.dashboard_url)
        return session

    async def close(self) -> None:
        """Close the HTTP session and release its connections."""
        async with self._session_lock:
            if self._session is not None and not self._session.closed:
                await self._session.close()
                logger.debug("aiohttp.ClientSession closed")
            self._session = None

    @asynccontextmanager
    async def session_context(self) -> AsyncIterator[aiohttp.ClientSession]:
        """Yield the managed session; closing stays with the manager."""
        yield await self.get_session()

    def is_session_ready(self) -> bool:
        return self._session is not None and not self._session.closed

    async def __aenter__(self) -> HTTPSessionManager:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
