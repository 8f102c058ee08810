"""Tests for the aiohttp session manager."""

from __future__ import annotations

import pytest

from tenderdesk import __version__
from tenderdesk.config.models import APISettings
from tenderdesk.services.http_session import HTTPSessionManager


class TestHTTPSessionManager:
    @pytest.mark.asyncio
    async def test_session_created_lazily_and_reused(self) -> None:
        manager = HTTPSessionManager(APISettings(request_timeout=12))
        assert not manager.is_session_ready()

        first = await manager.get_session()
        second = await manager.get_session()

        assert first is second
        assert manager.is_session_ready()
        assert first.timeout.total == 12
        assert first.headers["User-Agent"] == f"TenderDesk/{__version__}"
        assert "Authorization" not in first.headers
        await manager.close()

    @pytest.mark.asyncio
    async def test_bearer_token_header(self) -> None:
        async with HTTPSessionManager(APISettings(access_token="tok")) as manager:
            session = await manager.get_session()

            assert session.headers["Authorization"] == "Bearer tok"

        assert session.closed

    @pytest.mark.asyncio
    async def test_closed_session_is_recreated(self) -> None:
        manager = HTTPSessionManager(APISettings())
        first = await manager.get_session()
        await first.close()

        second = await manager.get_session()

        assert second is not first
        await manager.close()
        assert not manager.is_session_ready()

    @pytest.mark.asyncio
    async def test_session_context(self) -> None:
        manager = HTTPSessionManager(APISettings())

        async with manager.session_context() as session:
            assert not session.closed

        assert manager.is_session_ready()
        await manager.close()
