"""Tests for loading sample data into a new company."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from tenderdesk.config.storage import StateStorage
from tenderdesk.features.auth import AuthSession
from tenderdesk.features.company import CompanySession
from tenderdesk.features.onboarding import SampleDataService
from tenderdesk.query import QueryClient
from tenderdesk.services.api_client import DashboardAPIClient
from tenderdesk.shared.constants import Messages
from tenderdesk.shared.errors import PreconditionError, create_api_error
from tenderdesk.shared.models.api import SampleDataResult
from tests.fakes import FakeDataClient, RecordingNotifier


@pytest.fixture
def data(user) -> FakeDataClient:
    return FakeDataClient(
        {"user_company_members": [{"user_id": "u1", "role": "owner", "user_companies": {"id": "c1", "name": "Acme"}}]},
        user=user,
    )


@pytest.fixture
def session(query_client: QueryClient, data: FakeDataClient, tmp_path: Path) -> CompanySession:
    return CompanySession(query_client, data, AuthSession(query_client, data), StateStorage(tmp_path / "state.toml"))


@pytest.fixture
def api(data: FakeDataClient) -> MagicMock:
    async def seed() -> SampleDataResult:
        data.tables["user_company_members"][0]["user_companies"]["has_sample_data"] = True
        return SampleDataResult(success=True)

    api = MagicMock(spec=DashboardAPIClient)
    api.load_sample_data = AsyncMock(side_effect=seed)
    return api


@pytest.fixture
def service(query_client: QueryClient, api: MagicMock, session: CompanySession) -> SampleDataService:
    return SampleDataService(query_client, api, session)


class TestOffersSampleData:
    @pytest.mark.asyncio
    async def test_offered_to_empty_company(self, service: SampleDataService, session: CompanySession) -> None:
        await session.refresh_companies()

        assert service.offers_sample_data(0) is True
        assert service.offers_sample_data(None) is True
        assert service.offers_sample_data(2) is False

    def test_not_offered_without_company(self, service: SampleDataService) -> None:
        assert service.offers_sample_data(0) is False


class TestLoadSampleData:
    @pytest.mark.asyncio
    async def test_load_refreshes_company_and_scoped_roots(
        self,
        service: SampleDataService,
        session: CompanySession,
        query_client: QueryClient,
        notifier: RecordingNotifier,
    ) -> None:
        await session.refresh_companies()
        for key in (("tenders", "c1"), ("organizations", "c1"), ("dashboard", "c1", "stats"), ("reminders",)):
            query_client.set_query_data(key, [])

        await service.load_sample_data()

        assert session.current_company.has_sample_data is True
        assert service.offers_sample_data(0) is False
        assert query_client.store.get(("tenders", "c1")).is_stale
        assert query_client.store.get(("organizations", "c1")).is_stale
        assert query_client.store.get(("dashboard", "c1", "stats")).is_stale
        assert not query_client.store.get(("reminders",)).is_stale
        assert notifier.successes == [Messages.SAMPLE_DATA_LOADED]

    @pytest.mark.asyncio
    async def test_failure_shows_retry_message(
        self,
        service: SampleDataService,
        session: CompanySession,
        api: MagicMock,
        notifier: RecordingNotifier,
    ) -> None:
        await session.refresh_companies()
        api.load_sample_data.side_effect = create_api_error("No company found", status=404)

        with pytest.raises(Exception, match="No company found"):
            await service.load_sample_data()

        assert notifier.failures == [Messages.SAMPLE_DATA_FAILED]
        assert session.current_company.has_sample_data is False

    @pytest.mark.asyncio
    async def test_requires_company(self, service: SampleDataService, api: MagicMock) -> None:
        with pytest.raises(PreconditionError):
            await service.load_sample_data()

        api.load_sample_data.assert_not_awaited()
