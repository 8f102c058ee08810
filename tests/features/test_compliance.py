"""Tests for compliance reports and AI analysis."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from tenderdesk.features.compliance import ComplianceService
from tenderdesk.query import QueryClient
from tenderdesk.services.api_client import DashboardAPIClient
from tenderdesk.shared.constants import Messages
from tenderdesk.shared.errors import APIRequestError, create_api_error
from tenderdesk.shared.models.api import AnalysisResult
from tests.fakes import FakeDataClient, RecordingNotifier, StaticCompany


@pytest.fixture
def api() -> MagicMock:
    api = MagicMock(spec=DashboardAPIClient)
    api.analyze_tender = AsyncMock(return_value=AnalysisResult(success=True))
    return api


@pytest.fixture
def service(
    query_client: QueryClient,
    data: FakeDataClient,
    company: StaticCompany,
    api: MagicMock,
) -> ComplianceService:
    return ComplianceService(query_client, data, company, api)


class TestComplianceReport:
    @pytest.mark.asyncio
    async def test_no_report_resolves_to_none(self, service: ComplianceService, notifier: RecordingNotifier) -> None:
        observer = service.report_query("T1").observe(service.client)

        snapshot = await observer.wait()

        assert snapshot.is_success
        assert snapshot.data is None
        assert notifier.failures == []

    @pytest.mark.asyncio
    async def test_latest_report_wins(self, service: ComplianceService, data: FakeDataClient) -> None:
        data.tables["tender_compliance_reports"] = [
            {"id": "r1", "tender_id": "T1", "created_at": "2026-01-01T00:00:00+00:00"},
            {
                "id": "r2",
                "tender_id": "T1",
                "created_at": "2026-02-01T00:00:00+00:00",
                "requirements": ["CSD registration"],
                "mandatory_checklist": [{"item": "Tax clearance", "status": "done"}],
            },
        ]

        report = await service.get_report("T1")

        assert report.id == "r2"
        assert report.requirements == ["CSD registration"]
        assert report.mandatory_checklist[0].item == "Tax clearance"


class TestAnalyze:
    @pytest.mark.asyncio
    async def test_analysis_refreshes_report(
        self,
        service: ComplianceService,
        data: FakeDataClient,
        api: MagicMock,
        notifier: RecordingNotifier,
    ) -> None:
        observer = service.report_query("T1").observe(service.client)
        await observer.wait()

        async def analyze(tender_id: str, document_url: str) -> AnalysisResult:
            data.tables["tender_compliance_reports"] = [{"id": "r1", "tender_id": tender_id}]
            return AnalysisResult(success=True)

        api.analyze_tender.side_effect = analyze

        await service.analyze("T1", "https://example.com/tender.pdf")
        await service.client.executor.settle()

        api.analyze_tender.assert_awaited_once_with("T1", "https://example.com/tender.pdf")
        assert observer.data.id == "r1"
        assert notifier.successes == [Messages.ANALYSIS_COMPLETE]

    @pytest.mark.asyncio
    async def test_api_failure_is_shown(
        self,
        service: ComplianceService,
        api: MagicMock,
        notifier: RecordingNotifier,
    ) -> None:
        api.analyze_tender.side_effect = create_api_error("Insufficient AI credits", status=402)

        with pytest.raises(APIRequestError):
            await service.analyze("T1", "https://example.com/tender.pdf")

        assert notifier.failures == ["Insufficient AI credits"]
