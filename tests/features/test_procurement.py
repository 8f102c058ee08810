"""Tests for procurement plans and their opportunities."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from tenderdesk.features.opportunities import OpportunityService
from tenderdesk.features.procurement_plans import ProcurementPlanService
from tenderdesk.query import QueryClient
from tenderdesk.services.api_client import DashboardAPIClient
from tenderdesk.shared.constants import Messages
from tenderdesk.shared.errors import PreconditionError
from tenderdesk.shared.models.api import PlanParseResult
from tests.fakes import FakeDataClient, RecordingNotifier, StaticCompany


@pytest.fixture
def data(user) -> FakeDataClient:
    return FakeDataClient(
        {
            "procurement_plans": [
                {"id": "p1", "organization_id": "o1", "fiscal_year": "2025/26", "revision_number": 0},
                {"id": "p2", "organization_id": "o1", "fiscal_year": "2025/26", "revision_number": 1},
                {"id": "p3", "organization_id": "o2", "fiscal_year": "2024/25", "user_company_id": "c1"},
                {"id": "p4", "organization_id": "o2", "fiscal_year": "2026/27", "user_company_id": "c2"},
            ],
            "procurement_opportunities": [
                {"id": "x1", "plan_id": "p1", "closing_date": "2026-06-01T00:00:00+00:00"},
                {"id": "x2", "plan_id": "p1", "closing_date": "2026-04-01T00:00:00+00:00"},
                {"id": "x3", "plan_id": "p3", "closing_date": None},
            ],
        },
        user=user,
    )


@pytest.fixture
def api() -> MagicMock:
    api = MagicMock(spec=DashboardAPIClient)
    api.parse_procurement_plan = AsyncMock(return_value=PlanParseResult(plan_id="p9", opportunities_count=2))
    return api

class TestProcurementPlans:
    @pytest.mark.asyncio
    async def test_plans_newest_first(
        self,
        query_client: QueryClient,
        data: FakeDataClient,
        company: StaticCompany,
        api: MagicMock,
    ) -> None:
        plans = await ProcurementPlanService(query_client, data, company, api).list_plans()

        assert [p.id for p in plans] == ["p2", "p1", "p3"]

    @pytest.mark.asyncio
    async def test_plans_by_organization(
        self,
        query_client: QueryClient,
        data: FakeDataClient,
        company: StaticCompany,
        api: MagicMock,
    ) -> None:
        service = ProcurementPlanService(query_client, data, company, api)

        plans = await service.list_plans_by_organization("o2")

        assert [p.id for p in plans] == ["p4", "p3"]

    @pytest.mark.asyncio
    async def test_create_and_delete_refresh_list(
        self,
        query_client: QueryClient,
        data: FakeDataClient,
        company: StaticCompany,
        notifier: RecordingNotifier,
        api: MagicMock,
    ) -> None:
        service = ProcurementPlanService(query_client, data, company, api)
        observer = service.plans_query().observe(query_client)
        await observer.wait()

        plan = await service.create_plan({"organization_id": "o3", "fiscal_year": "2026/27"})
        await query_client.executor.settle()
        assert plan.user_company_id == "c1"
        assert plan.created_by == "u1"
        assert observer.data[0].id == plan.id

        await service.delete_plan(plan.id)
        await query_client.executor.settle()
        assert plan.id not in [p.id for p in observer.data]
        assert notifier.successes == [Messages.PROCUREMENT_PLAN_ADDED, Messages.PROCUREMENT_PLAN_DELETED]


class TestParsePlan:
    @pytest.mark.asyncio
    async def test_parse_uploads_file_and_refreshes(
        self,
        query_client: QueryClient,
        data: FakeDataClient,
        company: StaticCompany,
        api: MagicMock,
        notifier: RecordingNotifier,
        tmp_path: Path,
    ) -> None:
        pdf = tmp_path / "dpw-2025.pdf"
        pdf.write_bytes(b"%PDF-1.7 plan")
        service = ProcurementPlanService(query_client, data, company, api)
        for key in (("procurement-plans", "c1"), ("opportunities", "all"), ("tenders", "c1")):
            query_client.set_query_data(key, [])

        result = await service.parse_plan(pdf, "o1", "2025/26")

        assert result.plan_id == "p9"
        api.parse_procurement_plan.assert_awaited_once_with("dpw-2025.pdf", b"%PDF-1.7 plan", "o1", "2025/26")
        assert query_client.store.get(("procurement-plans", "c1")).is_stale
        assert query_client.store.get(("opportunities", "all")).is_stale
        assert not query_client.store.get(("tenders", "c1")).is_stale
        assert notifier.successes == ["Parsed 2 opportunities from PDF."]

    @pytest.mark.asyncio
    async def test_parse_requires_company(
        self,
        query_client: QueryClient,
        data: FakeDataClient,
        no_company: StaticCompany,
        api: MagicMock,
        tmp_path: Path,
    ) -> None:
        service = ProcurementPlanService(query_client, data, no_company, api)

        with pytest.raises(PreconditionError):
            await service.parse_plan(tmp_path / "missing.pdf", "o1", "2025/26")

        api.parse_procurement_plan.assert_not_awaited()

    def test_parsed_message_singular(self) -> None:
        assert Messages.procurement_plan_parsed(1) == "Parsed 1 opportunity from PDF."


class TestOpportunities:
    @pytest.mark.asyncio
    async def test_opportunities_of_plan_by_closing_date(
        self,
        query_client: QueryClient,
        data: FakeDataClient,
        company: StaticCompany,
    ) -> None:
        opportunities = await OpportunityService(query_client, data, company).list_opportunities("p1")

        assert [o.id for o in opportunities] == ["x2", "x1"]

    @pytest.mark.asyncio
    async def test_all_opportunities_put_undated_last(
        self,
        query_client: QueryClient,
        data: FakeDataClient,
        company: StaticCompany,
    ) -> None:
        opportunities = await OpportunityService(query_client, data, company).list_all_opportunities()

        assert [o.id for o in opportunities] == ["x2", "x1", "x3"]

    @pytest.mark.asyncio
    async def test_missing_plan_disables_query(
        self,
        query_client: QueryClient,
        data: FakeDataClient,
        company: StaticCompany,
    ) -> None:
        assert await OpportunityService(query_client, data, company).opportunities_query(None).fetch(query_client) == []
        assert data.calls == []
