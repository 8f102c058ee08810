"""Tests for bid opening results."""

from __future__ import annotations

import pytest

from tenderdesk.features.bid_results import BidResultService
from tenderdesk.features.tenders import TenderService
from tenderdesk.query import QueryClient
from tenderdesk.shared.constants import Messages
from tests.fakes import FakeDataClient, RecordingNotifier, StaticCompany


def result_row(result_id: str, tender_id: str = "T1", opening_date: str = "2026-02-10T10:00:00+00:00") -> dict:
    return {
        "id": result_id,
        "tender_id": tender_id,
        "opening_date": opening_date,
        "our_bid_amount": 120000.0,
        "lowest_bid_amount": 118500.0,
        "is_lowest_bidder": False,
        "total_bidders": 6,
    }


@pytest.fixture
def service(query_client: QueryClient, data: FakeDataClient, company: StaticCompany) -> BidResultService:
    return BidResultService(query_client, data, company)


class TestBidResultQueries:
    @pytest.mark.asyncio
    async def test_results_ordered_newest_first(self, service: BidResultService, data: FakeDataClient) -> None:
        data.tables["bid_opening_results"] = [
            result_row("R1", opening_date="2026-01-01T10:00:00+00:00"),
            result_row("R2", opening_date="2026-02-01T10:00:00+00:00"),
            result_row("R3", tender_id="T2"),
        ]

        results = await service.list_bid_results("T1")

        assert [r.id for r in results] == ["R2", "R1"]

    @pytest.mark.asyncio
    async def test_missing_tender_disables_query(self, service: BidResultService, data: FakeDataClient) -> None:
        spec = service.bid_results_query(None)

        assert spec.key is None
        assert await spec.fetch(service.client) == []
        assert data.calls == []


class TestBidResultMutations:
    @pytest.mark.asyncio
    async def test_create_refreshes_results_and_tender_list(
        self,
        service: BidResultService,
        data: FakeDataClient,
        notifier: RecordingNotifier,
    ) -> None:
        results = service.bid_results_query("T1").observe(service.client)
        await results.wait()
        tender_list = TenderService(service.client, data, service.company).tenders_query().observe(service.client)
        await tender_list.wait()
        other = service.bid_results_query("T2").observe(service.client)
        await other.wait()
        values = {k: v for k, v in result_row("unused").items() if k != "id"}

        created = await service.create_bid_result(values)
        await service.client.executor.settle()

        assert created.tender_id == "T1"
        assert [r.tender_id for r in results.data] == ["T1"]
        assert [q.eq for q in data.selects("bid_opening_results")] == [
            {"tender_id": "T1"},
            {"tender_id": "T2"},
            {"tender_id": "T1"},
        ]
        assert len(data.selects("tenders")) == 2
        assert tender_list.snapshot.is_stale is False
        assert notifier.successes == [Messages.BID_RESULT_ADDED]

    @pytest.mark.asyncio
    async def test_delete_invalidates_by_tender(
        self,
        service: BidResultService,
        data: FakeDataClient,
        notifier: RecordingNotifier,
    ) -> None:
        data.tables["bid_opening_results"] = [result_row("R1")]
        results = service.bid_results_query("T1").observe(service.client)
        await results.wait()

        await service.delete_bid_result("R1", "T1")
        await service.client.executor.settle()

        assert results.data == []
        assert notifier.successes == [Messages.BID_RESULT_DELETED]
