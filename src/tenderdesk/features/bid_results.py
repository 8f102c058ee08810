"""Bid opening results of a tender."""

from __future__ import annotations

from typing import Any, Optional

from tenderdesk.features.base import FeatureService, QuerySpec, query_spec
from tenderdesk.features.keys import QueryKeys
from tenderdesk.query.mutation import Mutation
from tenderdesk.shared.constants import Messages, Tables
from tenderdesk.shared.models.database import BidOpeningResult
from tenderdesk.shared.models.table_query import Order, TableQuery
from tenderdesk.shared.types import ModelConverter


class BidResultService(FeatureService):
    def bid_results_query(self, tender_id: Optional[str]) -> QuerySpec:
        async def load() -> list[BidOpeningResult]:
            rows = await self.data.select(
                TableQuery(
                    Tables.BID_OPENING_RESULTS,
                    eq={"tender_id": tender_id},
                    order=(Order("opening_date", descending=True),),
                )
            )
            return ModelConverter.to_models(rows, BidOpeningResult)

        key = QueryKeys.bid_results(tender_id) if tender_id else None
        return query_spec(key, load, placeholder=[])

    async def list_bid_results(self, tender_id: str) -> list[BidOpeningResult]:
        return await self.bid_results_query(tender_id).fetch(self.client)

    def create_bid_result_mutation(self) -> Mutation[BidOpeningResult]:
        """Record a bid opening; refreshes the tender's results and the tender list."""
        company_id = self.company_id

        async def create(values: dict[str, Any]) -> BidOpeningResult:
            row = await self.data.insert(Tables.BID_OPENING_RESULTS, values)
            return ModelConverter.to_model(row, BidOpeningResult)

        return self.client.mutation(
            create,
            invalidates=lambda result, *_: [
                QueryKeys.bid_results(result.tender_id),
                QueryKeys.tenders(company_id),
            ],
            success_message=Messages.BID_RESULT_ADDED,
            name="create_bid_result",
        )

    def delete_bid_result_mutation(self) -> Mutation[str]:
        company_id = self.company_id

        async def delete(result_id: str, tender_id: str) -> str:
            await self.data.delete(Tables.BID_OPENING_RESULTS, {"id": result_id})
            return tender_id

        return self.client.mutation(
            delete,
            invalidates=lambda tender_id, *_: [
                QueryKeys.bid_results(tender_id),
                QueryKeys.tenders(company_id),
            ],
            success_message=Messages.BID_RESULT_DELETED,
            name="delete_bid_result",
        )

    async def create_bid_result(self, values: dict[str, Any]) -> BidOpeningResult:
        return await self.create_bid_result_mutation()(values)

    async def delete_bid_result(self, result_id: str, tender_id: str) -> None:
        await self.delete_bid_result_mutation()(result_id, tender_id)
