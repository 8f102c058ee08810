"""Competitors and the bids they placed against the company's tenders.

A competitor with ``user_company_id`` unset is shared across companies.
"""

from __future__ import annotations

from typing import Any, Optional

from tenderdesk.features.base import FeatureService, QuerySpec, query_spec
from tenderdesk.features.categories import owned_or_system
from tenderdesk.features.keys import QueryKeys
from tenderdesk.query.mutation import Mutation
from tenderdesk.shared.constants import RPC, Messages, Tables
from tenderdesk.shared.models.database import CompetitiveBid, Competitor, DeleteOutcome
from tenderdesk.shared.models.table_query import Order, TableQuery
from tenderdesk.shared.types import ModelConverter

COMPETITIVE_BID_COLUMNS = "*, competitor:competitors(*)"
COMPETITOR_BID_COLUMNS = (
    "*, tender:tenders(id, title, due_date, status, our_bid_amount, organization:organizations(name))"
)


class CompetitorService(FeatureService):
    def competitors_query(self) -> QuerySpec:
        company_id = self.company_id

        async def load() -> list[Competitor]:
            rows = await self.data.select(
                TableQuery(
                    Tables.COMPETITORS,
                    or_filter=owned_or_system("user_company_id", company_id),
                    order=(Order("name"),),
                )
            )
            return ModelConverter.to_models(rows, Competitor)

        key = QueryKeys.competitors(company_id) if company_id else None
        return query_spec(key, load, placeholder=[])

    def competitor_query(self, competitor_id: Optional[str]) -> QuerySpec:
        async def load() -> Competitor:
            row = await self.data.select(TableQuery(Tables.COMPETITORS, eq={"id": competitor_id}).single())
            return ModelConverter.to_model(row, Competitor)

        key = QueryKeys.competitor(competitor_id) if competitor_id else None
        return query_spec(key, load)

    def competitive_bids_query(self, tender_id: Optional[str]) -> QuerySpec:
        async def load() -> list[CompetitiveBid]:
            rows = await self.data.select(
                TableQuery(
                    Tables.COMPETITIVE_BIDS,
                    columns=COMPETITIVE_BID_COLUMNS,
                    eq={"tender_id": tender_id},
                )
            )
            return ModelConverter.to_models(rows, CompetitiveBid)

        key = QueryKeys.competitive_bids(tender_id) if tender_id else None
        return query_spec(key, load, placeholder=[])

    def competitor_bids_query(self, competitor_id: Optional[str]) -> QuerySpec:
        """Bids of one competitor on the active company's tenders."""
        company_id = self.company_id

        async def load() -> list[CompetitiveBid]:
            rows = await self.data.select(
                TableQuery(
                    Tables.COMPETITIVE_BIDS,
                    columns=COMPETITOR_BID_COLUMNS,
                    eq={"competitor_id": competitor_id, "tender.user_company_id": company_id},
                )
            )
            # The embed filter nulls the tender instead of dropping the row
            return ModelConverter.to_models(
                [row for row in rows or () if row.get("tender") is not None],
                CompetitiveBid,
            )

        key = QueryKeys.competitor_bids(competitor_id, company_id) if competitor_id and company_id else None
        return query_spec(key, load, placeholder=[])

    async def list_competitors(self) -> list[Competitor]:
        return await self.competitors_query().fetch(self.client)

    async def get_competitor(self, competitor_id: str) -> Optional[Competitor]:
        return await self.competitor_query(competitor_id).fetch(self.client)

    async def list_competitive_bids(self, tender_id: str) -> list[CompetitiveBid]:
        return await self.competitive_bids_query(tender_id).fetch(self.client)

    async def list_competitor_bids(self, competitor_id: str) -> list[CompetitiveBid]:
        return await self.competitor_bids_query(competitor_id).fetch(self.client)

    # -------------------------------------------------------------- mutations

    def create_competitor_mutation(self) -> Mutation[Competitor]:
        company_id = self.company_id

        async def create(values: dict[str, Any], *, shared: bool = False) -> Competitor:
            owner = self.require_company("create_competitor")
            row = await self.data.insert(
                Tables.COMPETITORS,
                {**values, "user_company_id": None if shared else owner},
            )
            return ModelConverter.to_model(row, Competitor)

        return self.client.mutation(
            create,
            invalidates=[QueryKeys.competitors(company_id)],
            success_message=Messages.COMPETITOR_ADDED,
            name="create_competitor",
        )

    def update_competitor_mutation(self) -> Mutation[Competitor]:
        company_id = self.company_id

        async def update(
            competitor_id: str,
            values: dict[str, Any],
            *,
            shared: Optional[bool] = None,
        ) -> Competitor:
            changes = dict(values)
            if shared is not None:
                changes["user_company_id"] = None if shared else company_id
            row = await self.data.update(Tables.COMPETITORS, changes, {"id": competitor_id})
            return ModelConverter.to_model(row, Competitor)

        return self.client.mutation(
            update,
            invalidates=lambda competitor, *_, **__: [
                QueryKeys.competitors(company_id),
                QueryKeys.competitor(competitor.id),
            ],
            success_message=Messages.COMPETITOR_UPDATED,
            name="update_competitor",
        )

    def delete_competitor_mutation(self) -> Mutation[DeleteOutcome]:
        """Delete a competitor unless bids still reference it.

        A blocked delete is not an error: it notifies the reason and
        returns ``DeleteOutcome(success=False)`` without invalidating.
        """
        company_id = self.company_id

        async def delete(competitor_id: str) -> DeleteOutcome:
            bids = await self.data.count(Tables.COMPETITIVE_BIDS, {"competitor_id": competitor_id})
            if bids > 0:
                self.client.notify_failure(Messages.competitor_has_bids(bids))
                return DeleteOutcome(success=False, blocked_by=bids)

            await self.data.delete(Tables.COMPETITORS, {"id": competitor_id})
            return DeleteOutcome(success=True)

        return self.client.mutation(
            delete,
            invalidates=lambda outcome, *_: [QueryKeys.competitors(company_id)] if outcome.success else [],
            success_message=lambda outcome, *_: Messages.COMPETITOR_DELETED if outcome.success else None,
            name="delete_competitor",
        )

    def create_competitive_bid_mutation(self) -> Mutation[CompetitiveBid]:
        """Record a competitor's bid and bump its encounter count."""

        async def create(values: dict[str, Any]) -> CompetitiveBid:
            row = await self.data.insert(Tables.COMPETITIVE_BIDS, values)
            await self.data.rpc(RPC.INCREMENT_ENCOUNTER_COUNT, {"p_competitor_id": values["competitor_id"]})
            return ModelConverter.to_model(row, CompetitiveBid)

        return self.client.mutation(
            create,
            invalidates=lambda bid, *_: [
                QueryKeys.competitive_bids(bid.tender_id),
                (QueryKeys.COMPETITORS,),
            ],
            success_message=Messages.COMPETITIVE_BID_ADDED,
            name="create_competitive_bid",
        )

    async def create_competitor(self, values: dict[str, Any], *, shared: bool = False) -> Competitor:
        return await self.create_competitor_mutation()(values, shared=shared)

    async def update_competitor(
        self,
        competitor_id: str,
        values: dict[str, Any],
        *,
        shared: Optional[bool] = None,
    ) -> Competitor:
        return await self.update_competitor_mutation()(competitor_id, values, shared=shared)

    async def delete_competitor(self, competitor_id: str) -> DeleteOutcome:
        return await self.delete_competitor_mutation()(competitor_id)

    async def create_competitive_bid(self, values: dict[str, Any]) -> CompetitiveBid:
        return await self.create_competitive_bid_mutation()(values)
