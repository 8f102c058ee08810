"""Opportunities extracted from procurement plans."""

from __future__ import annotations

from typing import Optional

from tenderdesk.features.base import FeatureService, QuerySpec, query_spec
from tenderdesk.features.keys import QueryKeys
from tenderdesk.shared.constants import Tables
from tenderdesk.shared.models.database import ProcurementOpportunity
from tenderdesk.shared.models.table_query import Order, TableQuery
from tenderdesk.shared.types import ModelConverter

ALL_OPPORTUNITIES_COLUMNS = "*, plan:procurement_plans!inner(id, organization:organizations!inner(id, name, type))"


class OpportunityService(FeatureService):
    def opportunities_query(self, plan_id: Optional[str]) -> QuerySpec:
        async def load() -> list[ProcurementOpportunity]:
            rows = await self.data.select(
                TableQuery(
                    Tables.PROCUREMENT_OPPORTUNITIES,
                    eq={"plan_id": plan_id},
                    order=(Order("closing_date"),),
                )
            )
            return ModelConverter.to_models(rows, ProcurementOpportunity)

        key = QueryKeys.opportunities(plan_id) if plan_id else None
        return query_spec(key, load, placeholder=[])

    def all_opportunities_query(self) -> QuerySpec:
        """Every opportunity with its plan and organization, soonest closing first."""

        async def load() -> list[ProcurementOpportunity]:
            rows = await self.data.select(
                TableQuery(
                    Tables.PROCUREMENT_OPPORTUNITIES,
                    columns=ALL_OPPORTUNITIES_COLUMNS,
                    order=(Order("closing_date"),),
                )
            )
            return ModelConverter.to_models(rows, ProcurementOpportunity)

        return query_spec(QueryKeys.all_opportunities(), load, placeholder=[])

    async def list_opportunities(self, plan_id: str) -> list[ProcurementOpportunity]:
        return await self.opportunities_query(plan_id).fetch(self.client)

    async def list_all_opportunities(self) -> list[ProcurementOpportunity]:
        return await self.all_opportunities_query().fetch(self.client)
