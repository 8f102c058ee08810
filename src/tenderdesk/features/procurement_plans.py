"""Annual procurement plans published by organizations."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from tenderdesk.features.base import FeatureService, QuerySpec, query_spec
from tenderdesk.features.categories import owned_or_system
from tenderdesk.features.keys import QueryKeys
from tenderdesk.query.client import QueryClient
from tenderdesk.query.mutation import Mutation
from tenderdesk.services.api_client import DashboardAPIClient
from tenderdesk.shared.constants import Messages, Tables
from tenderdesk.shared.models.api import PlanParseResult
from tenderdesk.shared.models.database import ProcurementPlan
from tenderdesk.shared.models.table_query import Order, TableQuery
from tenderdesk.shared.protocols import CompanyContextProtocol, DataCollaboratorProtocol
from tenderdesk.shared.types import ModelConverter

PLAN_COLUMNS = "*, organization:organizations(*)"


class ProcurementPlanService(FeatureService):
    def __init__(
        self,
        client: QueryClient,
        data: DataCollaboratorProtocol,
        company: CompanyContextProtocol,
        api: DashboardAPIClient,
    ) -> None:
        super().__init__(client, data, company)
        self.api = api

    def plans_query(self) -> QuerySpec:
        """Shared plans plus the company's own, newest fiscal year and revision first."""
        company_id = self.company_id

        async def load() -> list[ProcurementPlan]:
            rows = await self.data.select(
                TableQuery(
                    Tables.PROCUREMENT_PLANS,
                    columns=PLAN_COLUMNS,
                    or_filter=owned_or_system("user_company_id", company_id),
                    order=(
                        Order("fiscal_year", descending=True),
                        Order("revision_number", descending=True),
                    ),
                )
            )
            return ModelConverter.to_models(rows, ProcurementPlan)

        key = QueryKeys.procurement_plans(company_id) if company_id else None
        return query_spec(key, load, placeholder=[])

    def plan_query(self, plan_id: Optional[str]) -> QuerySpec:
        company_id = self.company_id

        async def load() -> ProcurementPlan:
            row = await self.data.select(
                TableQuery(Tables.PROCUREMENT_PLANS, columns=PLAN_COLUMNS, eq={"id": plan_id}).single()
            )
            return ModelConverter.to_model(row, ProcurementPlan)

        key = QueryKeys.procurement_plan(company_id, plan_id) if plan_id else None
        return query_spec(key, load)

    def plans_by_organization_query(self, organization_id: Optional[str]) -> QuerySpec:
        company_id = self.company_id

        async def load() -> list[ProcurementPlan]:
            rows = await self.data.select(
                TableQuery(
                    Tables.PROCUREMENT_PLANS,
                    columns=PLAN_COLUMNS,
                    eq={"organization_id": organization_id},
                    order=(Order("fiscal_year", descending=True),),
                )
            )
            return ModelConverter.to_models(rows, ProcurementPlan)

        key = QueryKeys.procurement_plans_by_organization(company_id, organization_id) if organization_id else None
        return query_spec(key, load, placeholder=[])

    async def list_plans(self) -> list[ProcurementPlan]:
        return await self.plans_query().fetch(self.client)

    async def get_plan(self, plan_id: str) -> Optional[ProcurementPlan]:
        return await self.plan_query(plan_id).fetch(self.client)

    async def list_plans_by_organization(self, organization_id: str) -> list[ProcurementPlan]:
        return await self.plans_by_organization_query(organization_id).fetch(self.client)

    def create_plan_mutation(self) -> Mutation[ProcurementPlan]:
        company_id = self.company_id

        async def create(values: dict[str, Any]) -> ProcurementPlan:
            owner = self.require_company("create_procurement_plan")
            user = await self.require_user("create_procurement_plan")
            row = await self.data.insert(
                Tables.PROCUREMENT_PLANS,
                {**values, "user_company_id": owner, "created_by": user.id},
                columns=PLAN_COLUMNS,
            )
            return ModelConverter.to_model(row, ProcurementPlan)

        return self.client.mutation(
            create,
            invalidates=[QueryKeys.procurement_plans(company_id)],
            success_message=Messages.PROCUREMENT_PLAN_ADDED,
            name="create_procurement_plan",
        )

    def delete_plan_mutation(self) -> Mutation[None]:
        company_id = self.company_id

        async def delete(plan_id: str) -> None:
            await self.data.delete(Tables.PROCUREMENT_PLANS, {"id": plan_id})

        return self.client.mutation(
            delete,
            invalidates=[QueryKeys.procurement_plans(company_id)],
            success_message=Messages.PROCUREMENT_PLAN_DELETED,
            name="delete_procurement_plan",
        )

    def parse_plan_mutation(self) -> Mutation[PlanParseResult]:
        """Upload a plan PDF; the server stores the plan and its parsed opportunities."""
        company_id = self.company_id

        async def parse(path: Path, organization_id: str, fiscal_year: str) -> PlanParseResult:
            self.require_company("parse_procurement_plan")
            content = Path(path).read_bytes()
            return await self.api.parse_procurement_plan(Path(path).name, content, organization_id, fiscal_year)

        return self.client.mutation(
            parse,
            invalidates=[QueryKeys.procurement_plans(company_id), (QueryKeys.OPPORTUNITIES,)],
            success_message=lambda result, *_: Messages.procurement_plan_parsed(result.opportunities_count),
            name="parse_procurement_plan",
        )

    async def create_plan(self, values: dict[str, Any]) -> ProcurementPlan:
        return await self.create_plan_mutation()(values)

    async def delete_plan(self, plan_id: str) -> None:
        await self.delete_plan_mutation()(plan_id)

    async def parse_plan(self, path: Path, organization_id: str, fiscal_year: str) -> PlanParseResult:
        return await self.parse_plan_mutation()(path, organization_id, fiscal_year)
