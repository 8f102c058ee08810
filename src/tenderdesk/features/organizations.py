"""Procuring organizations (municipalities, departments, SOEs)."""

from __future__ import annotations

from typing import Any, Optional

from tenderdesk.features.base import FeatureService, QuerySpec, query_spec
from tenderdesk.features.keys import QueryKeys
from tenderdesk.query.mutation import Mutation
from tenderdesk.shared.constants import Messages, Tables
from tenderdesk.shared.models.database import DeleteOutcome, Organization
from tenderdesk.shared.models.table_query import Order, TableQuery
from tenderdesk.shared.types import ModelConverter


class OrganizationService(FeatureService):
    def organizations_query(self) -> QuerySpec:
        """Shared organizations plus the ones the active company created."""
        company_id = self.company_id

        async def load() -> list[Organization]:
            rows = await self.data.select(
                TableQuery(
                    Tables.ORGANIZATIONS,
                    or_filter=f"shared.eq.true,created_by_company_id.eq.{company_id}",
                    order=(Order("name"),),
                )
            )
            return ModelConverter.to_models(rows, Organization)

        key = QueryKeys.organizations(company_id) if company_id else None
        return query_spec(key, load, placeholder=[])

    def organization_query(self, organization_id: Optional[str]) -> QuerySpec:
        company_id = self.company_id

        async def load() -> Organization:
            row = await self.data.select(TableQuery(Tables.ORGANIZATIONS, eq={"id": organization_id}).single())
            return ModelConverter.to_model(row, Organization)

        key = QueryKeys.organization(company_id, organization_id) if organization_id else None
        return query_spec(key, load)

    async def list_organizations(self) -> list[Organization]:
        return await self.organizations_query().fetch(self.client)

    async def get_organization(self, organization_id: str) -> Optional[Organization]:
        return await self.organization_query(organization_id).fetch(self.client)

    def create_organization_mutation(self) -> Mutation[Organization]:
        company_id = self.company_id

        async def create(values: dict[str, Any]) -> Organization:
            owner = self.require_company("create_organization")
            row = await self.data.insert(Tables.ORGANIZATIONS, {**values, "created_by_company_id": owner})
            return ModelConverter.to_model(row, Organization)

        return self.client.mutation(
            create,
            invalidates=[QueryKeys.organizations(company_id)],
            success_message=Messages.ORGANIZATION_CREATED,
            name="create_organization",
        )

    def update_organization_mutation(self) -> Mutation[Organization]:
        company_id = self.company_id

        async def update(organization_id: str, values: dict[str, Any]) -> Organization:
            row = await self.data.update(Tables.ORGANIZATIONS, values, {"id": organization_id})
            return ModelConverter.to_model(row, Organization)

        return self.client.mutation(
            update,
            invalidates=lambda organization, *_: [
                QueryKeys.organizations(company_id),
                QueryKeys.organization(company_id, organization.id),
            ],
            success_message=Messages.ORGANIZATION_UPDATED,
            name="update_organization",
        )

    def delete_organization_mutation(self) -> Mutation[DeleteOutcome]:
        """Delete an organization unless tenders still reference it."""
        company_id = self.company_id

        async def delete(organization_id: str) -> DeleteOutcome:
            tenders = await self.data.count(Tables.TENDERS, {"organization_id": organization_id})
            if tenders > 0:
                self.client.notify_failure(Messages.organization_has_tenders(tenders))
                return DeleteOutcome(success=False, blocked_by=tenders)

            await self.data.delete(Tables.ORGANIZATIONS, {"id": organization_id})
            return DeleteOutcome(success=True)

        return self.client.mutation(
            delete,
            invalidates=lambda outcome, *_: [QueryKeys.organizations(company_id)] if outcome.success else [],
            success_message=lambda outcome, *_: Messages.ORGANIZATION_DELETED if outcome.success else None,
            name="delete_organization",
        )

    async def create_organization(self, values: dict[str, Any]) -> Organization:
        return await self.create_organization_mutation()(values)

    async def update_organization(self, organization_id: str, values: dict[str, Any]) -> Organization:
        return await self.update_organization_mutation()(organization_id, values)

    async def delete_organization(self, organization_id: str) -> DeleteOutcome:
        return await self.delete_organization_mutation()(organization_id)
