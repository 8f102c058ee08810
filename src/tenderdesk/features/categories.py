"""Tender categories: system-wide ones plus the active company's own."""

from __future__ import annotations

from tenderdesk.features.base import FeatureService, QuerySpec, query_spec
from tenderdesk.features.keys import QueryKeys
from tenderdesk.query.mutation import Mutation
from tenderdesk.shared.constants import Messages, Tables
from tenderdesk.shared.models.database import TenderCategory
from tenderdesk.shared.models.table_query import Order, TableQuery
from tenderdesk.shared.types import ModelConverter


def owned_or_system(column: str, company_id: str) -> str:
    """Disjunction selecting rows of ``company_id`` or with no owner."""
    return f"{column}.is.null,{column}.eq.{company_id}"


class CategoryService(FeatureService):
    def categories_query(self) -> QuerySpec:
        company_id = self.company_id

        async def load() -> list[TenderCategory]:
            rows = await self.data.select(
                TableQuery(
                    Tables.TENDER_CATEGORIES,
                    or_filter=owned_or_system("user_company_id", company_id),
                    order=(Order("name"),),
                )
            )
            return ModelConverter.to_models(rows, TenderCategory)

        key = QueryKeys.categories(company_id) if company_id else None
        return query_spec(key, load, placeholder=[])

    async def list_categories(self) -> list[TenderCategory]:
        return await self.categories_query().fetch(self.client)

    def create_category_mutation(self) -> Mutation[TenderCategory]:
        company_id = self.company_id

        async def create(name: str) -> TenderCategory:
            user = await self.require_user("create_category")
            owner = self.require_company("create_category")
            row = await self.data.insert(
                Tables.TENDER_CATEGORIES,
                {"name": name, "user_company_id": owner, "created_by": user.id},
            )
            return ModelConverter.to_model(row, TenderCategory)

        return self.client.mutation(
            create,
            invalidates=[QueryKeys.categories(company_id)],
            success_message=Messages.CATEGORY_CREATED,
            name="create_category",
        )

    def delete_category_mutation(self) -> Mutation[None]:
        """Delete one of the company's own categories; system ones never match."""
        company_id = self.company_id

        async def delete(category_id: str) -> None:
            await self.data.delete(
                Tables.TENDER_CATEGORIES,
                {"id": category_id, "user_company_id": company_id},
            )

        return self.client.mutation(
            delete,
            invalidates=[QueryKeys.categories(company_id)],
            success_message=Messages.CATEGORY_DELETED,
            name="delete_category",
        )

    async def create_category(self, name: str) -> TenderCategory:
        return await self.create_category_mutation()(name)

    async def delete_category(self, category_id: str) -> None:
        await self.delete_category_mutation()(category_id)
