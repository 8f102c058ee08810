"""Tender queries, dashboard statistics and tender mutations."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Optional

from tenderdesk.features.base import FeatureService, QuerySpec, query_spec
from tenderdesk.features.keys import QueryKeys
from tenderdesk.query.mutation import Mutation
from tenderdesk.shared.constants import Messages, Tables, TenderStatuses
from tenderdesk.shared.models.database import Tender, TenderStats
from tenderdesk.shared.models.table_query import Order, TableQuery
from tenderdesk.shared.types import ModelConverter
from tenderdesk.utils.formatting import round_half_up

logger = logging.getLogger(__name__)

TENDER_COLUMNS = "*, organization:organizations(*), category:tender_categories(*)"
TENDER_DETAIL_COLUMNS = TENDER_COLUMNS + ", bid_opening_results(*)"
UPCOMING_COLUMNS = "*, organization:organizations(name)"

UPCOMING_WINDOW = timedelta(days=7)
UPCOMING_LIMIT = 10


def compute_tender_stats(rows: Iterable[dict[str, Any]]) -> TenderStats:
    """Aggregate dashboard figures from ``status/our_bid_amount/applied`` rows."""
    rows = list(rows)
    status_counts = dict.fromkeys(TenderStatuses.ALL, 0)
    for row in rows:
        status = row.get("status")
        if status in status_counts:
            status_counts[status] += 1

    open_rows = [row for row in rows if row.get("status") not in TenderStatuses.CLOSED]
    won = status_counts[TenderStatuses.WON]
    lost = status_counts[TenderStatuses.LOST]
    win_rate = won / (won + lost) * 100 if won + lost > 0 else 0

    return TenderStats(
        total_active=len(open_rows),
        submitted=sum(1 for row in rows if row.get("applied")),
        win_rate=int(round_half_up(win_rate)),
        pipeline_value=sum(row.get("our_bid_amount") or 0 for row in open_rows),
        status_counts=status_counts,
        total=len(rows),
    )


class TenderService(FeatureService):
    """Tenders of the active company."""

    def tenders_query(self) -> QuerySpec:
        company_id = self.company_id

        async def load() -> list[Tender]:
            rows = await self.data.select(
                TableQuery(
                    Tables.TENDERS,
                    columns=TENDER_COLUMNS,
                    eq={"user_company_id": company_id},
                    order=(Order("due_date"),),
                )
            )
            return ModelConverter.to_models(rows, Tender)

        key = QueryKeys.tenders(company_id) if company_id else None
        return query_spec(key, load, placeholder=[])

    def tender_query(self, tender_id: Optional[str]) -> QuerySpec:
        company_id = self.company_id

        async def load() -> Tender:
            row = await self.data.select(
                TableQuery(
                    Tables.TENDERS,
                    columns=TENDER_DETAIL_COLUMNS,
                    eq={"id": tender_id, "user_company_id": company_id},
                ).single()
            )
            return ModelConverter.to_model(row, Tender)

        key = QueryKeys.tender(company_id, tender_id) if company_id and tender_id else None
        return query_spec(key, load)

    def stats_query(self) -> QuerySpec:
        company_id = self.company_id

        async def load() -> TenderStats:
            rows = await self.data.select(
                TableQuery(
                    Tables.TENDERS,
                    columns="status, our_bid_amount, applied",
                    eq={"user_company_id": company_id},
                )
            )
            return compute_tender_stats(rows or ())

        key = QueryKeys.tender_stats(company_id) if company_id else None
        return query_spec(key, load)

    def upcoming_deadlines_query(self, now: Callable[[], datetime] | None = None) -> QuerySpec:
        """Open tenders due within the next seven days, soonest first."""
        company_id = self.company_id
        clock = now or (lambda: datetime.now(timezone.utc))

        async def load() -> list[Tender]:
            start = clock()
            rows = await self.data.select(
                TableQuery(
                    Tables.TENDERS,
                    columns=UPCOMING_COLUMNS,
                    eq={"user_company_id": company_id},
                    gte={"due_date": start.isoformat()},
                    lte={"due_date": (start + UPCOMING_WINDOW).isoformat()},
                    not_in={"status": TenderStatuses.CLOSED},
                    order=(Order("due_date"),),
                    limit=UPCOMING_LIMIT,
                )
            )
            return ModelConverter.to_models(rows, Tender)

        key = QueryKeys.upcoming_deadlines(company_id) if company_id else None
        return query_spec(key, load, placeholder=[])

    async def list_tenders(self) -> list[Tender]:
        return await self.tenders_query().fetch(self.client)

    async def get_tender(self, tender_id: str) -> Optional[Tender]:
        return await self.tender_query(tender_id).fetch(self.client)

    async def get_stats(self) -> Optional[TenderStats]:
        return await self.stats_query().fetch(self.client)

    async def upcoming_deadlines(self) -> list[Tender]:
        return await self.upcoming_deadlines_query().fetch(self.client)

    # -------------------------------------------------------------- mutations

    def create_tender_mutation(self) -> Mutation[Tender]:
        company_id = self.company_id

        async def create(values: dict[str, Any]) -> Tender:
            user = await self.require_user("create_tender")
            owner = self.require_company("create_tender")
            row = await self.data.insert(
                Tables.TENDERS,
                {**values, "user_company_id": owner, "created_by": user.id},
            )
            return ModelConverter.to_model(row, Tender)

        return self.client.mutation(
            create,
            invalidates=[QueryKeys.tenders(company_id), QueryKeys.dashboard(company_id)],
            success_message=Messages.TENDER_CREATED,
            name="create_tender",
        )

    def update_tender_mutation(self) -> Mutation[Tender]:
        company_id = self.company_id

        async def update(tender_id: str, values: dict[str, Any]) -> Tender:
            row = await self.data.update(
                Tables.TENDERS,
                {**values, "updated_at": datetime.now(timezone.utc).isoformat()},
                {"id": tender_id, "user_company_id": company_id},
            )
            return ModelConverter.to_model(row, Tender)

        return self.client.mutation(
            update,
            invalidates=lambda tender, *_: [
                QueryKeys.tenders(company_id),
                QueryKeys.tender(company_id, tender.id),
                QueryKeys.dashboard(company_id),
            ],
            success_message=Messages.TENDER_UPDATED,
            name="update_tender",
        )

    def delete_tender_mutation(self) -> Mutation[None]:
        company_id = self.company_id

        async def delete(tender_id: str) -> None:
            await self.data.delete(Tables.TENDERS, {"id": tender_id, "user_company_id": company_id})

        return self.client.mutation(
            delete,
            invalidates=[QueryKeys.tenders(company_id), QueryKeys.dashboard(company_id)],
            success_message=Messages.TENDER_DELETED,
            name="delete_tender",
        )

    async def create_tender(self, values: dict[str, Any]) -> Tender:
        return await self.create_tender_mutation()(values)

    async def update_tender(self, tender_id: str, values: dict[str, Any]) -> Tender:
        return await self.update_tender_mutation()(tender_id, values)

    async def delete_tender(self, tender_id: str) -> None:
        await self.delete_tender_mutation()(tender_id)
