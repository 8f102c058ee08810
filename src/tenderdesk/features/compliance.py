"""AI compliance reports.

A tender that was never analyzed has no report; the query then resolves to
None rather than failing.
"""

from __future__ import annotations

from typing import Optional

from tenderdesk.features.base import FeatureService, QuerySpec, query_spec
from tenderdesk.features.keys import QueryKeys
from tenderdesk.query.client import QueryClient
from tenderdesk.query.mutation import Mutation
from tenderdesk.services.api_client import DashboardAPIClient
from tenderdesk.shared.constants import Messages, Tables
from tenderdesk.shared.models.api import AnalysisResult
from tenderdesk.shared.models.database import TenderComplianceReport
from tenderdesk.shared.models.table_query import Order, TableQuery
from tenderdesk.shared.protocols import CompanyContextProtocol, DataCollaboratorProtocol
from tenderdesk.shared.types import ModelConverter


class ComplianceService(FeatureService):
    def __init__(
        self,
        client: QueryClient,
        data: DataCollaboratorProtocol,
        company: CompanyContextProtocol,
        api: DashboardAPIClient,
    ) -> None:
        super().__init__(client, data, company)
        self.api = api

    def report_query(self, tender_id: Optional[str]) -> QuerySpec:
        """Latest compliance report of a tender, or None."""

        async def load() -> Optional[TenderComplianceReport]:
            row = await self.data.select(
                TableQuery(
                    Tables.TENDER_COMPLIANCE_REPORTS,
                    eq={"tender_id": tender_id},
                    order=(Order("created_at", descending=True),),
                    limit=1,
                ).maybe_single()
            )
            return ModelConverter.to_optional_model(row, TenderComplianceReport)

        key = QueryKeys.compliance(tender_id) if tender_id else None
        return query_spec(key, load)

    async def get_report(self, tender_id: str) -> Optional[TenderComplianceReport]:
        return await self.report_query(tender_id).fetch(self.client)

    def analyze_mutation(self, tender_id: str) -> Mutation[AnalysisResult]:
        """Run the AI analysis of a tender document.

        The dashboard root is invalidated too, since analysis spends credits.
        """

        async def analyze(document_url: str) -> AnalysisResult:
            return await self.api.analyze_tender(tender_id, document_url)

        return self.client.mutation(
            analyze,
            invalidates=[QueryKeys.compliance(tender_id), QueryKeys.dashboard()],
            success_message=Messages.ANALYSIS_COMPLETE,
            name="analyze_tender",
        )

    async def analyze(self, tender_id: str, document_url: str) -> AnalysisResult:
        return await self.analyze_mutation(tender_id)(document_url)
