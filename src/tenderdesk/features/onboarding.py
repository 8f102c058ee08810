"""Sample data for new companies.

A company that has no tenders and never loaded the samples is offered a
seeded workspace: a few organizations, categories and tenders created
server-side for the active company.
"""

from __future__ import annotations

import logging
from typing import Optional

from tenderdesk.features.company import CompanySession
from tenderdesk.features.keys import QueryKeys
from tenderdesk.query.client import QueryClient
from tenderdesk.query.mutation import Mutation
from tenderdesk.services.api_client import DashboardAPIClient
from tenderdesk.shared.constants import Messages
from tenderdesk.shared.errors import create_no_company_error
from tenderdesk.shared.models.api import SampleDataResult

logger = logging.getLogger(__name__)


class SampleDataService:
    def __init__(self, client: QueryClient, api: DashboardAPIClient, session: CompanySession) -> None:
        self.client = client
        self.api = api
        self.session = session

    def offers_sample_data(self, total_tenders: Optional[int]) -> bool:
        company = self.session.current_company
        if company is None or company.has_sample_data:
            return False
        return (total_tenders or 0) == 0

    def load_mutation(self) -> Mutation[SampleDataResult]:
        async def load() -> SampleDataResult:
            if self.session.company_id is None:
                raise create_no_company_error("load_sample_data")
            return await self.api.load_sample_data()

        return self.client.mutation(
            load,
            invalidates=[(root,) for root in QueryKeys.COMPANY_SCOPED],
            success_message=Messages.SAMPLE_DATA_LOADED,
            error_message=Messages.SAMPLE_DATA_FAILED,
            name="load_sample_data",
        )

    async def load_sample_data(self) -> SampleDataResult:
        """Seed the active company, then reload the companies to pick up the flag."""
        result = await self.load_mutation()()
        await self.session.refresh_companies()
        logger.info("Sample data loaded for company %s", self.session.company_id)
        return result
