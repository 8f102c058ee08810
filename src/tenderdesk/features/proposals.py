"""AI-drafted bid proposals."""

from __future__ import annotations

from tenderdesk.features.keys import QueryKeys
from tenderdesk.query.client import QueryClient
from tenderdesk.query.mutation import Mutation
from tenderdesk.services.api_client import DashboardAPIClient
from tenderdesk.shared.constants import Messages
from tenderdesk.shared.models.api import ProposalResult


def proposal_message(result: ProposalResult, *_args: object) -> str:
    if result.credits_remaining is None:
        return Messages.PROPOSAL_GENERATED
    return Messages.proposal_credits_left(result.credits_remaining)


class ProposalService:
    def __init__(self, client: QueryClient, api: DashboardAPIClient) -> None:
        self.client = client
        self.api = api

    def generate_mutation(self) -> Mutation[ProposalResult]:
        """Draft a proposal for a tender.

        Drafting spends an AI credit of the company, so the company list and
        the dashboard that show the balance are refreshed.
        """
        return self.client.mutation(
            self.api.generate_proposal,
            invalidates=[(QueryKeys.COMPANIES,), QueryKeys.dashboard()],
            success_message=proposal_message,
            name="generate_proposal",
        )

    async def generate(self, tender_id: str) -> ProposalResult:
        return await self.generate_mutation()(tender_id)
