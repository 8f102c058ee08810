"""AI credit top-ups through Stripe checkout."""

from __future__ import annotations

from tenderdesk.config.models.billing_settings import BillingSettings
from tenderdesk.query.client import QueryClient
from tenderdesk.query.mutation import Mutation
from tenderdesk.services.api_client import DashboardAPIClient
from tenderdesk.shared.errors import create_validation_error


class BillingService:
    def __init__(self, client: QueryClient, api: DashboardAPIClient, settings: BillingSettings) -> None:
        self.client = client
        self.api = api
        self.settings = settings

    def top_up_mutation(self) -> Mutation[str]:
        """Start a checkout session and return its URL.

        Raises:
            DomainError: If ``amount`` is not the supported top-up amount
        """

        async def top_up(amount: int) -> str:
            if amount != self.settings.top_up_amount:
                raise create_validation_error("Invalid top-up amount", field="amount", operation="top_up")
            session = await self.api.create_top_up_session(amount)
            return session.url

        return self.client.mutation(top_up, name="top_up")

    async def top_up(self, amount: int) -> str:
        return await self.top_up_mutation()(amount)
