"""WhatsApp test messages."""

from __future__ import annotations

from typing import Optional

from tenderdesk.query.client import QueryClient
from tenderdesk.query.mutation import Mutation
from tenderdesk.services.api_client import DashboardAPIClient
from tenderdesk.shared.constants import Messages
from tenderdesk.shared.models.api import WhatsAppTestResult


class MessagingService:
    def __init__(self, client: QueryClient, api: DashboardAPIClient) -> None:
        self.client = client
        self.api = api

    def test_message_mutation(self) -> Mutation[WhatsAppTestResult]:
        return self.client.mutation(
            self.api.send_whatsapp_test,
            success_message=Messages.TEST_MESSAGE_SENT,
            name="send_whatsapp_test",
        )

    async def send_test_message(self, phone: str, company_name: Optional[str] = None) -> WhatsAppTestResult:
        return await self.test_message_mutation()(phone, company_name)
