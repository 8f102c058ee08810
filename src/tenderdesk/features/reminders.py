"""Deadline reminders, served by the dashboard HTTP API.

Reminder keys are not company scoped: the API resolves the company from
the session.
"""

from __future__ import annotations

from typing import Any, Optional

from tenderdesk.features.base import QuerySpec, query_spec
from tenderdesk.features.keys import QueryKeys
from tenderdesk.query.client import QueryClient
from tenderdesk.query.mutation import Mutation
from tenderdesk.services.api_client import DashboardAPIClient
from tenderdesk.shared.constants import Messages
from tenderdesk.shared.models.api import ScheduleResponse, SendResponse
from tenderdesk.shared.models.database import Reminder, ReminderType


class ReminderService:
    def __init__(self, client: QueryClient, api: DashboardAPIClient) -> None:
        self.client = client
        self.api = api

    def reminders_query(self, tender_id: Optional[str] = None) -> QuerySpec:
        """Reminders of one tender, or of all tenders when no id is given."""

        async def load() -> list[Reminder]:
            return await self.api.list_reminders(tender_id)

        return query_spec(QueryKeys.reminders(tender_id), load, placeholder=[])

    def pending_reminders_query(self) -> QuerySpec:
        async def load() -> list[Reminder]:
            return await self.api.list_reminders(pending=True)

        return query_spec(QueryKeys.pending_reminders(), load, placeholder=[])

    async def list_reminders(self, tender_id: Optional[str] = None) -> list[Reminder]:
        return await self.reminders_query(tender_id).fetch(self.client)

    async def list_pending_reminders(self) -> list[Reminder]:
        return await self.pending_reminders_query().fetch(self.client)

    # -------------------------------------------------------------- mutations

    def create_reminder_mutation(self) -> Mutation[dict[str, Any]]:
        return self.client.mutation(
            self.api.create_reminder,
            invalidates=lambda _, tender_id, *__: [
                QueryKeys.all_reminders(),
                QueryKeys.reminders(tender_id),
            ],
            success_message=Messages.REMINDER_CREATED,
            name="create_reminder",
        )

    def delete_reminder_mutation(self) -> Mutation[dict[str, Any]]:
        return self.client.mutation(
            self.api.delete_reminder,
            invalidates=[QueryKeys.all_reminders()],
            success_message=Messages.REMINDER_DELETED,
            name="delete_reminder",
        )

    def schedule_reminders_mutation(self) -> Mutation[ScheduleResponse]:
        """Schedule the default reminders of a tender.

        Scheduling nothing is reported as information, not success.
        """

        def report(response: ScheduleResponse, *_: Any) -> Optional[str]:
            if response.scheduled > 0:
                return Messages.reminders_scheduled(response.scheduled)
            self.client.notify_info(Messages.NO_REMINDERS_TO_SCHEDULE)
            return None

        return self.client.mutation(
            self.api.schedule_reminders,
            invalidates=lambda _, tender_id: [
                QueryKeys.all_reminders(),
                QueryKeys.reminders(tender_id),
            ],
            success_message=report,
            name="schedule_reminders",
        )

    def clear_reminders_mutation(self) -> Mutation[dict[str, Any]]:
        return self.client.mutation(
            self.api.clear_reminders,
            invalidates=lambda _, tender_id: [
                QueryKeys.all_reminders(),
                QueryKeys.reminders(tender_id),
            ],
            success_message=Messages.REMINDERS_CLEARED,
            name="clear_reminders",
        )

    def send_pending_mutation(self) -> Mutation[SendResponse]:
        def report(response: SendResponse, *_: Any) -> Optional[str]:
            if response.sent > 0:
                return Messages.reminders_sent(response.sent)
            self.client.notify_info(Messages.NO_REMINDERS_TO_SEND)
            return None

        return self.client.mutation(
            self.api.send_pending_reminders,
            invalidates=[QueryKeys.all_reminders()],
            success_message=report,
            name="send_pending_reminders",
        )

    async def create_reminder(
        self,
        tender_id: str,
        reminder_type: ReminderType,
        scheduled_date: str,
    ) -> dict[str, Any]:
        return await self.create_reminder_mutation()(tender_id, reminder_type, scheduled_date)

    async def delete_reminder(self, reminder_id: str) -> None:
        await self.delete_reminder_mutation()(reminder_id)

    async def schedule_reminders(self, tender_id: str) -> ScheduleResponse:
        return await self.schedule_reminders_mutation()(tender_id)

    async def clear_reminders(self, tender_id: str) -> None:
        await self.clear_reminders_mutation()(tender_id)

    async def send_pending_reminders(self) -> SendResponse:
        return await self.send_pending_mutation()()
