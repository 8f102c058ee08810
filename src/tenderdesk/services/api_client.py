"""Client for the dashboard's own HTTP API.

Checkout, messaging, AI analysis, proposal, plan upload, sample data and
reminder endpoints all answer with JSON. A
non-2xx response becomes an ``APIRequestError`` whose message is the JSON
body's ``error`` field, or the plain-text body, so that it can be shown to
the user verbatim.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Mapping, Optional

import aiohttp

from tenderdesk.services.http_session import HTTPSessionManager
from tenderdesk.shared.constants import Messages
from tenderdesk.shared.errors import create_api_error
from tenderdesk.shared.logging import log_api_call
from tenderdesk.shared.models.api import (
    AnalysisResult,
    CheckoutSession,
    PlanParseResult,
    ProposalResult,
    RemindersResponse,
    SampleDataResult,
    ScheduleResponse,
    SendResponse,
    WhatsAppTestResult,
)
from tenderdesk.shared.models.database import Reminder, ReminderType

logger = logging.getLogger(__name__)


class Endpoints:
    """Paths of the dashboard HTTP API."""

    TOP_UP = "api/stripe/top-up"
    WHATSAPP_TEST = "api/whatsapp/test"
    ANALYZE = "api/tenders/analyze"
    REMINDERS = "api/reminders"
    REMINDERS_SCHEDULE = "api/reminders/schedule"
    REMINDERS_SEND = "api/reminders/send"
    GENERATE_PROPOSAL = "api/tenders/{tender_id}/generate-proposal"
    PARSE_PROCUREMENT_PLAN = "api/procurement-plans/parse"
    SAMPLE_DATA = "api/companies/sample-data"


def extract_error_message(body: str, fallback: str) -> str:
    """Pick the user-facing message out of an error response body."""
    text = body.strip()
    if not text:
        return fallback
    try:
        payload = json.loads(text)
    except ValueError:
        return text
    if isinstance(payload, dict):
        error = payload.get("error") or payload.get("message")
        if isinstance(error, str) and error:
            return error
        return fallback
    return text


class DashboardAPIClient:
    """Typed wrapper over the dashboard JSON endpoints.

    Args:
        sessions: Session manager providing the aiohttp session
    """

    def __init__(self, sessions: HTTPSessionManager) -> None:
        self._sessions = sessions

    async def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Mapping[str, Any] | None = None,
        form: aiohttp.FormData | None = None,
        params: Mapping[str, str] | None = None,
        error_fallback: str = "Request failed",
    ) -> Any:
        """Send a request and return the decoded JSON body.

        ``form`` is sent as a multipart body instead of ``json_body``.

        Raises:
            APIRequestError: On any non-2xx status
            aiohttp.ClientError: On transport failures
        """
        session = await self._sessions.get_session()
        started = time.monotonic()
        async with session.request(method, path, json=json_body, data=form, params=params) as response:
            body = await response.text()
            duration_ms = (time.monotonic() - started) * 1000
            log_api_call(logger, path, method, response.status, duration_ms)

            if not 200 <= response.status < 300:
                raise create_api_error(
                    extract_error_message(body, error_fallback),
                    status=response.status,
                    operation=f"{method} {path}",
                )

        if not body:
            return {}
        try:
            return json.loads(body)
        except ValueError as e:
            raise create_api_error(
                "Unexpected response from server",
                status=response.status,
                operation=f"{method} {path}",
                original_error=e,
            ) from e

    # ---------------------------------------------------------------- billing

    async def create_top_up_session(self, amount: int) -> CheckoutSession:
        data = await self.request(
            "POST",
            Endpoints.TOP_UP,
            json_body={"amount": amount},
            error_fallback="Failed to start checkout",
        )
        return CheckoutSession.model_validate(data)

    # -------------------------------------------------------------- messaging

    async def send_whatsapp_test(self, phone: str, company_name: Optional[str] = None) -> WhatsAppTestResult:
        data = await self.request(
            "POST",
            Endpoints.WHATSAPP_TEST,
            json_body={"phone": phone, "companyName": company_name},
            error_fallback="Failed to send test message",
        )
        return WhatsAppTestResult.model_validate(data)

    # ------------------------------------------------------------- compliance

    async def analyze_tender(self, tender_id: str, document_url: str) -> AnalysisResult:
        data = await self.request(
            "POST",
            Endpoints.ANALYZE,
            json_body={"tenderId": tender_id, "documentUrl": document_url},
            error_fallback=Messages.ANALYSIS_FAILED,
        )
        return AnalysisResult.model_validate(data)

    async def generate_proposal(self, tender_id: str) -> ProposalResult:
        """Draft a bid proposal for a tender; costs one AI credit.

        Raises:
            APIRequestError: With status 402 when the company has no credits left
        """
        data = await self.request(
            "POST",
            Endpoints.GENERATE_PROPOSAL.format(tender_id=tender_id),
            error_fallback=Messages.PROPOSAL_FAILED,
        )
        return ProposalResult.model_validate(data)

    # ------------------------------------------------------ procurement plans

    async def parse_procurement_plan(
        self,
        file_name: str,
        content: bytes,
        organization_id: str,
        fiscal_year: str,
    ) -> PlanParseResult:
        """Upload a procurement plan PDF and store the opportunities parsed from it."""
        form = aiohttp.FormData()
        form.add_field("file", content, filename=file_name, content_type="application/pdf")
        form.add_field("organizationId", organization_id)
        form.add_field("fiscalYear", fiscal_year)
        data = await self.request(
            "POST",
            Endpoints.PARSE_PROCUREMENT_PLAN,
            form=form,
            error_fallback=Messages.PROCUREMENT_PLAN_PARSE_FAILED,
        )
        return PlanParseResult.model_validate(data)

    # -------------------------------------------------------------- companies

    async def load_sample_data(self) -> SampleDataResult:
        data = await self.request(
            "POST",
            Endpoints.SAMPLE_DATA,
            error_fallback="Failed to load sample data",
        )
        return SampleDataResult.model_validate(data)

    # -------------------------------------------------------------- reminders

    async def list_reminders(self, tender_id: Optional[str] = None, *, pending: bool = False) -> list[Reminder]:
        params: dict[str, str] = {}
        if tender_id:
            params["tender_id"] = tender_id
        if pending:
            params["pending"] = "true"
        data = await self.request(
            "GET",
            Endpoints.REMINDERS,
            params=params or None,
            error_fallback="Failed to fetch pending reminders" if pending else "Failed to fetch reminders",
        )
        return RemindersResponse.model_validate(data).reminders

    async def create_reminder(
        self,
        tender_id: str,
        reminder_type: ReminderType,
        scheduled_date: str,
    ) -> dict[str, Any]:
        return await self.request(
            "POST",
            Endpoints.REMINDERS,
            json_body={
                "tender_id": tender_id,
                "reminder_type": reminder_type,
                "scheduled_date": scheduled_date,
            },
            error_fallback="Failed to create reminder",
        )

    async def delete_reminder(self, reminder_id: str) -> dict[str, Any]:
        return await self.request(
            "DELETE",
            Endpoints.REMINDERS,
            params={"id": reminder_id},
            error_fallback="Failed to delete reminder",
        )

    async def schedule_reminders(self, tender_id: str) -> ScheduleResponse:
        data = await self.request(
            "POST",
            Endpoints.REMINDERS_SCHEDULE,
            json_body={"tender_id": tender_id},
            error_fallback="Failed to schedule reminders",
        )
        return ScheduleResponse.model_validate(data)

    async def clear_reminders(self, tender_id: str) -> dict[str, Any]:
        return await self.request(
            "DELETE",
            Endpoints.REMINDERS_SCHEDULE,
            params={"tender_id": tender_id},
            error_fallback="Failed to clear reminders",
        )

    async def send_pending_reminders(self) -> SendResponse:
        data = await self.request(
            "POST",
            Endpoints.REMINDERS_SEND,
            error_fallback="Failed to send reminders",
        )
        return SendResponse.model_validate(data)


__all__ = ["DashboardAPIClient", "Endpoints", "extract_error_message"]
