"""Response models of the dashboard HTTP API."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from tenderdesk.shared.models.database import Reminder


class ApiResponse(BaseModel):
    model_config = ConfigDict(extra="allow")


class CheckoutSession(ApiResponse):
    url: str


class WhatsAppTestResult(ApiResponse):
    success: bool
    sid: Optional[str] = None


class AnalysisResult(ApiResponse):
    success: bool = True
    report: Optional[dict[str, Any]] = None


class RemindersResponse(ApiResponse):
    reminders: list[Reminder] = Field(default_factory=list)


class ScheduleResponse(ApiResponse):
    message: str = ""
    scheduled: int = 0
    reminders: list[Reminder] = Field(default_factory=list)


class SendResponse(ApiResponse):
    message: str = ""
    sent: int = 0


class ProposalResult(ApiResponse):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    success: bool = True
    proposal: str = ""
    credits_remaining: Optional[int] = Field(default=None, alias="creditsRemaining")


class PlanParseResult(ApiResponse):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    success: bool = True
    plan_id: str = Field(alias="planId")
    opportunities_count: int = Field(default=0, alias="opportunitiesCount")


class SampleDataResult(ApiResponse):
    success: bool = True
